"""Discovery service — periodic Slurm refresh behind a snapshot cache.

The refresh loop builds a complete new snapshot off to the side and swaps
it in under a short lock. Readers take the current reference under the
same lock and do all further work (copying, JSON encoding) outside it, so
they see either the old or the new snapshot, never a mix.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping, Sequence

from slurm_sd.config import JobConfig
from slurm_sd.discovery.targets import TargetGroup, build_targets
from slurm_sd.slurm.client import SlurmClient, SlurmClientError

logger = logging.getLogger(__name__)

Snapshot = Mapping[str, tuple[TargetGroup, ...]]


class DiscoveryService:
    """Owns the target cache and the background loop that refreshes it."""

    def __init__(
        self,
        client: SlurmClient,
        jobs: Sequence[JobConfig],
        interval_seconds: float = 300.0,
    ) -> None:
        self.client = client
        self.jobs = tuple(jobs)
        self.interval = interval_seconds
        self._lock = threading.Lock()
        self._targets: Snapshot = MappingProxyType({})
        self._running = False
        self._task: asyncio.Task | None = None
        self._last_refresh: str | None = None

    async def start(self) -> None:
        """Start the background refresh loop; the first refresh runs immediately."""
        if self._running:
            logger.warning("Discovery service is already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info("Discovery service started (interval=%ss, jobs=%d)", self.interval, len(self.jobs))

    async def stop(self) -> None:
        """Stop the background loop, abandoning any in-flight refresh."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Discovery service stopped")

    async def refresh(self) -> bool:
        """Fetch nodes and replace the cache.

        Failures are logged and leave the previous snapshot in place.
        Returns True when the cache was replaced.
        """
        try:
            info = await self.client.get_nodes(timeout=self.interval)
            targets = build_targets(info.nodes, self.jobs)
        except SlurmClientError as exc:
            logger.error("Failed to get nodes from Slurm: %s", exc)
            return False
        except Exception as exc:
            logger.exception("Failed to build targets: %s", exc)
            return False

        snapshot = MappingProxyType(targets)
        with self._lock:
            self._targets = snapshot
        self._last_refresh = datetime.now(timezone.utc).isoformat()

        logger.info(
            "Updated targets cache: %d jobs, %d nodes (cluster=%s)",
            len(self.jobs),
            len(info.nodes),
            info.cluster or "-",
        )
        return True

    def get_targets(self, job_name: str) -> tuple[list[TargetGroup], bool]:
        """Return the target groups of one job and whether the job is known."""
        with self._lock:
            snapshot = self._targets
        groups = snapshot.get(job_name)
        if groups is None:
            return [], False
        return list(groups), True

    def get_all_targets(self) -> list[TargetGroup]:
        """Return the target groups of every job, in job order."""
        with self._lock:
            snapshot = self._targets
        return [group for groups in snapshot.values() for group in groups]

    @property
    def running(self) -> bool:
        """Whether the refresh loop is currently active."""
        return self._running

    @property
    def last_refresh(self) -> str | None:
        """ISO timestamp of the last successful refresh, or None."""
        return self._last_refresh

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _loop(self) -> None:
        """Main background loop — refreshes at a fixed rate of one per interval."""
        loop = asyncio.get_running_loop()
        deadline = loop.time()
        while self._running:
            await self.refresh()
            now = loop.time()
            deadline = next_deadline(deadline, now, self.interval)
            await asyncio.sleep(deadline - now)


def next_deadline(previous: float, now: float, interval: float) -> float:
    """Next tick after ``previous`` that is not in the past.

    Ticks missed by a refresh that overran the interval are dropped, not
    replayed back to back.
    """
    deadline = previous + interval
    if deadline < now:
        deadline += ((now - deadline) // interval + 1) * interval
    return deadline

"""Prometheus HTTP service discovery server.

Exposes:
  GET  /targets[?prom_job=NAME]  — HTTP SD document (all jobs, or one job)
  GET  /health                   — liveness check

Start with::

    python -m slurm_sd --config.file config.yaml
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from slurm_sd import __version__
from slurm_sd.discovery import DiscoveryService
from slurm_sd.slurm import SlurmClient

logger = logging.getLogger(__name__)

REFRESH_INTERVAL_HEADER = "X-Prometheus-Refresh-Interval-Seconds"


def create_app(service: DiscoveryService, client: SlurmClient | None = None) -> FastAPI:
    """Build the FastAPI app around a discovery service.

    The app's lifespan starts the refresh loop, and on shutdown stops it
    and closes ``client`` if one is given.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await service.start()
        try:
            yield
        finally:
            await service.stop()
            if client is not None:
                await client.aclose()

    app = FastAPI(title="Prometheus Slurm SD", version=__version__, lifespan=lifespan)

    @app.get("/targets")
    async def targets(request: Request, prom_job: str = "") -> Response:
        refresh_interval = request.headers.get(REFRESH_INTERVAL_HEADER)
        if refresh_interval:
            logger.debug("Received Prometheus refresh interval: %s seconds", refresh_interval)

        if prom_job:
            # Unknown jobs get an empty document, not a 404.
            groups, _ = service.get_targets(prom_job)
        else:
            groups = service.get_all_targets()

        try:
            return JSONResponse([group.to_dict() for group in groups])
        except (TypeError, ValueError) as exc:
            logger.error("Failed to encode targets: %s", exc)
            return PlainTextResponse("Internal server error", status_code=500)

    @app.get("/health")
    async def health() -> Response:
        return PlainTextResponse("OK")

    return app

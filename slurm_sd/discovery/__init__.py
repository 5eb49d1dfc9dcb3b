"""slurm_sd.discovery — Prometheus target generation and caching.

Exports:
    DiscoveryService    — refresh loop + snapshot cache
    TargetGroup         — one ``{"targets": [...], "labels": {...}}`` entry
    build_targets       — node list + jobs → per-job target groups
"""

from __future__ import annotations

from slurm_sd.discovery.service import DiscoveryService
from slurm_sd.discovery.targets import TargetGroup, build_targets

__all__ = [
    "DiscoveryService",
    "TargetGroup",
    "build_targets",
]

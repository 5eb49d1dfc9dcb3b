"""slurm_sd.slurm — slurmrestd client and response models.

Exports:
    SlurmClient         — async node inventory client
    SlurmClientError    — base error (connection / status / decode subclasses)
    Node                — one compute node from the inventory
    NodeInfoResponse    — decoded ``/nodes/`` response body
"""

from __future__ import annotations

from slurm_sd.slurm.client import (
    SlurmClient,
    SlurmClientError,
    SlurmConnectionError,
    SlurmDecodeError,
    SlurmStatusError,
)
from slurm_sd.slurm.models import Node, NodeInfoResponse

__all__ = [
    "Node",
    "NodeInfoResponse",
    "SlurmClient",
    "SlurmClientError",
    "SlurmConnectionError",
    "SlurmDecodeError",
    "SlurmStatusError",
]

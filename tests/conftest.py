"""pytest configuration for Prometheus Slurm SD tests."""

from __future__ import annotations

import pytest

from slurm_sd.config import JobConfig
from slurm_sd.slurm.models import Node, NodeInfoResponse


# Configure asyncio mode for pytest-asyncio
def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


def make_node(name, partitions=("compute",), state=("IDLE",), address="", hostname=None):
    """Build a Node the way slurmrestd would report it."""
    return Node(
        name=name,
        address=address,
        hostname=f"{name}.example.com" if hostname is None else hostname,
        state=state,
        partitions=partitions,
    )


def make_response(nodes, cluster="test-cluster"):
    return NodeInfoResponse.model_validate({
        "nodes": [n.model_dump() for n in nodes],
        "meta": {"slurm": {"cluster": cluster, "release": "23.02.6"}},
    })


@pytest.fixture
def jobs():
    return [JobConfig(name="node", port=9100), JobConfig(name="dcgm", port=9400)]

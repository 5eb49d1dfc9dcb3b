"""Target builder — turns a Slurm node list into Prometheus target groups."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from slurm_sd.config import JobConfig
from slurm_sd.slurm.models import Node

logger = logging.getLogger(__name__)

LABEL_PARTITION = "__meta_slurm_partition"
LABEL_JOB = "__meta_slurm_job"
LABEL_NODE = "__meta_slurm_node"
LABEL_STATE = "__meta_slurm_state"

UNKNOWN_STATE = "unknown"


@dataclass(frozen=True)
class TargetGroup:
    """One entry of a Prometheus HTTP SD document."""

    targets: tuple[str, ...]
    labels: Mapping[str, str]

    def to_dict(self) -> dict:
        return {"targets": list(self.targets), "labels": dict(self.labels)}


def build_targets(
    nodes: Sequence[Node],
    jobs: Iterable[JobConfig],
) -> dict[str, tuple[TargetGroup, ...]]:
    """Build one target group per (job, node, partition).

    Every configured job is present in the result, even when it has no
    targets. Nodes are not filtered by state; the node's first state is
    exposed as a label instead.
    """
    result: dict[str, tuple[TargetGroup, ...]] = {}
    for job in jobs:
        groups = []
        for node in nodes:
            address = node.network_address
            if not address:
                logger.debug("Skipping node %r: no address or hostname", node.name)
                continue
            target = f"{address}:{job.port}"
            state = node.state[0] if node.state else UNKNOWN_STATE
            for partition in dict.fromkeys(node.partitions):
                groups.append(TargetGroup(
                    targets=(target,),
                    labels=MappingProxyType({
                        LABEL_PARTITION: partition,
                        LABEL_JOB: job.name,
                        LABEL_NODE: node.name,
                        LABEL_STATE: state,
                    }),
                ))
        result[job.name] = tuple(groups)
    return result

"""Tests for build_targets — per-node target groups."""

from __future__ import annotations

import json

import pytest

from conftest import make_node
from slurm_sd.config import JobConfig
from slurm_sd.discovery.targets import (
    LABEL_JOB,
    LABEL_NODE,
    LABEL_PARTITION,
    LABEL_STATE,
    TargetGroup,
    build_targets,
)


class TestBuildTargets:
    def test_single_node_example(self):
        nodes = [make_node("n1", partitions=("p1",), state=("IDLE",))]
        result = build_targets(nodes, [JobConfig("node", 9100)])

        assert result["node"] == (
            TargetGroup(
                targets=("n1.example.com:9100",),
                labels={
                    LABEL_PARTITION: "p1",
                    LABEL_JOB: "node",
                    LABEL_NODE: "n1",
                    LABEL_STATE: "IDLE",
                },
            ),
        )

    def test_one_group_per_job_node_partition(self, jobs):
        nodes = [
            make_node("node1", partitions=("compute", "gpu"), address="10.0.0.1"),
            make_node("node2", partitions=("compute",), state=("ALLOCATED",)),
        ]
        result = build_targets(nodes, jobs)

        assert set(result) == {"node", "dcgm"}
        assert len(result["node"]) == 3
        assert [g.targets for g in result["dcgm"]] == [
            ("10.0.0.1:9400",),
            ("10.0.0.1:9400",),
            ("node2.example.com:9400",),
        ]
        assert [g.labels[LABEL_PARTITION] for g in result["node"]] == ["compute", "gpu", "compute"]
        assert result["node"][2].labels[LABEL_STATE] == "ALLOCATED"

    def test_address_preferred_over_hostname(self):
        nodes = [make_node("n1", address="192.168.1.5")]
        result = build_targets(nodes, [JobConfig("node", 9100)])
        assert result["node"][0].targets == ("192.168.1.5:9100",)

    def test_no_state_filtering(self):
        nodes = [
            make_node("up", state=("IDLE",)),
            make_node("down", state=("DOWN", "NOT_RESPONDING")),
            make_node("drained", state=("DRAIN",)),
        ]
        result = build_targets(nodes, [JobConfig("node", 9100)])
        assert [g.labels[LABEL_STATE] for g in result["node"]] == ["IDLE", "DOWN", "DRAIN"]

    def test_empty_state_is_unknown(self):
        result = build_targets([make_node("n1", state=())], [JobConfig("node", 9100)])
        assert result["node"][0].labels[LABEL_STATE] == "unknown"

    def test_node_without_partitions_has_no_targets(self):
        result = build_targets([make_node("n1", partitions=())], [JobConfig("node", 9100)])
        assert result == {"node": ()}

    def test_node_without_address_is_skipped(self):
        result = build_targets([make_node("n1", hostname="")], [JobConfig("node", 9100)])
        assert result == {"node": ()}

    def test_duplicate_partitions_deduplicated(self):
        nodes = [make_node("n1", partitions=("p1", "p2", "p1"))]
        result = build_targets(nodes, [JobConfig("node", 9100)])
        assert [g.labels[LABEL_PARTITION] for g in result["node"]] == ["p1", "p2"]

    def test_empty_node_list_keeps_every_job(self, jobs):
        assert build_targets([], jobs) == {"node": (), "dcgm": ()}

    def test_no_jobs(self):
        assert build_targets([make_node("n1")], []) == {}

    def test_deterministic(self, jobs):
        nodes = [make_node(f"n{i}", partitions=("a", "b")) for i in range(10)]

        def render():
            result = build_targets(nodes, jobs)
            return json.dumps({k: [g.to_dict() for g in v] for k, v in result.items()})

        assert render() == render()


class TestTargetGroup:
    def test_to_dict(self):
        group = TargetGroup(targets=("h:1",), labels={"a": "b"})
        assert group.to_dict() == {"targets": ["h:1"], "labels": {"a": "b"}}

    def test_labels_are_read_only(self):
        result = build_targets([make_node("n1")], [JobConfig("node", 9100)])
        with pytest.raises(TypeError):
            result["node"][0].labels[LABEL_JOB] = "other"

"""Configuration for the Slurm service discovery adapter.

Loaded from a YAML file, then overridden by CLI flags (see
:mod:`slurm_sd.__main__`), then validated once before startup.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_LISTEN_ADDRESS = ":8080"
DEFAULT_API_VERSION = "v0.0.38"
DEFAULT_UPDATE_INTERVAL = "5m"

# Go-style duration units, in seconds.
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


class ConfigError(Exception):
    """Raised when the configuration is missing, malformed or invalid."""


@dataclass(frozen=True)
class JobConfig:
    """A Prometheus scrape job: exporter name and the port it listens on."""

    name: str
    port: int


@dataclass
class Config:
    """Adapter configuration — loaded from config.yaml."""

    slurm_api_endpoint: str = ""
    slurm_api_version: str = DEFAULT_API_VERSION
    slurm_api_username: str = ""
    slurm_api_token: str = ""
    listen_address: str = DEFAULT_LISTEN_ADDRESS
    update_interval: str = DEFAULT_UPDATE_INTERVAL
    jobs: list[JobConfig] = field(default_factory=list)

    @classmethod
    def load(cls, path: str | Path) -> Config:
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                text = f.read()
        except OSError as exc:
            raise ConfigError(f"failed to open config file: {exc}") from exc
        logger.info("Loaded config from %s", path)
        return cls.from_yaml(text)

    @classmethod
    def from_yaml(cls, text: str) -> Config:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"failed to decode config: {exc}") from exc
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError("failed to decode config: top level must be a mapping")
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        known = {k for k in cls.__dataclass_fields__} - {"jobs"}
        values = {k: str(v) for k, v in data.items() if k in known and v not in (None, "")}
        return cls(**values, jobs=_parse_jobs(data.get("jobs")))

    def validate(self) -> None:
        """Raise :class:`ConfigError` if the configuration cannot be used."""
        if not self.slurm_api_endpoint:
            raise ConfigError("Slurm API endpoint is required")
        interval = parse_duration(self.update_interval)
        if interval <= 0:
            raise ConfigError(f"update interval must be positive: {self.update_interval!r}")
        parse_listen_address(self.listen_address)

        seen: set[str] = set()
        for job in self.jobs:
            if not job.name:
                raise ConfigError("job name must not be empty")
            if not 1 <= job.port <= 65535:
                raise ConfigError(f"job {job.name!r} has invalid port {job.port}")
            if job.name in seen:
                raise ConfigError(f"duplicate job name {job.name!r}")
            seen.add(job.name)

    @property
    def interval_seconds(self) -> float:
        return parse_duration(self.update_interval)


def _parse_jobs(raw: Any) -> list[JobConfig]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigError("failed to decode config: 'jobs' must be a list")

    jobs = []
    for entry in raw:
        if not isinstance(entry, dict):
            raise ConfigError(f"failed to decode config: invalid job entry {entry!r}")
        port = entry.get("port", 0)
        if isinstance(port, bool) or not isinstance(port, int):
            raise ConfigError(f"failed to decode config: job port must be an integer, got {port!r}")
        jobs.append(JobConfig(name=str(entry.get("name") or ""), port=port))
    return jobs


def parse_duration(value: str) -> float:
    """Parse a Go-style duration string (``"5m"``, ``"1h30m"``, ``"250ms"``) into seconds."""
    text = value.strip()
    sign = 1.0
    if text[:1] in ("+", "-"):
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
    if text == "0":
        return 0.0

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if not text or pos != len(text):
        raise ConfigError(f"invalid duration: {value!r}")
    return sign * total


def parse_listen_address(address: str) -> tuple[str, int]:
    """Split ``[host]:port`` into a bindable ``(host, port)`` pair.

    An empty host means all interfaces, as in ``":8080"``.
    """
    host, sep, port_text = address.rpartition(":")
    if not sep or not port_text.isdigit():
        raise ConfigError(f"invalid listen address: {address!r}")
    port = int(port_text)
    if port > 65535:
        raise ConfigError(f"invalid listen address: {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host or "0.0.0.0", port

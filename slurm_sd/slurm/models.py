"""Response models for the slurmrestd ``/nodes/`` endpoint.

Only ``nodes`` drives target generation; the remaining fields are decoded
so they can be logged, and are otherwise ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class _SlurmModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)


class Node(_SlurmModel):
    name: str = ""
    address: str = ""
    hostname: str = ""
    state: tuple[str, ...] = ()
    partitions: tuple[str, ...] = ()

    @field_validator("name", "address", "hostname", mode="before")
    @classmethod
    def _null_string(cls, value):
        return "" if value is None else value

    @field_validator("state", "partitions", mode="before")
    @classmethod
    def _null_list(cls, value):
        return () if value is None else value

    @property
    def network_address(self) -> str:
        """The address to scrape: ``address`` if set, else ``hostname``."""
        return self.address or self.hostname


class TimeValue(_SlurmModel):
    number: int = 0
    set: bool = False
    infinite: bool = False


class VersionInfo(_SlurmModel):
    major: str = ""
    minor: str = ""
    micro: str = ""


class SlurmInfo(_SlurmModel):
    cluster: str = ""
    release: str = ""
    version: VersionInfo | None = None


class PluginInfo(_SlurmModel):
    accounting_storage: str = ""
    name: str = ""
    type: str = ""
    data_parser: str = ""


class ClientInfo(_SlurmModel):
    source: str = ""
    user: str = ""
    group: str = ""


class Meta(_SlurmModel):
    slurm: SlurmInfo | None = None
    plugin: PluginInfo | None = None
    client: ClientInfo | None = None


class SlurmError(_SlurmModel):
    description: str = ""
    source: str = ""
    error: str = ""
    error_number: int = 0


class SlurmWarning(_SlurmModel):
    description: str = ""
    source: str = ""


class NodeInfoResponse(_SlurmModel):
    nodes: tuple[Node, ...] = ()
    last_update: TimeValue | None = None
    meta: Meta | None = None
    errors: tuple[SlurmError, ...] = ()
    warnings: tuple[SlurmWarning, ...] = ()

    @field_validator("nodes", "errors", "warnings", mode="before")
    @classmethod
    def _null_list(cls, value):
        return () if value is None else value

    @property
    def cluster(self) -> str:
        if self.meta and self.meta.slurm:
            return self.meta.slurm.cluster
        return ""

    @property
    def release(self) -> str:
        if self.meta and self.meta.slurm:
            return self.meta.slurm.release
        return ""

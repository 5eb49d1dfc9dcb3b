"""Slurm REST API (slurmrestd) client.

Uses httpx for async HTTP. One request per call, no retries: the
discovery refresh loop is the retry mechanism.
"""

from __future__ import annotations

import asyncio
import logging

import httpx
from pydantic import ValidationError

from slurm_sd.slurm.models import NodeInfoResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class SlurmClientError(Exception):
    """Base error for Slurm client failures."""


class SlurmConnectionError(SlurmClientError):
    """Raised when slurmrestd is unreachable or the request times out."""


class SlurmStatusError(SlurmClientError):
    """Raised when slurmrestd answers with a status other than 200."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"unexpected status code: {status_code}, body: {body}")
        self.status_code = status_code
        self.body = body


class SlurmDecodeError(SlurmClientError):
    """Raised when the response body is not a valid node listing."""


class SlurmClient:
    """Thin async wrapper around the slurmrestd node listing.

    Credentials are optional: ``X-SLURM-USER-NAME`` / ``X-SLURM-USER-TOKEN``
    are only sent when configured.
    """

    def __init__(
        self,
        base_url: str,
        api_version: str,
        username: str = "",
        token: str = "",
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.username = username
        self.token = token
        self.timeout = timeout
        self._client: httpx.AsyncClient = httpx.AsyncClient(
            timeout=self.timeout,
            headers=self._headers(),
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client and free resources."""
        await self._client.aclose()

    async def __aenter__(self) -> "SlurmClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    @property
    def nodes_url(self) -> str:
        return f"{self.base_url}/slurm/{self.api_version}/nodes/"

    async def get_nodes(self, timeout: float | None = None) -> NodeInfoResponse:
        """Fetch the current node inventory (GET /slurm/{version}/nodes/).

        ``timeout`` is the caller's deadline in seconds; the shorter of it
        and the client timeout applies.
        """
        url = self.nodes_url
        effective = self.timeout if timeout is None else min(timeout, self.timeout)

        logger.debug("Requesting Slurm nodes from %s", url)
        # httpx timeouts apply per connect/read step; wait_for bounds the whole request.
        try:
            response = await asyncio.wait_for(self._client.get(url, timeout=effective), effective)
        except asyncio.TimeoutError as exc:
            raise SlurmConnectionError(f"Request to {url} timed out after {effective}s") from exc
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            raise SlurmConnectionError(f"Cannot reach slurmrestd at {url}: {exc}") from exc

        if response.status_code != 200:
            raise SlurmStatusError(response.status_code, response.text)

        try:
            info = NodeInfoResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise SlurmDecodeError(f"failed to decode response: {exc}") from exc

        for err in info.errors:
            logger.warning("slurmrestd reported error: %s (%s)", err.error or err.description, err.source)
        for warning in info.warnings:
            logger.warning("slurmrestd reported warning: %s (%s)", warning.description, warning.source)
        return info

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.username:
            headers["X-SLURM-USER-NAME"] = self.username
        if self.token:
            headers["X-SLURM-USER-TOKEN"] = self.token
        return headers

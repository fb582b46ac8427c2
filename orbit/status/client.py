"""Segment status probe over HTTP.

Uses httpx for async HTTP.  Every failure (unreachable host, timeout,
unknown segment, error response, malformed payload) is returned as a
:class:`~orbit.status.types.StatusError` instead of being raised.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from orbit.status.types import RawStatus, RawStatusResult, StatusError, UnitId

logger = logging.getLogger(__name__)


class StatusClient:
    """Thin async wrapper around the segment status endpoint.

    ``GET {base_url}/segments/{id}/status`` returns::

        {"cycles": 1200000000000, "memory_size": 4096,
         "status": "running", "status_at": 1700000000000000000}

    A single :class:`httpx.AsyncClient` is reused across calls for connection
    pooling and keep-alive.  Call :meth:`aclose` (or use as an async context
    manager) when done.
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._client: httpx.AsyncClient = httpx.AsyncClient(
            timeout=self.timeout,
            headers=self._headers(),
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client and free resources."""
        await self._client.aclose()

    async def __aenter__(self) -> "StatusClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def query_segment_status(self, unit_id: UnitId) -> RawStatusResult:
        """Return the raw status of one segment, or the reason it failed."""
        url = f"{self.base_url}/segments/{quote(unit_id, safe='')}/status"
        try:
            response = await self._client.get(url)
        except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
            logger.warning("Status probe for %s unreachable: %s", unit_id, exc)
            return StatusError(f"cannot reach {url}: {exc}")
        except httpx.HTTPError as exc:
            return StatusError(f"status request for {unit_id} failed: {exc}")

        if response.status_code == 404:
            return StatusError(f"segment not found: {unit_id}")
        if response.status_code in (401, 403):
            return StatusError(f"status request for {unit_id} rejected ({response.status_code})")
        if response.is_error:
            return StatusError(
                f"status request for {unit_id} returned {response.status_code}: {response.text[:200]}"
            )

        try:
            return RawStatus.from_dict(response.json())
        except ValueError as exc:
            return StatusError(f"invalid status payload for {unit_id}: {exc}")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

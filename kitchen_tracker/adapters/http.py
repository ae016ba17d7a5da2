"""HTTP backend implementing :class:`~kitchen_tracker.adapters.base.Backend`.

The backend exposes a single endpoint and selects the operation with an
``action`` query parameter. Reads are ``GET``; writes ``POST`` a JSON body.
It uses :mod:`httpx` so calls stay asynchronous alongside the Discord client.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.errors import TransportError
from .base import Backend

log = logging.getLogger("kitchen_tracker.http")


class HttpBackend(Backend):
    """Backend reached through the action-selector HTTP API."""

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Store the endpoint ``base_url`` and optional HTTP ``client``."""
        self.base_url = base_url
        self.client = client or httpx.AsyncClient(timeout=timeout)

    # ------------------------------------------------------------------
    async def _call(
        self, action: str, method: str = "GET", payload: dict[str, Any] | None = None
    ) -> Any:
        params = {"action": action}
        try:
            if method == "POST":
                response = await self.client.post(self.base_url, params=params, json=payload)
            else:
                response = await self.client.get(self.base_url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            log.warning("%s failed with status %s", action, exc.response.status_code)
            raise TransportError(action, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            log.warning("%s failed: %s", action, exc)
            raise TransportError(action, str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            log.warning("%s returned a non-JSON body", action)
            raise TransportError(action, "invalid JSON response") from exc

    async def _rows(self, action: str) -> list[dict[str, Any]]:
        data = await self._call(action)
        if not isinstance(data, list):
            log.warning("%s returned %s instead of a list", action, type(data).__name__)
            raise TransportError(action, "unexpected response shape")
        return data

    # ------------------------------------------------------------------
    async def get_kitchens(self) -> list[dict[str, Any]]:
        return await self._rows("getKitchens")

    async def get_incidents(self) -> list[dict[str, Any]]:
        return await self._rows("getIncidents")

    async def add_kitchen(self, kitchen: dict[str, Any]) -> Any:
        return await self._call("addKitchen", "POST", {"kitchenData": kitchen})

    async def add_incident(self, incident: dict[str, Any]) -> Any:
        return await self._call("addIncident", "POST", {"incidentData": incident})

    async def update_incident(self, incident_id: str, updates: dict[str, Any]) -> Any:
        return await self._call(
            "updateIncident", "POST", {"incidentId": incident_id, "updates": updates}
        )

    async def close(self) -> None:
        """Close the underlying :class:`httpx.AsyncClient`."""
        await self.client.aclose()

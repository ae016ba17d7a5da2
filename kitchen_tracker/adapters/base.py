"""Base interface for the backend record store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Backend(ABC):
    """Abstract record store holding kitchens and incidents.

    Implementations return raw rows and raise
    :class:`~kitchen_tracker.core.errors.TransportError` on any failure.
    """

    @abstractmethod
    async def get_kitchens(self) -> list[dict[str, Any]]:
        """Return every stored kitchen row."""

    @abstractmethod
    async def get_incidents(self) -> list[dict[str, Any]]:
        """Return every stored incident row."""

    @abstractmethod
    async def add_kitchen(self, kitchen: dict[str, Any]) -> Any:
        """Insert a kitchen row."""

    @abstractmethod
    async def add_incident(self, incident: dict[str, Any]) -> Any:
        """Insert an incident row."""

    @abstractmethod
    async def update_incident(self, incident_id: str, updates: dict[str, Any]) -> Any:
        """Patch fields of an existing incident row."""

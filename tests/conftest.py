"""Shared factories for building kitchens, incidents and fake backends."""

from __future__ import annotations

import datetime
import json
import types
from datetime import UTC
from itertools import count
from typing import Any

import pytest

from kitchen_tracker.adapters.base import Backend
from kitchen_tracker.core.errors import TransportError
from kitchen_tracker.core.models import Incident, IncidentCause, Kitchen, TaskStatus

_ids = count(1)


@pytest.fixture()
def make_kitchen():
    def factory(
        seller: str = "Lara",
        installer: str = "Instalador A",
        installation_date: datetime.date = datetime.date(2025, 3, 10),
        **kwargs: Any,
    ) -> Kitchen:
        n = next(_ids)
        data = {
            "id": f"k{n}",
            "ldap": "30104750",
            "order_number": f"80{n:06d}",
            "client_name": f"Client {n}",
        }
        data.update(kwargs)
        return Kitchen(
            seller=seller,
            installer=installer,
            installation_date=installation_date,
            **data,
        )

    return factory


@pytest.fixture()
def make_incident():
    def factory(
        kitchen: Kitchen,
        status: TaskStatus = TaskStatus.PENDING,
        cause: IncidentCause = IncidentCause.OTHER,
        **kwargs: Any,
    ) -> Incident:
        n = next(_ids)
        data = {
            "id": f"i{n:04d}-{kitchen.id}",
            "description": "Door misaligned",
            "created_at": datetime.datetime(2025, 1, 1, tzinfo=UTC),
            "updated_at": datetime.datetime(2025, 1, 1, tzinfo=UTC),
        }
        data.update(kwargs)
        return Incident(kitchen_id=kitchen.id, status=status, cause=cause, **data)

    return factory


class FakeBackend(Backend):
    """In-memory record store that behaves like the remote backend."""

    def __init__(
        self,
        kitchens: list[dict[str, Any]] | None = None,
        incidents: list[dict[str, Any]] | None = None,
    ) -> None:
        self.kitchens = list(kitchens or [])
        self.incidents = list(incidents or [])
        self.failing: set[str] = set()
        self.calls: list[str] = []

    def _check(self, action: str) -> None:
        self.calls.append(action)
        if action in self.failing:
            raise TransportError(action, "HTTP 500")

    async def get_kitchens(self) -> list[dict[str, Any]]:
        self._check("getKitchens")
        return json.loads(json.dumps(self.kitchens))

    async def get_incidents(self) -> list[dict[str, Any]]:
        self._check("getIncidents")
        return json.loads(json.dumps(self.incidents))

    async def add_kitchen(self, kitchen: dict[str, Any]) -> Any:
        self._check("addKitchen")
        self.kitchens.append(kitchen)
        return {"success": True}

    async def add_incident(self, incident: dict[str, Any]) -> Any:
        self._check("addIncident")
        self.incidents.append(incident)
        return {"success": True}

    async def update_incident(self, incident_id: str, updates: dict[str, Any]) -> Any:
        self._check("updateIncident")
        for row in self.incidents:
            if row["id"] == incident_id:
                row.update(updates)
        return {"success": True}


@pytest.fixture()
def fake_backend():
    return FakeBackend()


class _Response:
    def __init__(self) -> None:
        self.messages: list[tuple[Any, dict[str, Any]]] = []
        self.deferred = False
        self.modal = None

    async def send_message(self, content=None, **kwargs) -> None:
        self.messages.append((content, kwargs))

    async def defer(self, **kwargs) -> None:
        self.deferred = True

    async def send_modal(self, modal) -> None:
        self.modal = modal


class _Followup:
    def __init__(self) -> None:
        self.sent: list[tuple[Any, dict[str, Any]]] = []

    async def send(self, content=None, **kwargs) -> None:
        self.sent.append((content, kwargs))


@pytest.fixture()
def make_interaction():
    """Stand-in for ``discord.Interaction`` recording what was sent."""

    def factory(**namespace: Any):
        return types.SimpleNamespace(
            response=_Response(),
            followup=_Followup(),
            namespace=types.SimpleNamespace(**namespace),
            user=types.SimpleNamespace(id=1, display_name="tester"),
        )

    return factory

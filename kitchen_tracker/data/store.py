"""Application state: the loaded kitchens and incidents plus the active filter.

The backend is the only source of truth. Every successful write is followed by
a full reload of both collections, and nothing is patched locally in between,
so what is shown is always what the backend last confirmed. When a call fails
the previous dataset stays in place and :attr:`DashboardStore.error` says why.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Awaitable
from datetime import UTC
from typing import Any

from ..adapters.base import Backend
from ..core import lifecycle
from ..core.directory import IdentityDirectory, Roster
from ..core.errors import TransportError, ValidationError
from ..core.models import Incident, IncidentCause, Kitchen, TaskStatus
from ..core.records import (
    incident_to_record,
    incidents_from_records,
    kitchens_from_records,
    update_to_record,
)
from ..core.scope import Scope, by_month_year

log = logging.getLogger("kitchen_tracker.store")


class DashboardStore:
    """Holds the authoritative dataset and performs write-then-reload."""

    def __init__(
        self,
        backend: Backend,
        directory: IdentityDirectory | None = None,
        roster: Roster | None = None,
    ) -> None:
        self.backend = backend
        self.directory = directory or IdentityDirectory()
        self.roster = roster or Roster()
        self.kitchens: list[Kitchen] = []
        self.incidents: list[Incident] = []
        self.error: str | None = None
        self.loading = False
        self.month: int | None = None
        self.year: int | None = datetime.datetime.now(tz=UTC).year

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    async def reload(self) -> bool:
        """Replace both collections with the backend's current contents."""
        self.loading = True
        self.error = None
        try:
            kitchen_rows = await self.backend.get_kitchens()
            incident_rows = await self.backend.get_incidents()
        except TransportError as exc:
            self.error = str(exc)
            log.error("Reload failed, keeping previous data: %s", exc)
            return False
        finally:
            self.loading = False

        self.kitchens = kitchens_from_records(kitchen_rows)
        self.incidents = incidents_from_records(incident_rows)
        log.info("Loaded %d kitchens and %d incidents", len(self.kitchens), len(self.incidents))
        return True

    async def _submit(self, action: str, call: Awaitable[Any]) -> str | None:
        self.loading = True
        self.error = None
        try:
            await call
        except TransportError as exc:
            self.error = str(exc)
            log.error("%s failed: %s", action, exc)
            return f"Could not save: {exc}"
        finally:
            self.loading = False
        await self.reload()
        return None

    def confirm(self, message: str) -> str:
        """Success reply for a write, noting when the follow-up reload failed."""
        if self.error:
            return f"{message} Reload failed ({self.error}); showing previous data."
        return message

    # ------------------------------------------------------------------
    # Scope and lookups
    # ------------------------------------------------------------------
    def set_period(self, month: int | None, year: int | None) -> None:
        self.month = month or None
        self.year = year or None

    def scope(self) -> Scope:
        return by_month_year(self.kitchens, self.incidents, self.month, self.year)

    def get_kitchen(self, kitchen_id: str) -> Kitchen | None:
        return next((k for k in self.kitchens if k.id == kitchen_id), None)

    def find_kitchen_by_order(self, order_number: str) -> Kitchen | None:
        order_number = (order_number or "").strip()
        return next((k for k in self.kitchens if k.order_number == order_number), None)

    def find_incident(self, ref: str) -> Incident | None:
        """Look up an incident by full id or unique id prefix."""
        ref = (ref or "").strip()
        if not ref:
            return None
        matches = [i for i in self.incidents if i.id.startswith(ref)]
        exact = [i for i in matches if i.id == ref]
        if exact:
            return exact[0]
        return matches[0] if len(matches) == 1 else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def register_kitchen(
        self,
        actor_ldap: str,
        order_number: str,
        client_name: str,
        seller: str,
        installer: str,
        installation_date: datetime.date | str,
    ) -> str | None:
        try:
            kitchen = lifecycle.register_kitchen(
                actor_ldap,
                order_number,
                client_name,
                seller,
                installer,
                installation_date,
                directory=self.directory,
                roster=self.roster,
            )
        except ValidationError as exc:
            return str(exc)
        return await self._submit("addKitchen", self.backend.add_kitchen(kitchen.to_record()))

    async def report_incident(
        self,
        actor_ldap: str,
        kitchen_id: str,
        description: str,
        cause: IncidentCause | None = None,
        initial_note: str = "",
    ) -> str | None:
        try:
            incident = lifecycle.create_incident(
                self.kitchens,
                kitchen_id,
                description,
                actor_ldap,
                cause,
                initial_note,
                directory=self.directory,
            )
        except ValidationError as exc:
            return str(exc)
        return await self._submit(
            "addIncident", self.backend.add_incident(incident_to_record(incident))
        )

    async def add_note(self, incident_id: str, text: str, actor_ldap: str) -> str | None:
        incident = self.find_incident(incident_id)
        if incident is None:
            return "Incident not found."
        try:
            updated = lifecycle.append_observation(
                incident, text, actor_ldap, directory=self.directory
            )
        except ValidationError as exc:
            return str(exc)
        updates = update_to_record(
            {"history": updated.history, "updated_at": updated.updated_at}
        )
        return await self._submit(
            "updateIncident", self.backend.update_incident(incident.id, updates)
        )

    async def change_status(self, incident_id: str, status: TaskStatus | str) -> str | None:
        incident = self.find_incident(incident_id)
        if incident is None:
            return "Incident not found."
        try:
            updated = lifecycle.set_status(incident, status)
        except ValidationError as exc:
            return str(exc)
        updates = update_to_record(
            {"status": updated.status, "updated_at": updated.updated_at}
        )
        return await self._submit(
            "updateIncident", self.backend.update_incident(incident.id, updates)
        )

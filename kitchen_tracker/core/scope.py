"""Narrowing the working set of kitchens and incidents.

Month/year scoping filters kitchens by installation date and then keeps only
the incidents of the surviving kitchens. Drill-down scoping narrows to one
professional on top of whatever scope is already active.
"""

from __future__ import annotations

import datetime
from collections.abc import Sequence
from dataclasses import dataclass, field

from .aggregation import attributable, kitchen_label, ratio
from .models import Incident, Kitchen, Role, TaskStatus


@dataclass(frozen=True)
class Scope:
    kitchens: list[Kitchen]
    incidents: list[Incident]


@dataclass(frozen=True)
class DrillDown:
    """Everything shown when inspecting a single seller or installer."""

    role: Role
    label: str
    kitchens: list[Kitchen]
    incidents: list[Incident]
    active_incidents: list[Incident] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.kitchens)

    @property
    def active_count(self) -> int:
        return len(self.active_incidents)

    @property
    def ratio(self) -> float:
        return ratio(self.active_count, self.total)


@dataclass(frozen=True)
class TimelineEntry:
    incident_id: str
    cause: str
    text: str
    date: datetime.datetime
    status_at_time: TaskStatus
    author_name: str


LEGACY_AUTHOR = "Histórico"


def _as_filter(value: int | str | None) -> int | None:
    if value is None or value == "":
        return None
    value = int(value)
    return value or None


def by_month_year(
    kitchens: Sequence[Kitchen],
    incidents: Sequence[Incident],
    month: int | str | None = None,
    year: int | str | None = None,
) -> Scope:
    """Keep kitchens installed in ``month``/``year``; unset filters match all."""
    month, year = _as_filter(month), _as_filter(year)
    kept = [
        k
        for k in kitchens
        if (month is None or k.installation_date.month == month)
        and (year is None or k.installation_date.year == year)
    ]
    ids = {k.id for k in kept}
    return Scope(kitchens=kept, incidents=[i for i in incidents if i.kitchen_id in ids])


def by_actor(
    kitchens: Sequence[Kitchen],
    incidents: Sequence[Incident],
    role: Role | str,
    label: str,
) -> DrillDown:
    role = Role(role)
    own = [k for k in kitchens if kitchen_label(k, role) == label]
    ids = {k.id for k in own}
    related = [i for i in incidents if attributable(i, label, role, ids)]
    return DrillDown(
        role=role,
        label=label,
        kitchens=own,
        incidents=related,
        active_incidents=[i for i in related if i.is_active] if own else [],
    )


def incidents_for_kitchen(kitchen_id: str, incidents: Sequence[Incident]) -> list[Incident]:
    return [i for i in incidents if i.kitchen_id == kitchen_id]


def task_list(
    kitchens: Sequence[Kitchen],
    incidents: Sequence[Incident],
    status: TaskStatus | str | None = None,
    hide_completed: bool = True,
) -> list[Incident]:
    """Incidents to work on, oldest installation first."""
    status = TaskStatus(status) if status else None
    by_id = {k.id: k for k in kitchens}
    rows = [
        i
        for i in incidents
        if i.kitchen_id in by_id
        and (status is None or i.status is status)
        and not (hide_completed and i.status is TaskStatus.COMPLETED)
    ]
    rows.sort(key=lambda i: by_id[i.kitchen_id].installation_date)
    return rows


def search_kitchens(
    kitchens: Sequence[Kitchen], query: str, limit: int | None = None
) -> list[Kitchen]:
    """Kitchens whose order, client, professionals or LDAP contain ``query``.

    Queries shorter than two characters do not filter.
    """
    needle = (query or "").strip().lower()
    if len(needle) < 2:
        found = list(kitchens)
    else:
        found = [
            k
            for k in kitchens
            if any(
                needle in value.lower()
                for value in (k.order_number, k.client_name, k.seller, k.installer, k.ldap)
            )
        ]
    return found[:limit] if limit is not None else found


def kitchen_timeline(kitchen_id: str, incidents: Sequence[Incident]) -> list[TimelineEntry]:
    """All notes across a kitchen's incidents, newest first."""
    entries = [
        TimelineEntry(
            incident_id=incident.id,
            cause=incident.cause.value,
            text=entry.text,
            date=entry.date,
            status_at_time=entry.status_at_time,
            author_name=entry.author_name or LEGACY_AUTHOR,
        )
        for incident in incidents_for_kitchen(kitchen_id, incidents)
        for entry in incident.history
    ]
    entries.sort(key=lambda e: e.date, reverse=True)
    return entries

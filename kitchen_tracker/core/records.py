"""Conversion between raw backend rows and the core models.

The backend is a loose record store: ``history`` is kept as a JSON encoded
string column, some rows predate the history column altogether and only carry
the single ``observation`` note. Everything is parsed here, once, so the rest
of the package never sees raw rows.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from enum import Enum
from typing import Any

import pydantic
from pydantic.alias_generators import to_camel

from .models import Incident, Kitchen, ObservationEntry

log = logging.getLogger("kitchen_tracker.records")

_EMPTY_HISTORY = {"", "NULL", "null"}


def parse_history(raw: Any) -> list[ObservationEntry]:
    """Parse a stored ``history`` value, falling back to an empty list.

    Anything that is not a JSON array of entry objects is treated as no
    history at all; individual entries that fail validation are dropped.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        if raw.strip() in _EMPTY_HISTORY:
            return []
        try:
            raw = json.loads(raw)
        except ValueError:
            log.debug("Ignoring unparsable history value %r", raw[:80])
            return []
    if not isinstance(raw, list):
        return []

    entries: list[ObservationEntry] = []
    for item in raw:
        if isinstance(item, ObservationEntry):
            entries.append(item)
            continue
        try:
            entries.append(ObservationEntry.model_validate(item))
        except pydantic.ValidationError:
            log.debug("Dropping malformed history entry %r", item)
    return entries


def dump_history(history: Iterable[ObservationEntry]) -> str:
    """Serialise history for the backend's string column."""
    return json.dumps([e.to_record() for e in history], ensure_ascii=False)


def kitchen_from_record(raw: dict[str, Any]) -> Kitchen:
    return Kitchen.model_validate(raw)


def incident_from_record(raw: dict[str, Any]) -> Incident:
    """Build an :class:`Incident`, reconstructing history from legacy rows."""
    data = dict(raw)
    data["history"] = parse_history(data.get("history"))
    if data.get("observation") is None:
        data["observation"] = ""
    incident = Incident.model_validate(data)
    if not incident.history and incident.observation:
        incident.history = [
            ObservationEntry(
                text=incident.observation,
                date=incident.created_at,
                status_at_time=incident.status,
            )
        ]
    return incident


def kitchens_from_records(rows: Iterable[Any]) -> list[Kitchen]:
    kitchens: list[Kitchen] = []
    for row in rows:
        try:
            kitchens.append(kitchen_from_record(row))
        except (ValueError, TypeError):
            log.warning("Skipping malformed kitchen row: %r", row)
    return kitchens


def incidents_from_records(rows: Iterable[Any]) -> list[Incident]:
    incidents: list[Incident] = []
    for row in rows:
        try:
            incidents.append(incident_from_record(row))
        except (ValueError, TypeError):
            log.warning("Skipping malformed incident row: %r", row)
    return incidents


def incident_to_record(incident: Incident) -> dict[str, Any]:
    """Payload for ``addIncident``: the full record with history as a string."""
    record = incident.to_record()
    record["history"] = dump_history(incident.history)
    return record


def update_to_record(updates: dict[str, Any]) -> dict[str, Any]:
    """Payload for ``updateIncident`` from snake_case field updates.

    When ``history`` is part of the update the legacy ``observation`` column is
    set to the newest entry's text; updates without history leave it alone.
    """
    record: dict[str, Any] = {}
    for name, value in updates.items():
        if name not in Incident.model_fields:
            raise KeyError(name)
        key = to_camel(name)
        if name == "history":
            history = list(value)
            record[key] = dump_history(history)
            if history:
                record["observation"] = history[-1].text
        elif isinstance(value, Enum):
            record[key] = value.value
        elif hasattr(value, "isoformat"):
            record[key] = value.isoformat().replace("+00:00", "Z")
        else:
            record[key] = value
    return record

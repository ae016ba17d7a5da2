"""Data models for the kitchen tracker's core entities.

The models are implemented using :mod:`pydantic` so that records coming back
from the backend are validated once, at the boundary, and can be dumped back
to the camelCase shape the backend stores.
"""

from __future__ import annotations

import datetime
import uuid
from datetime import UTC
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(tz=UTC)


def as_utc(value: datetime.datetime) -> datetime.datetime:
    """Treat naive timestamps as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def member_or(enum: type[Enum], value: object, default: Enum) -> Enum:
    """Look up ``value`` in ``enum``, using ``default`` for blank or unknown values."""
    try:
        return enum(value)
    except ValueError:
        return default


class TaskStatus(str, Enum):
    PENDING = "Pendiente"
    IN_PROGRESS = "Gestionando"
    COMPLETED = "Completada"


class IncidentCause(str, Enum):
    SELLER = "Vendedor"
    INSTALLER = "Instalador"
    LOGISTICS = "Logística"
    OTHER = "Otro"


class Role(str, Enum):
    """Which side of a kitchen an actor label refers to."""

    SELLER = "seller"
    INSTALLER = "installer"

    @property
    def cause(self) -> IncidentCause:
        return IncidentCause.SELLER if self is Role.SELLER else IncidentCause.INSTALLER


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        # PDO hands back numeric columns as ints
        coerce_numbers_to_str=True,
    )

    def to_record(self) -> dict:
        """Return the camelCase, JSON-ready representation."""
        return self.model_dump(by_alias=True, mode="json")


class Kitchen(_Record):
    """One installed kitchen project.

    Attributes
    ----------
    id:
        Opaque identifier generated client-side at registration.
    ldap:
        Identifier of the actor who registered the kitchen.
    seller, installer:
        Roster labels of the professionals attached to the project.

    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    ldap: str
    order_number: str
    client_name: str
    seller: str
    installer: str
    installation_date: datetime.date

    @field_validator("installation_date", mode="before")
    @classmethod
    def date_part(cls, value: object) -> object:
        if isinstance(value, datetime.datetime):
            return value.date()
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value


class ObservationEntry(_Record):
    """A single line in an incident's audit trail. Never modified once stored."""

    model_config = ConfigDict(frozen=True)

    text: str
    date: datetime.datetime
    status_at_time: TaskStatus
    author_ldap: str | None = None
    author_name: str | None = None

    @field_validator("status_at_time", mode="before")
    @classmethod
    def known_status(cls, value: object) -> TaskStatus:
        return member_or(TaskStatus, value, TaskStatus.PENDING)

    @field_validator("date")
    @classmethod
    def date_as_utc(cls, value: datetime.datetime) -> datetime.datetime:
        return as_utc(value)


class Incident(_Record):
    """A problem or management thread raised against a :class:`Kitchen`."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    kitchen_id: str
    description: str
    # legacy single-note column, mirrors the newest history entry on write
    observation: str = ""
    history: list[ObservationEntry] = Field(default_factory=list)
    status: TaskStatus = TaskStatus.PENDING
    assigned_to_seller: str | None = None
    assigned_to_installer: str | None = None
    cause: IncidentCause = IncidentCause.OTHER
    created_at: datetime.datetime = Field(default_factory=utcnow)
    updated_at: datetime.datetime = Field(default_factory=utcnow)

    @field_validator("status", mode="before")
    @classmethod
    def known_status(cls, value: object) -> TaskStatus:
        return member_or(TaskStatus, value, TaskStatus.PENDING)

    @field_validator("cause", mode="before")
    @classmethod
    def known_cause(cls, value: object) -> IncidentCause:
        return member_or(IncidentCause, value, IncidentCause.OTHER)

    @field_validator("created_at", "updated_at")
    @classmethod
    def timestamps_as_utc(cls, value: datetime.datetime) -> datetime.datetime:
        return as_utc(value)

    @property
    def is_active(self) -> bool:
        return self.status is not TaskStatus.COMPLETED

    @property
    def latest_entry(self) -> ObservationEntry | None:
        return self.history[-1] if self.history else None

    def assigned_to(self, role: Role) -> str | None:
        if role is Role.SELLER:
            return self.assigned_to_seller
        return self.assigned_to_installer

    def resolution_days(self) -> float:
        """Days elapsed between creation and the last update."""
        return (self.updated_at - self.created_at).total_seconds() / 86400

"""Incident lifecycle: creation, status changes and the append-only history.

Every operation returns a new :class:`Incident` and leaves its argument
untouched, so a rejected request never leaves a half-applied change behind.
Status transitions are deliberately permissive: ``Pendiente`` is the initial
state and ``Completada`` the terminal one, but no ordering is enforced here.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable

from .directory import (
    Actor,
    IdentityDirectory,
    Roster,
    default_assignment,
    default_cause,
)
from .errors import ValidationError
from .models import (
    Incident,
    IncidentCause,
    Kitchen,
    ObservationEntry,
    TaskStatus,
    utcnow,
)

log = logging.getLogger("kitchen_tracker.lifecycle")

_DEFAULT_DIRECTORY = IdentityDirectory()


def _require_actor(directory: IdentityDirectory, ldap: str | None) -> Actor:
    actor = directory.resolve(ldap)
    if actor is None:
        raise ValidationError(f"Unknown LDAP identifier {ldap!r}.")
    return actor


def _touch(incident: Incident, now: datetime.datetime | None) -> datetime.datetime:
    # updated_at never goes behind created_at, even with a skewed clock
    return max(now or utcnow(), incident.created_at)


def register_kitchen(
    actor_ldap: str,
    order_number: str,
    client_name: str,
    seller: str,
    installer: str,
    installation_date: datetime.date | str,
    *,
    directory: IdentityDirectory = _DEFAULT_DIRECTORY,
    roster: Roster | None = None,
) -> Kitchen:
    """Validate a kitchen registration and build the record to submit."""
    roster = roster or Roster()
    actor = _require_actor(directory, actor_ldap)
    # a seller always registers their own kitchens
    seller = default_assignment(actor, None).seller or seller
    order_number = (order_number or "").strip()
    client_name = (client_name or "").strip()
    if not all((order_number, client_name, seller, installer, installation_date)):
        raise ValidationError("Order number, client, seller, installer and date are required.")

    if isinstance(installation_date, str):
        try:
            installation_date = datetime.date.fromisoformat(installation_date.strip())
        except ValueError:
            raise ValidationError(
                f"Invalid installation date {installation_date!r}; use YYYY-MM-DD."
            ) from None

    if seller not in roster.sellers:
        raise ValidationError(f"{seller!r} is not a configured seller.")
    if installer not in roster.installers:
        raise ValidationError(f"{installer!r} is not a configured installer.")

    return Kitchen(
        ldap=actor.ldap,
        order_number=order_number,
        client_name=client_name,
        seller=seller,
        installer=installer,
        installation_date=installation_date,
    )


def create_incident(
    kitchens: Iterable[Kitchen],
    kitchen_id: str,
    description: str,
    actor_ldap: str,
    cause: IncidentCause | None = None,
    initial_note: str = "",
    *,
    assigned_to_seller: str | None = None,
    assigned_to_installer: str | None = None,
    directory: IdentityDirectory = _DEFAULT_DIRECTORY,
    now: datetime.datetime | None = None,
) -> Incident:
    """Build a new ``Pendiente`` incident against a known kitchen.

    ``cause`` defaults from the actor's role. A ``Vendedor`` cause is always
    attributed to a seller (the one given, else the acting seller, else the
    kitchen's); an ``Instalador`` cause likewise to an installer. Other causes
    are not attributed to anybody.
    """
    kitchen = next((k for k in kitchens if k.id == kitchen_id), None)
    if kitchen is None:
        raise ValidationError(f"Kitchen {kitchen_id!r} not found.")
    description = (description or "").strip()
    if not description:
        raise ValidationError("A description of the incident is required.")
    actor = _require_actor(directory, actor_ldap)

    cause = cause or default_cause(actor)
    defaults = default_assignment(actor, kitchen)
    seller = installer = None
    if cause is IncidentCause.SELLER:
        seller = assigned_to_seller or defaults.seller
    elif cause is IncidentCause.INSTALLER:
        installer = assigned_to_installer or defaults.installer

    now = now or utcnow()
    note = (initial_note or "").strip()
    history = []
    if note:
        history.append(
            ObservationEntry(
                text=note,
                date=now,
                status_at_time=TaskStatus.PENDING,
                author_ldap=actor.ldap,
                author_name=actor.name,
            )
        )

    incident = Incident(
        kitchen_id=kitchen.id,
        description=description,
        observation=note,
        history=history,
        status=TaskStatus.PENDING,
        assigned_to_seller=seller,
        assigned_to_installer=installer,
        cause=cause,
        created_at=now,
        updated_at=now,
    )
    log.debug("Built incident %s for kitchen %s", incident.id, kitchen.order_number)
    return incident


def append_observation(
    incident: Incident,
    text: str,
    actor_ldap: str,
    *,
    directory: IdentityDirectory = _DEFAULT_DIRECTORY,
    now: datetime.datetime | None = None,
) -> Incident:
    """Return ``incident`` with one more history entry written by the actor."""
    text = (text or "").strip()
    if not text:
        raise ValidationError("The note is empty.")
    actor = _require_actor(directory, actor_ldap)

    updated_at = _touch(incident, now)
    entry = ObservationEntry(
        text=text,
        date=updated_at,
        status_at_time=incident.status,
        author_ldap=actor.ldap,
        author_name=actor.name,
    )
    return incident.model_copy(
        update={
            "history": [*incident.history, entry],
            "observation": entry.text,
            "updated_at": updated_at,
        }
    )


def set_status(
    incident: Incident,
    status: TaskStatus | str,
    *,
    now: datetime.datetime | None = None,
) -> Incident:
    """Return ``incident`` moved to ``status``; any transition is accepted."""
    try:
        status = TaskStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown status {status!r}.") from None
    return incident.model_copy(
        update={"status": status, "updated_at": _touch(incident, now)}
    )

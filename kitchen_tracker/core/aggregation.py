"""Read-only dashboard statistics over a set of kitchens and incidents.

All functions are pure. Percentages keep full precision; round with
:func:`pct` when displaying. A ratio over an empty set is ``0.0``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .models import Incident, IncidentCause, Kitchen, Role, TaskStatus


@dataclass(frozen=True)
class ActorSummary:
    label: str
    total_kitchens: int
    incidents: int
    incidence_percentage: float


@dataclass(frozen=True)
class ResolutionStat:
    label: str
    average_days: float
    completed: int


@dataclass(frozen=True)
class CauseShare:
    cause: IncidentCause
    count: int
    percentage: float


@dataclass(frozen=True)
class DashboardTotals:
    total_kitchens: int
    kitchens_with_incidents: int
    kitchens_with_active_incidents: int
    historical_ratio: float
    pending_ratio: float


def ratio(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0.0


def pct(value: float) -> float:
    """Round a percentage to one decimal place for display."""
    return round(value, 1)


def kitchen_label(kitchen: Kitchen, role: Role) -> str:
    return kitchen.seller if role is Role.SELLER else kitchen.installer


def attributable(
    incident: Incident, label: str, role: Role, kitchen_ids: set[str]
) -> bool:
    """Whether ``incident`` counts against the professional ``label``.

    It does when it is explicitly assigned to them, or when its cause is their
    role and the incident belongs to one of their kitchens.
    """
    if incident.assigned_to(role) == label:
        return True
    return incident.kitchen_id in kitchen_ids and incident.cause is role.cause


def summary_for(
    labels: Iterable[str],
    kitchens: Sequence[Kitchen],
    incidents: Sequence[Incident],
    role: Role,
) -> list[ActorSummary]:
    """Per-professional kitchen count and incidence, in roster order."""
    rows = []
    for label in labels:
        own = {k.id for k in kitchens if kitchen_label(k, role) == label}
        count = sum(1 for i in incidents if attributable(i, label, role, own))
        rows.append(
            ActorSummary(
                label=label,
                total_kitchens=len(own),
                incidents=count,
                incidence_percentage=ratio(count, len(own)),
            )
        )
    return rows


def _affected(kitchens: Sequence[Kitchen], incidents: Iterable[Incident]) -> int:
    ids = {i.kitchen_id for i in incidents}
    return sum(1 for k in kitchens if k.id in ids)


def historical_ratio(kitchens: Sequence[Kitchen], incidents: Sequence[Incident]) -> float:
    """Percentage of kitchens that ever had an incident."""
    return ratio(_affected(kitchens, incidents), len(kitchens))


def pending_ratio(kitchens: Sequence[Kitchen], incidents: Sequence[Incident]) -> float:
    """Percentage of kitchens with at least one incident still open."""
    return ratio(_affected(kitchens, (i for i in incidents if i.is_active)), len(kitchens))


def dashboard_totals(
    kitchens: Sequence[Kitchen], incidents: Sequence[Incident]
) -> DashboardTotals:
    historical = _affected(kitchens, incidents)
    active = _affected(kitchens, (i for i in incidents if i.is_active))
    return DashboardTotals(
        total_kitchens=len(kitchens),
        kitchens_with_incidents=historical,
        kitchens_with_active_incidents=active,
        historical_ratio=ratio(historical, len(kitchens)),
        pending_ratio=ratio(active, len(kitchens)),
    )


def resolution_speed(
    incidents: Sequence[Incident], labels: Iterable[str], role: Role
) -> list[ResolutionStat]:
    """Average days to completion per professional, fastest first.

    Professionals without any completed incident are left out.
    """
    completed = [i for i in incidents if i.status is TaskStatus.COMPLETED]
    stats = []
    for label in labels:
        durations = [i.resolution_days() for i in completed if i.assigned_to(role) == label]
        if durations:
            stats.append(
                ResolutionStat(
                    label=label,
                    average_days=sum(durations) / len(durations),
                    completed=len(durations),
                )
            )
    stats.sort(key=lambda s: s.average_days)
    return stats


def cause_distribution(
    incidents: Iterable[Incident],
    exclude: Iterable[IncidentCause] = (IncidentCause.OTHER,),
) -> list[CauseShare]:
    """Incident count and share per cause, relative to the non-excluded set.

    Causes with no incidents are omitted.
    """
    skipped = set(exclude)
    kept = [i for i in incidents if i.cause not in skipped]
    shares = []
    for cause in IncidentCause:
        if cause in skipped:
            continue
        count = sum(1 for i in kept if i.cause is cause)
        if count:
            shares.append(CauseShare(cause=cause, count=count, percentage=ratio(count, len(kept))))
    return shares


def workload(
    incidents: Iterable[Incident], labels: Iterable[str], role: Role
) -> list[tuple[str, int]]:
    """Open incidents assigned to each professional, busiest first."""
    active = [i for i in incidents if i.is_active]
    load = [(label, sum(1 for i in active if i.assigned_to(role) == label)) for label in labels]
    load.sort(key=lambda row: row[1], reverse=True)
    return load

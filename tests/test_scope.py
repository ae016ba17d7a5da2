"""Tests for month/year scoping, drill-downs and list helpers."""

import datetime
from datetime import UTC

from kitchen_tracker.core.models import IncidentCause, ObservationEntry, Role, TaskStatus
from kitchen_tracker.core.scope import (
    LEGACY_AUTHOR,
    by_actor,
    by_month_year,
    kitchen_timeline,
    search_kitchens,
    task_list,
)


def test_by_month_year(make_kitchen, make_incident) -> None:
    march = make_kitchen(installation_date=datetime.date(2025, 3, 4))
    april = make_kitchen(installation_date=datetime.date(2025, 4, 1))
    old = make_kitchen(installation_date=datetime.date(2024, 3, 20))
    incidents = [make_incident(march), make_incident(april), make_incident(old)]
    kitchens = [march, april, old]

    scope = by_month_year(kitchens, incidents, month="03", year=2025)
    assert scope.kitchens == [march]
    assert [i.kitchen_id for i in scope.incidents] == [march.id]

    assert by_month_year(kitchens, incidents, month=3).kitchens == [march, old]
    assert by_month_year(kitchens, incidents, year="2025").kitchens == [march, april]
    everything = by_month_year(kitchens, incidents, month="", year=None)
    assert everything.kitchens == kitchens
    assert len(everything.incidents) == 3


def test_by_actor_drilldown(make_kitchen, make_incident) -> None:
    mine = make_kitchen(seller="Lara")
    other = make_kitchen(seller="Raquel")
    open_own = make_incident(mine, cause=IncidentCause.SELLER)
    closed_own = make_incident(mine, cause=IncidentCause.SELLER, status=TaskStatus.COMPLETED)
    assigned_elsewhere = make_incident(other, assigned_to_seller="Lara")
    unrelated = make_incident(other, cause=IncidentCause.SELLER)

    drill = by_actor(
        [mine, other],
        [open_own, closed_own, assigned_elsewhere, unrelated],
        "seller",
        "Lara",
    )
    assert drill.role is Role.SELLER
    assert drill.kitchens == [mine]
    assert drill.incidents == [open_own, closed_own, assigned_elsewhere]
    assert drill.active_incidents == [open_own, assigned_elsewhere]
    assert drill.total == 1
    assert drill.active_count == 2
    assert drill.ratio == 200.0


def test_by_actor_without_kitchens(make_kitchen, make_incident) -> None:
    kitchen = make_kitchen(installer="Instalador A")
    incident = make_incident(kitchen, assigned_to_installer="Instalador D")
    drill = by_actor([kitchen], [incident], Role.INSTALLER, "Instalador D")
    assert drill.total == 0
    assert drill.active_count == 0
    assert drill.ratio == 0


def test_task_list_sorted_by_installation(make_kitchen, make_incident) -> None:
    late = make_kitchen(installation_date=datetime.date(2025, 9, 1))
    early = make_kitchen(installation_date=datetime.date(2025, 2, 1))
    outside = make_kitchen()
    a = make_incident(late)
    b = make_incident(early, status=TaskStatus.IN_PROGRESS)
    c = make_incident(early, status=TaskStatus.COMPLETED)
    d = make_incident(outside)

    kitchens = [late, early]
    incidents = [a, b, c, d]
    assert task_list(kitchens, incidents) == [b, a]
    assert task_list(kitchens, incidents, hide_completed=False) == [b, c, a]
    assert task_list(kitchens, incidents, status="Completada") == []
    assert task_list(kitchens, incidents, status=TaskStatus.COMPLETED, hide_completed=False) == [c]


def test_search_kitchens(make_kitchen) -> None:
    ana = make_kitchen(client_name="Ana Pérez", order_number="80112233")
    luis = make_kitchen(client_name="Luis", installer="Instalador C", order_number="80999999")
    kitchens = [ana, luis]
    assert search_kitchens(kitchens, "ana") == [ana]
    assert search_kitchens(kitchens, "8099") == [luis]
    assert search_kitchens(kitchens, "instalador c") == [luis]
    assert search_kitchens(kitchens, "a") == kitchens
    assert search_kitchens(kitchens, "", limit=1) == [ana]


def test_kitchen_timeline_newest_first(make_kitchen, make_incident) -> None:
    kitchen = make_kitchen()

    def entry(day: int, text: str, author: str | None = "Javi") -> ObservationEntry:
        return ObservationEntry(
            text=text,
            date=datetime.datetime(2025, 1, day, tzinfo=UTC),
            status_at_time=TaskStatus.PENDING,
            author_name=author,
        )

    first = make_incident(kitchen, cause=IncidentCause.LOGISTICS, history=[entry(1, "a"), entry(5, "c")])
    second = make_incident(kitchen, history=[entry(3, "b", author=None)])
    timeline = kitchen_timeline(kitchen.id, [first, second])
    assert [t.text for t in timeline] == ["c", "b", "a"]
    assert timeline[0].cause == "Logística"
    assert timeline[1].author_name == LEGACY_AUTHOR
    assert timeline[1].incident_id == second.id
    assert kitchen_timeline("nope", [first, second]) == []

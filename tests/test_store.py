"""Tests for the write-then-reload state container."""

import asyncio
import datetime
import json
from datetime import UTC

import httpx

from kitchen_tracker.adapters.http import HttpBackend
from kitchen_tracker.core.directory import Roster
from kitchen_tracker.core.models import IncidentCause, TaskStatus
from kitchen_tracker.core.records import incident_to_record
from kitchen_tracker.data.store import DashboardStore

MANAGER = "30104750"


def seeded(fake_backend, make_kitchen, make_incident):
    kitchen = make_kitchen(seller="Lara", installation_date=datetime.date(2025, 3, 1))
    incident = make_incident(kitchen, id="0a1b2c3d-0000", cause=IncidentCause.SELLER)
    fake_backend.kitchens.append(kitchen.to_record())
    fake_backend.incidents.append(incident_to_record(incident))
    store = DashboardStore(fake_backend)
    assert asyncio.run(store.reload()) is True
    return store, kitchen, incident


def test_reload_replaces_dataset(fake_backend, make_kitchen, make_incident) -> None:
    store, kitchen, incident = seeded(fake_backend, make_kitchen, make_incident)
    assert [k.id for k in store.kitchens] == [kitchen.id]
    assert [i.id for i in store.incidents] == [incident.id]
    assert store.error is None
    assert store.loading is False


def test_failed_reload_keeps_previous_data(fake_backend, make_kitchen, make_incident) -> None:
    store, kitchen, _ = seeded(fake_backend, make_kitchen, make_incident)
    fake_backend.failing.add("getIncidents")
    assert asyncio.run(store.reload()) is False
    assert "getIncidents" in store.error
    assert [k.id for k in store.kitchens] == [kitchen.id]
    assert len(store.incidents) == 1


def test_register_kitchen_round_trip(fake_backend) -> None:
    store = DashboardStore(fake_backend)
    err = asyncio.run(
        store.register_kitchen(MANAGER, "80112233", "Ana", "Raquel", "Instalador A", "2025-04-02")
    )
    assert err is None
    assert fake_backend.calls == ["addKitchen", "getKitchens", "getIncidents"]
    assert store.find_kitchen_by_order("80112233").client_name == "Ana"


def test_validation_error_makes_no_call(fake_backend) -> None:
    store = DashboardStore(fake_backend)
    err = asyncio.run(
        store.register_kitchen("nobody", "1", "Ana", "Raquel", "Instalador A", "2025-04-02")
    )
    assert "Unknown LDAP" in err
    assert fake_backend.calls == []


def test_report_incident(fake_backend, make_kitchen, make_incident) -> None:
    store, kitchen, _ = seeded(fake_backend, make_kitchen, make_incident)
    err = asyncio.run(
        store.report_incident(MANAGER, kitchen.id, "Leaking sink", IncidentCause.INSTALLER, "Called installer")
    )
    assert err is None
    assert len(store.incidents) == 2
    stored = fake_backend.incidents[-1]
    assert isinstance(stored["history"], str)
    created = store.incidents[-1]
    assert created.assigned_to_installer == kitchen.installer
    assert created.history[0].author_name == "Javi"


def test_failed_write_leaves_dataset_unchanged(fake_backend, make_kitchen, make_incident) -> None:
    store, kitchen, _ = seeded(fake_backend, make_kitchen, make_incident)
    fake_backend.failing.add("addIncident")
    before = list(store.incidents)
    err = asyncio.run(store.report_incident(MANAGER, kitchen.id, "Leaking sink"))
    assert err is not None and "addIncident" in err
    assert store.incidents == before
    assert store.error
    assert fake_backend.calls[-1] == "addIncident"


def test_add_note_appends_and_mirrors_observation(fake_backend, make_kitchen, make_incident) -> None:
    store, _, incident = seeded(fake_backend, make_kitchen, make_incident)
    assert asyncio.run(store.add_note("0a1b2c3d", "First call", MANAGER)) is None
    assert asyncio.run(store.add_note(incident.id, "Second call", "30000002")) is None

    reloaded = store.find_incident(incident.id)
    assert [h.text for h in reloaded.history] == ["First call", "Second call"]
    assert [h.author_name for h in reloaded.history] == ["Javi", "Maybeth"]
    assert reloaded.observation == "Second call"
    assert json.loads(fake_backend.incidents[0]["history"])[1]["text"] == "Second call"


def test_add_note_rejections(fake_backend, make_kitchen, make_incident) -> None:
    store, _, incident = seeded(fake_backend, make_kitchen, make_incident)
    calls = len(fake_backend.calls)
    assert asyncio.run(store.add_note(incident.id, "", MANAGER)) == "The note is empty."
    assert "Unknown LDAP" in asyncio.run(store.add_note(incident.id, "x", "123"))
    assert asyncio.run(store.add_note("zzz", "x", MANAGER)) == "Incident not found."
    assert len(fake_backend.calls) == calls


def test_change_status(fake_backend, make_kitchen, make_incident) -> None:
    store, _, incident = seeded(fake_backend, make_kitchen, make_incident)
    assert asyncio.run(store.change_status(incident.id, TaskStatus.COMPLETED)) is None
    updated = store.find_incident(incident.id)
    assert updated.status is TaskStatus.COMPLETED
    assert updated.updated_at > updated.created_at
    # status-only updates do not touch the legacy note column
    assert fake_backend.incidents[0]["observation"] == ""


def test_saved_write_with_failed_reload(fake_backend, make_kitchen, make_incident) -> None:
    store, _, incident = seeded(fake_backend, make_kitchen, make_incident)
    assert store.confirm("Saved.") == "Saved."
    fake_backend.failing.add("getIncidents")
    assert asyncio.run(store.change_status(incident.id, TaskStatus.COMPLETED)) is None
    assert fake_backend.incidents[0]["status"] == "Completada"
    # the write landed but the shown data is stale
    assert store.find_incident(incident.id).status is TaskStatus.PENDING
    assert store.confirm("Saved.") == (
        "Saved. Reload failed (getIncidents: HTTP 500); showing previous data."
    )


def test_scope_follows_period(fake_backend, make_kitchen, make_incident) -> None:
    store, kitchen, _ = seeded(fake_backend, make_kitchen, make_incident)
    store.set_period(3, 2025)
    assert store.scope().kitchens == [kitchen]
    store.set_period(4, 2025)
    assert store.scope().kitchens == []
    assert store.scope().incidents == []
    store.set_period(0, 0)
    assert (store.month, store.year) == (None, None)
    assert len(store.scope().kitchens) == 1


def test_find_incident_prefix(fake_backend, make_kitchen, make_incident) -> None:
    store, kitchen, incident = seeded(fake_backend, make_kitchen, make_incident)
    fake_backend.incidents.append(incident_to_record(make_incident(kitchen, id="0a1b9999")))
    asyncio.run(store.reload())
    assert store.find_incident("0a1b2") is not None
    # ambiguous prefix
    assert store.find_incident("0a1b") is None
    assert store.find_incident("") is None


def test_store_uses_configured_roster(fake_backend) -> None:
    store = DashboardStore(fake_backend, roster=Roster(sellers=("Pepe",), installers=("Equipo 1",)))
    err = asyncio.run(
        store.register_kitchen(MANAGER, "1", "Ana", "Lara", "Equipo 1", "2025-04-02")
    )
    assert "not a configured seller" in err


def test_error_body_keeps_previous_data(make_kitchen) -> None:
    kitchen_rows = [make_kitchen().to_record()]
    bodies = iter([kitchen_rows, [], {"error": "Database unavailable"}])

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=next(bodies))

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    store = DashboardStore(HttpBackend("https://example.test/api.php", client=client))

    async def scenario() -> tuple[bool, bool]:
        first = await store.reload()
        second = await store.reload()
        await client.aclose()
        return first, second

    assert asyncio.run(scenario()) == (True, False)
    assert len(store.kitchens) == 1
    assert store.error == "getKitchens: unexpected response shape"
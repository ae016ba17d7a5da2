from __future__ import annotations

import discord

from ..core.aggregation import (
    cause_distribution,
    dashboard_totals,
    pct,
    resolution_speed,
    summary_for,
    workload,
)
from ..core.models import Incident, Kitchen, Role, TaskStatus
from ..core.scope import DrillDown, by_actor, incidents_for_kitchen, kitchen_timeline
from ..data.store import DashboardStore
from .modals import NoteModal

FIELD_LIMIT = 1024
HISTORY_LINES = 8


def clip(text: str, limit: int = FIELD_LIMIT) -> str:
    text = text or "-"
    return text if len(text) <= limit else text[: limit - 1] + "…"


def period_label(store: DashboardStore) -> str:
    if store.month and store.year:
        return f"{store.month:02d}/{store.year}"
    if store.year:
        return str(store.year)
    if store.month:
        return f"Month {store.month:02d}, all years"
    return "All time"


def short_id(incident: Incident) -> str:
    return incident.id[:8]


def status_badge(status: TaskStatus) -> str:
    return {
        TaskStatus.PENDING: "🟡",
        TaskStatus.IN_PROGRESS: "🔵",
        TaskStatus.COMPLETED: "🟢",
    }[status]


def dashboard_embed(store: DashboardStore) -> discord.Embed:
    scope = store.scope()
    totals = dashboard_totals(scope.kitchens, scope.incidents)
    e = discord.Embed(
        title=f"Kitchen dashboard · {period_label(store)}",
        color=discord.Color.green(),
    )
    e.add_field(name="Installations", value=str(totals.total_kitchens), inline=True)
    e.add_field(
        name="Kitchens with incidents",
        value=str(totals.kitchens_with_incidents),
        inline=True,
    )
    e.add_field(name="Quality ratio", value=f"{pct(totals.historical_ratio)}%", inline=True)
    e.add_field(name="Pending ratio", value=f"{pct(totals.pending_ratio)}%", inline=True)

    for role, title in ((Role.SELLER, "Sellers"), (Role.INSTALLER, "Installers")):
        rows = summary_for(
            store.roster.labels(role), scope.kitchens, scope.incidents, role
        )
        lines = [
            f"**{r.label}**: {r.total_kitchens} kitchens · {r.incidents} incidents · "
            f"{pct(r.incidence_percentage)}%"
            for r in rows
        ]
        e.add_field(name=title, value=clip("\n".join(lines)), inline=False)

    speed_lines = []
    for role in (Role.SELLER, Role.INSTALLER):
        for s in resolution_speed(scope.incidents, store.roster.labels(role), role):
            speed_lines.append(f"{s.label}: {s.average_days:.1f} days ({s.completed})")
    e.add_field(
        name="Resolution speed",
        value=clip("\n".join(speed_lines) or "No completed incidents."),
        inline=False,
    )

    shares = cause_distribution(scope.incidents)
    e.add_field(
        name="Incident causes",
        value=clip(
            "\n".join(f"{s.cause.value}: {s.count} ({pct(s.percentage)}%)" for s in shares)
            or "No incidents to show."
        ),
        inline=False,
    )
    if store.error:
        e.set_footer(text=f"⚠️ Last sync failed: {store.error}")
    return e


def drilldown_embed(drill: DrillDown, incidents: list[Incident]) -> discord.Embed:
    kind = "SELLER" if drill.role is Role.SELLER else "INSTALLER"
    e = discord.Embed(
        title=f"{drill.label} · {kind}",
        description=(
            f"Projects: {drill.total} · Active incidents: {drill.active_count} "
            f"({pct(drill.ratio)}%)"
        ),
        color=discord.Color.blurple(),
    )
    lines = []
    for k in drill.kitchens:
        own = incidents_for_kitchen(k.id, incidents)
        active = sum(1 for i in own if i.is_active)
        flag = f"⚠️ {active} open" if active else "✅ OK"
        lines.append(f"`{k.order_number}` {k.client_name} · {k.installation_date} · {flag}")
    e.add_field(name="Quality by project", value=clip("\n".join(lines)), inline=False)
    orders = {k.id: k.order_number for k in drill.kitchens}
    attributed = [
        f"{status_badge(i.status)} `{short_id(i)}` {orders.get(i.kitchen_id, '?')} · "
        f"{i.cause.value} · {clip(i.description, 60)}"
        for i in drill.incidents
    ]
    e.add_field(
        name="Attributed incidents",
        value=clip("\n".join(attributed) or "None."),
        inline=False,
    )
    return e


def incident_embed(incident: Incident, kitchen: Kitchen | None) -> discord.Embed:
    title = f"{status_badge(incident.status)} Incident {short_id(incident)}"
    if kitchen:
        title += f" · {kitchen.order_number}"
    e = discord.Embed(title=title, description=clip(incident.description, 4000))
    e.add_field(name="Status", value=incident.status.value, inline=True)
    e.add_field(name="Cause", value=incident.cause.value, inline=True)
    if incident.assigned_to_seller:
        e.add_field(name="Seller", value=incident.assigned_to_seller, inline=True)
    if incident.assigned_to_installer:
        e.add_field(name="Installer", value=incident.assigned_to_installer, inline=True)
    if kitchen:
        e.add_field(
            name="Kitchen",
            value=f"{kitchen.client_name} · {kitchen.seller} / {kitchen.installer}",
            inline=False,
        )
    history = incident.history[-HISTORY_LINES:]
    hidden = len(incident.history) - len(history)
    lines = [
        f"{h.date:%d/%m/%Y} [{h.status_at_time.value}] {h.author_name or 'Histórico'}: {h.text}"
        for h in history
    ]
    if hidden:
        lines.insert(0, f"… {hidden} earlier notes")
    e.add_field(name="History", value=clip("\n".join(lines) or "No notes yet."), inline=False)
    e.set_footer(text=f"Created {incident.created_at:%d/%m/%Y} · updated {incident.updated_at:%d/%m/%Y}")
    return e


def tasks_embed(store: DashboardStore, rows: list[Incident]) -> discord.Embed:
    scope = store.scope()
    e = discord.Embed(title=f"Tasks · {period_label(store)}", color=discord.Color.orange())
    lines = []
    for i in rows:
        kitchen = store.get_kitchen(i.kitchen_id)
        latest = i.latest_entry
        last = f"{latest.date:%d/%m/%Y}" if latest else "N/A"
        lines.append(
            f"{status_badge(i.status)} `{short_id(i)}` {kitchen.order_number if kitchen else '?'}"
            f" · {i.cause.value} · last note {last}"
        )
    e.description = clip("\n".join(lines) or "Nothing to do.", 4000)
    for role, title in ((Role.SELLER, "Open per seller"), (Role.INSTALLER, "Open per installer")):
        load = workload(scope.incidents, store.roster.labels(role), role)
        e.add_field(name=title, value=clip("\n".join(f"{n}: {c}" for n, c in load)), inline=True)
    open_kitchens = {i.kitchen_id for i in scope.incidents if i.is_active}
    e.add_field(name="Kitchens affected", value=str(len(open_kitchens)), inline=True)
    return e


def kitchens_embed(kitchens: list[Kitchen], incidents: list[Incident]) -> discord.Embed:
    e = discord.Embed(title="Kitchens", color=discord.Color.green())
    lines = []
    for k in kitchens:
        count = len(incidents_for_kitchen(k.id, incidents))
        lines.append(
            f"`{k.order_number}` {k.client_name} · {k.seller} / {k.installer} · "
            f"{k.installation_date} · {count} incidents"
        )
    e.description = clip("\n".join(lines) or "No kitchens found.", 4000)
    return e


def kitchen_embed(kitchen: Kitchen, incidents: list[Incident]) -> discord.Embed:
    e = discord.Embed(
        title=f"Kitchen {kitchen.order_number}",
        description=f"{kitchen.client_name} · installed {kitchen.installation_date}",
    )
    e.add_field(name="Seller", value=kitchen.seller, inline=True)
    e.add_field(name="Installer", value=kitchen.installer, inline=True)
    e.add_field(name="Registered by", value=kitchen.ldap, inline=True)
    timeline = kitchen_timeline(kitchen.id, incidents)
    lines = [
        f"{t.date:%d/%m/%Y} `{t.incident_id[:8]}` {t.cause} [{t.status_at_time.value}] "
        f"{t.author_name}: {t.text}"
        for t in timeline
    ]
    e.add_field(name="Timeline", value=clip("\n".join(lines) or "No history."), inline=False)
    return e


class IncidentView(discord.ui.View):
    """Status and note actions for one incident.

    Completed incidents only offer the note button.
    """

    def __init__(self, store: DashboardStore, incident_id: str, status: TaskStatus) -> None:
        super().__init__(timeout=None)
        self.store = store
        self.incident_id = incident_id
        if status is TaskStatus.COMPLETED:
            self.remove_item(self.in_progress)
            self.remove_item(self.complete)

    async def _set_status(self, interaction: discord.Interaction, status: TaskStatus) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        err = await self.store.change_status(self.incident_id, status)
        if err:
            await interaction.followup.send(err, ephemeral=True)
            return
        await interaction.followup.send(
            self.store.confirm(f"Status set to {status.value}."), ephemeral=True
        )

    @discord.ui.button(label="Gestionando", style=discord.ButtonStyle.primary)
    async def in_progress(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self._set_status(interaction, TaskStatus.IN_PROGRESS)

    @discord.ui.button(label="Finalizar", style=discord.ButtonStyle.success)
    async def complete(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self._set_status(interaction, TaskStatus.COMPLETED)

    @discord.ui.button(label="Add note", style=discord.ButtonStyle.secondary)
    async def add_note(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        if self.store.find_incident(self.incident_id) is None:
            await interaction.response.send_message("Incident not found.", ephemeral=True)
            return
        await interaction.response.send_modal(NoteModal(self.store, self.incident_id))


class DrilldownSelect(discord.ui.Select):
    """Pick a seller or installer to open their drill-down."""

    def __init__(self, store: DashboardStore) -> None:
        options = [
            discord.SelectOption(label=f"{label} ({role.value})", value=f"{role.value}:{label}")
            for role in (Role.SELLER, Role.INSTALLER)
            for label in store.roster.labels(role)
        ][:25]
        super().__init__(placeholder="Drill down into…", options=options)
        self.store = store

    async def callback(self, interaction: discord.Interaction) -> None:
        await send_drilldown(interaction, self.store, *self.values[0].split(":", 1))


class DashboardView(discord.ui.View):
    def __init__(self, store: DashboardStore) -> None:
        super().__init__(timeout=300)
        self.store = store
        self.add_item(DrilldownSelect(store))


async def send_drilldown(
    interaction: discord.Interaction, store: DashboardStore, role: str, label: str
) -> None:
    scope = store.scope()
    drill = by_actor(scope.kitchens, scope.incidents, role, label)
    await interaction.response.send_message(
        embed=drilldown_embed(drill, scope.incidents), ephemeral=True
    )

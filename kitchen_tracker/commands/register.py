"""Registration of slash commands for the bot."""

from __future__ import annotations

import discord
from discord.ext import commands

from ..core.models import IncidentCause, Role, TaskStatus
from ..core.scope import search_kitchens, task_list
from ..data.store import DashboardStore
from ..ui.modals import IncidentModal
from ..ui.views import (
    DashboardView,
    IncidentView,
    dashboard_embed,
    incident_embed,
    kitchen_embed,
    kitchens_embed,
    send_drilldown,
    tasks_embed,
)

MONTHS = [
    "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio", "Julio",
    "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
]


def register_commands(bot: commands.Bot, store: DashboardStore) -> None:
    """Register bot commands with optional compatibility shims."""
    tree = bot.tree
    choices = getattr(
        discord.app_commands, "choices", lambda **_kwargs: (lambda func: func)
    )
    Choice = discord.app_commands.Choice

    async def sync_failed(interaction: discord.Interaction) -> bool:
        if store.error and not store.kitchens:
            await interaction.response.send_message(
                f"Backend unavailable: {store.error}", ephemeral=True
            )
            return True
        return False

    @tree.command(name="dashboard", description="Show quality and workload ratios")
    async def dashboard(interaction: discord.Interaction) -> None:
        if await sync_failed(interaction):
            return
        await interaction.response.send_message(
            embed=dashboard_embed(store), view=DashboardView(store), ephemeral=True
        )

    @tree.command(name="set_period", description="Filter every view by installation month/year")
    @discord.app_commands.describe(
        month="Month number (0 for all months)", year="Year (0 for all years)"
    )
    async def set_period(
        interaction: discord.Interaction, month: int = 0, year: int = 0
    ) -> None:
        if not 0 <= month <= 12:
            await interaction.response.send_message("Month must be 0-12.", ephemeral=True)
            return
        store.set_period(month, year)
        label = f"{MONTHS[month - 1]} " if month else "All months "
        label += str(year) if year else "· all years"
        await interaction.response.send_message(f"Period set: {label}", ephemeral=True)

    @tree.command(name="drilldown", description="Detail for one seller or installer")
    @discord.app_commands.describe(role="Seller or installer", label="Professional name")
    @choices(
        role=[
            Choice(name="Seller", value=Role.SELLER.value),
            Choice(name="Installer", value=Role.INSTALLER.value),
        ]
    )
    async def drilldown(
        interaction: discord.Interaction,
        role: discord.app_commands.Choice[str],
        label: str,
    ) -> None:
        if label not in store.roster.labels(Role(role.value)):
            await interaction.response.send_message(
                f"`{label}` is not on the roster.", ephemeral=True
            )
            return
        await send_drilldown(interaction, store, role.value, label)

    if hasattr(drilldown, "autocomplete"):
        @drilldown.autocomplete("label")
        async def drilldown_label_autocomplete(
            interaction: discord.Interaction, current: str
        ) -> list[discord.app_commands.Choice[str]]:
            role = getattr(interaction.namespace, "role", None) or Role.SELLER.value
            current_lower = current.lower()
            return [
                Choice(name=n, value=n)
                for n in store.roster.labels(Role(role))
                if current_lower in n.lower()
            ][:25]

    @tree.command(name="register_kitchen", description="Register a new kitchen project")
    @discord.app_commands.describe(
        ldap="Your LDAP",
        order_number="Order number",
        client_name="Client name",
        seller="Seller",
        installer="Installer",
        installation_date="Installation date (YYYY-MM-DD)",
    )
    async def register_kitchen(
        interaction: discord.Interaction,
        ldap: str,
        order_number: str,
        client_name: str,
        seller: str,
        installer: str,
        installation_date: str,
    ) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        err = await store.register_kitchen(
            ldap, order_number, client_name, seller, installer, installation_date
        )
        if err:
            await interaction.followup.send(err, ephemeral=True)
            return
        await interaction.followup.send(
            store.confirm(f"Kitchen `{order_number}` registered."), ephemeral=True
        )

    @tree.command(name="report_incident", description="Open an incident against a kitchen")
    @discord.app_commands.describe(
        ldap="Your LDAP", order_number="Order number of the kitchen", cause="Cause"
    )
    @choices(cause=[Choice(name=c.value, value=c.value) for c in IncidentCause])
    async def report_incident(
        interaction: discord.Interaction,
        ldap: str,
        order_number: str,
        cause: discord.app_commands.Choice[str] | None = None,
    ) -> None:
        actor = store.directory.resolve(ldap)
        if actor is None:
            await interaction.response.send_message(
                "Enter a valid LDAP to continue.", ephemeral=True
            )
            return
        kitchen = store.find_kitchen_by_order(order_number)
        if kitchen is None:
            await interaction.response.send_message("Kitchen not found.", ephemeral=True)
            return
        await interaction.response.send_modal(
            IncidentModal(
                store, kitchen, actor.ldap, IncidentCause(cause.value) if cause else None
            )
        )

    @tree.command(name="tasks", description="Incidents still to be handled")
    @discord.app_commands.describe(
        status="Only this status", show_completed="Include completed incidents"
    )
    @choices(status=[Choice(name=s.value, value=s.value) for s in TaskStatus])
    async def tasks(
        interaction: discord.Interaction,
        status: discord.app_commands.Choice[str] | None = None,
        show_completed: bool = False,
    ) -> None:
        if await sync_failed(interaction):
            return
        scope = store.scope()
        rows = task_list(
            scope.kitchens,
            scope.incidents,
            status.value if status else None,
            hide_completed=not show_completed,
        )
        await interaction.response.send_message(
            embed=tasks_embed(store, rows), ephemeral=True
        )

    @tree.command(name="incident", description="View an incident and act on it")
    @discord.app_commands.describe(incident_id="Incident id (the first 8 characters are enough)")
    async def incident(interaction: discord.Interaction, incident_id: str) -> None:
        found = store.find_incident(incident_id)
        if found is None:
            await interaction.response.send_message("Incident not found.", ephemeral=True)
            return
        await interaction.response.send_message(
            embed=incident_embed(found, store.get_kitchen(found.kitchen_id)),
            view=IncidentView(store, found.id, found.status),
            ephemeral=True,
        )

    @tree.command(name="kitchens", description="Search kitchens in the current period")
    @discord.app_commands.describe(query="Order, client, professional or LDAP")
    async def kitchens(interaction: discord.Interaction, query: str = "") -> None:
        if await sync_failed(interaction):
            return
        scope = store.scope()
        found = search_kitchens(scope.kitchens, query, limit=25)
        await interaction.response.send_message(
            embed=kitchens_embed(found, scope.incidents), ephemeral=True
        )

    @tree.command(name="kitchen", description="Kitchen detail with its full timeline")
    @discord.app_commands.describe(order_number="Order number")
    async def kitchen(interaction: discord.Interaction, order_number: str) -> None:
        found = store.find_kitchen_by_order(order_number)
        if found is None:
            await interaction.response.send_message("Kitchen not found.", ephemeral=True)
            return
        await interaction.response.send_message(
            embed=kitchen_embed(found, store.incidents), ephemeral=True
        )

    async def order_number_autocomplete(
        interaction: discord.Interaction, current: str
    ) -> list[discord.app_commands.Choice[str]]:
        return [
            Choice(name=f"{k.order_number} · {k.client_name}"[:100], value=k.order_number)
            for k in search_kitchens(store.kitchens, current, limit=25)
        ]

    async def ldap_autocomplete(
        interaction: discord.Interaction, current: str
    ) -> list[discord.app_commands.Choice[str]]:
        return [
            Choice(name=f"{a.name} ({a.role})", value=a.ldap)
            for a in store.directory.search(current)
        ]

    if hasattr(kitchen, "autocomplete"):
        kitchen.autocomplete("order_number")(order_number_autocomplete)
        report_incident.autocomplete("order_number")(order_number_autocomplete)
        report_incident.autocomplete("ldap")(ldap_autocomplete)
        register_kitchen.autocomplete("ldap")(ldap_autocomplete)

    @tree.command(name="reload", description="Reload kitchens and incidents from the backend")
    async def reload(interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        if await store.reload():
            await interaction.followup.send(
                f"Loaded {len(store.kitchens)} kitchens and {len(store.incidents)} incidents.",
                ephemeral=True,
            )
        else:
            await interaction.followup.send(
                f"Reload failed: {store.error}. Showing previous data.", ephemeral=True
            )

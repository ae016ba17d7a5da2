from __future__ import annotations

import discord

from ..core.models import IncidentCause, Kitchen
from ..data.store import DashboardStore


class IncidentModal(discord.ui.Modal, title="Report Incident"):
    def __init__(
        self,
        store: DashboardStore,
        kitchen: Kitchen,
        actor_ldap: str,
        cause: IncidentCause | None,
    ) -> None:
        super().__init__()
        self.store = store
        self.kitchen = kitchen
        self.actor_ldap = actor_ldap
        self.cause = cause
        self.description_input = discord.ui.TextInput(
            label="Technical description",
            style=discord.TextStyle.long,
            placeholder="Explain what happened...",
            required=True,
            max_length=4000,
        )
        self.note_input = discord.ui.TextInput(
            label="First follow-up note",
            style=discord.TextStyle.long,
            placeholder="Optional first entry for the history...",
            required=False,
            max_length=2000,
        )
        self.add_item(self.description_input)
        self.add_item(self.note_input)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        err = await self.store.report_incident(
            self.actor_ldap,
            self.kitchen.id,
            self.description_input.value,
            self.cause,
            self.note_input.value or "",
        )
        if err:
            await interaction.followup.send(err, ephemeral=True)
            return
        await interaction.followup.send(
            self.store.confirm(
                f"Incident registered for kitchen `{self.kitchen.order_number}`."
            ),
            ephemeral=True,
        )


class NoteModal(discord.ui.Modal, title="Add Note"):
    def __init__(self, store: DashboardStore, incident_id: str) -> None:
        super().__init__()
        self.store = store
        self.incident_id = incident_id
        self.ldap_input = discord.ui.TextInput(
            label="Your LDAP",
            placeholder="e.g. 30104750",
            required=True,
            max_length=20,
        )
        self.note_input = discord.ui.TextInput(
            label="Note",
            style=discord.TextStyle.long,
            placeholder="Describe what was done...",
            required=True,
            max_length=2000,
        )
        self.add_item(self.ldap_input)
        self.add_item(self.note_input)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        err = await self.store.add_note(
            self.incident_id, self.note_input.value, self.ldap_input.value
        )
        if err:
            await interaction.followup.send(err, ephemeral=True)
            return
        await interaction.followup.send(self.store.confirm("Note recorded."), ephemeral=True)

"""Discord bot used by the team to run the kitchen dashboard."""

from __future__ import annotations

from typing import Any

import discord
from discord.ext import commands

from .data.store import DashboardStore
from .logging_config import setup_logging


class KitchenBot(commands.Bot):
    """Small ``discord.py`` bot exposing the dashboard as slash commands."""

    def __init__(self, store: DashboardStore, **kwargs: Any) -> None:  # pragma: no cover - trivial
        """Initialize the bot with the minimal intents required."""
        intents = kwargs.pop("intents", None) or discord.Intents.default()
        # Slash commands and components only; message content is not needed.
        intents.message_content = False
        super().__init__(
            command_prefix=kwargs.pop("command_prefix", "!"),
            intents=intents,
        )
        self.log = setup_logging()
        self.store = store

    async def setup_hook(self) -> None:
        """Load the dataset and sync slash commands."""
        if not await self.store.reload():
            self.log.warning("Starting with an empty dataset: %s", self.store.error)

        # New slash commands only show up for users once the tree is synced.
        tree = getattr(self, "tree", None)
        if tree is not None:  # pragma: no cover - exercised in integration
            await tree.sync()

        await super().setup_hook()

    async def on_ready(self) -> None:  # pragma: no cover - requires discord
        """Log a short confirmation once the bot connected successfully."""
        await self.change_presence(activity=discord.Game(name="Kitchen tracker"))
        self.log.info(
            "Logged in as %s (%s)",
            self.user,
            self.user.id if self.user else "?",
        )


__all__ = ["KitchenBot"]

from __future__ import annotations

import asyncio

from .adapters.http import HttpBackend
from .bot import KitchenBot
from .commands.register import register_commands
from .config import load_settings
from .core.directory import IdentityDirectory
from .data.store import DashboardStore
from .logging_config import setup_logging


def main() -> int:
    log = setup_logging()
    settings = load_settings()
    if not settings.token:
        log.error(
            "DISCORD_BOT_TOKEN is not set. "
            "Export it in your environment before running."
        )
        return 2
    backend = HttpBackend(settings.api_url, timeout=settings.api_timeout)
    store = DashboardStore(backend, IdentityDirectory(), settings.roster)
    bot = KitchenBot(store)
    register_commands(bot, store)

    async def runner():
        try:
            async with bot:
                await bot.start(settings.token)
        except KeyboardInterrupt:
            log.info("Shutting down...")
        finally:
            await backend.close()
        return 0

    return asyncio.run(runner())


if __name__ == "__main__":
    raise SystemExit(main())

import os
from dataclasses import dataclass

from .core.directory import INSTALLERS, SELLERS, Roster


def _names(value: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    names = tuple(n.strip() for n in (value or "").split(",") if n.strip())
    return names or default


@dataclass(frozen=True)
class Settings:
    token: str
    api_url: str = "http://localhost:8080/api.php"
    api_timeout: float = 10.0
    sellers: tuple[str, ...] = SELLERS
    installers: tuple[str, ...] = INSTALLERS

    @property
    def roster(self) -> Roster:
        return Roster(sellers=self.sellers, installers=self.installers)


def load_settings() -> Settings:
    token = os.getenv("DISCORD_BOT_TOKEN", "").strip()
    api_url = os.getenv("KITCHEN_API_URL", "").strip() or Settings.api_url
    try:
        timeout = float(os.getenv("KITCHEN_API_TIMEOUT", "") or Settings.api_timeout)
    except ValueError:
        timeout = Settings.api_timeout
    return Settings(
        token=token or "",
        api_url=api_url,
        api_timeout=timeout,
        sellers=_names(os.getenv("KITCHEN_SELLERS"), SELLERS),
        installers=_names(os.getenv("KITCHEN_INSTALLERS"), INSTALLERS),
    )

"""Static identity directory and professional roster.

Actors are looked up by their LDAP identifier. Resolved names are copied onto
records at write time; nothing here is consulted again when reading.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from .models import IncidentCause, Kitchen, Role

SELLER_ROLE = "Vendedor"

SELLERS: tuple[str, ...] = ("Lara", "Maybeth", "Raquel")
INSTALLERS: tuple[str, ...] = (
    "Instalador A",
    "Instalador B",
    "Instalador C",
    "Instalador D",
)

USER_LDAP_MAP: dict[str, tuple[str, str]] = {
    "30000001": ("Lara", "Vendedor"),
    "30000002": ("Maybeth", "Vendedor"),
    "30000003": ("Raquel", "Vendedor"),
    "30104750": ("Javi", "Manager"),
    "30000004": ("Juanan", "CPC"),
}


@dataclass(frozen=True)
class Actor:
    ldap: str
    name: str
    role: str

    @property
    def is_seller(self) -> bool:
        return self.role == SELLER_ROLE


@dataclass(frozen=True)
class Roster:
    """Professionals that kitchens can be attributed to."""

    sellers: tuple[str, ...] = SELLERS
    installers: tuple[str, ...] = INSTALLERS

    def labels(self, role: Role) -> tuple[str, ...]:
        return self.sellers if role is Role.SELLER else self.installers


@dataclass(frozen=True)
class Assignment:
    seller: str | None = None
    installer: str | None = None


class IdentityDirectory:
    """Lookup of actor identifiers to display name and role."""

    def __init__(self, entries: Mapping[str, tuple[str, str]] | None = None) -> None:
        source = USER_LDAP_MAP if entries is None else entries
        self._actors = {
            ldap: Actor(ldap=ldap, name=name, role=role)
            for ldap, (name, role) in source.items()
        }

    def resolve(self, ldap: str | None) -> Actor | None:
        if not ldap:
            return None
        return self._actors.get(ldap.strip())

    def search(self, query: str, limit: int = 25) -> list[Actor]:
        """Actors whose name or identifier contains ``query``."""
        if len(query.strip()) < 2:
            return []
        needle = query.strip().lower()
        return [
            a
            for a in self._actors.values()
            if needle in a.name.lower() or needle in a.ldap
        ][:limit]

    def __iter__(self) -> Iterator[Actor]:
        return iter(self._actors.values())

    def __len__(self) -> int:
        return len(self._actors)


def default_assignment(actor: Actor | None, kitchen: Kitchen | None) -> Assignment:
    """Who an incident or registration should be attributed to by default.

    A seller acting on a record is always the seller; everything else falls
    back to the professionals recorded on the kitchen.
    """
    seller = kitchen.seller if kitchen else None
    if actor is not None and actor.is_seller:
        seller = actor.name
    installer = kitchen.installer if kitchen else None
    return Assignment(seller=seller, installer=installer)


def default_cause(actor: Actor | None) -> IncidentCause:
    if actor is not None and actor.is_seller:
        return IncidentCause.SELLER
    return IncidentCause.OTHER

"""Discord id ↔ GitHub login lookup.

The table is built once at start-up from a mapping source and is read-only
afterwards, so concurrent lookups need no locking.
"""

from __future__ import annotations

from typing import Iterable, Optional, Protocol


class _Pair(Protocol):
    discord_id: str
    github_login: str


class IdentityMapper:
    """Total, side-effect free lookups in both directions.

    A miss returns None. Discord ids are compared with surrounding whitespace
    stripped. If the same key appears in several pairs, the last one wins.
    """

    def __init__(self, pairs: Iterable[_Pair]):
        self._by_discord: dict[str, str] = {}
        self._by_login: dict[str, str] = {}
        for pair in pairs:
            discord_id = str(pair.discord_id).strip()
            login = str(pair.github_login)
            self._by_discord[discord_id] = login
            self._by_login[login] = discord_id

    def to_login(self, discord_id: str) -> Optional[str]:
        return self._by_discord.get(str(discord_id).strip())

    def to_discord_id(self, login: str) -> Optional[str]:
        return self._by_login.get(login)

    def pairs(self) -> list[tuple[str, str]]:
        return sorted(self._by_discord.items())

    def __len__(self) -> int:
        return len(self._by_discord)

"""Identity mapping data models.

Decoupled from reviewpolice_core so the store layer can be used on its own;
IdentityMapper only needs objects with ``discord_id`` and ``github_login``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class MappingFormatError(ValueError):
    """The mappings document does not have the expected shape."""


@dataclass(frozen=True)
class IdentityPair:
    """One Discord user id linked to one GitHub login."""

    discord_id: str
    github_login: str


def parse_mappings(document: Any) -> list[IdentityPair]:
    """Read ``{"mappings": [{"discordId": ..., "githubId": ...}, ...]}``.

    An empty or missing ``mappings`` list is valid and yields no pairs.
    """
    if document is None:
        return []
    if not isinstance(document, dict):
        raise MappingFormatError("mappings document must be an object with a 'mappings' list")

    entries = document.get("mappings") or []
    if not isinstance(entries, list):
        raise MappingFormatError("'mappings' must be a list")

    pairs = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise MappingFormatError(f"mapping #{i} is not an object")
        discord_id = entry.get("discordId")
        github_login = entry.get("githubId")
        if discord_id in (None, "") or not github_login:
            raise MappingFormatError(f"mapping #{i} needs both 'discordId' and 'githubId'")
        # Discord snowflakes are often written as numbers; keep them as strings.
        pairs.append(IdentityPair(discord_id=str(discord_id).strip(), github_login=str(github_login)))
    return pairs

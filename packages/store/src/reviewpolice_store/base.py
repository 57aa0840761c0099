"""Abstract mapping source interface.

Where the Discord ↔ GitHub account table lives (a file next to the bot, a
team Gist) is a deployment choice. The CLI depends on MappingSource, not on a
concrete backend, so sources are swappable without touching CLI code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reviewpolice_store.models import IdentityPair


class MappingSource(ABC):
    """Read-only source of identity pairs, loaded once at start-up."""

    @abstractmethod
    def load(self) -> list[IdentityPair]:
        """Return every identity pair in the source.

        Raises when the source cannot be read or is malformed. A bot with a
        silently empty table would mention nobody.
        """

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable location of the source, for logs and CLI output."""

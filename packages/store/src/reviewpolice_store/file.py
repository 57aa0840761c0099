"""FileMappingSource: the account table as a local JSON or YAML file.

The default ``account-mappings.json`` layout is::

    {"mappings": [{"discordId": "123456789012345678", "githubId": "octocat"}]}

YAML is a superset of JSON, so the same loader reads both.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from reviewpolice_store.base import MappingSource
from reviewpolice_store.models import IdentityPair, parse_mappings

logger = logging.getLogger(__name__)


class FileMappingSource(MappingSource):
    def __init__(self, path: str | Path):
        self._path = Path(path)

    @property
    def description(self) -> str:
        return str(self._path)

    def load(self) -> list[IdentityPair]:
        if not self._path.exists():
            raise FileNotFoundError(f"Account mappings file not found: {self._path}")
        with open(self._path, encoding="utf-8") as f:
            document = yaml.safe_load(f)
        pairs = parse_mappings(document)
        logger.info("Loaded %d account mapping(s) from %s", len(pairs), self._path)
        return pairs

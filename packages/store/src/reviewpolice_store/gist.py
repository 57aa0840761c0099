"""GistMappingSource: the account table kept in a GitHub Gist.

Lets a team edit the table in one shared place instead of shipping a file
with every deployment. The Gist holds a single file, ``account-mappings.json``,
in the same format FileMappingSource reads.
"""

from __future__ import annotations

import json
import logging

from github import Auth, Github

from reviewpolice_store.base import MappingSource
from reviewpolice_store.models import IdentityPair, MappingFormatError, parse_mappings

logger = logging.getLogger(__name__)

GIST_FILENAME = "account-mappings.json"


class GistMappingSource(MappingSource):
    def __init__(self, gist_id: str, token: str | None = None):
        self._gist_id = gist_id
        self._gh = Github(auth=Auth.Token(token)) if token else Github()

    @property
    def description(self) -> str:
        return f"gist {self._gist_id}"

    def load(self) -> list[IdentityPair]:
        gist = self._gh.get_gist(self._gist_id)
        gist_file = gist.files.get(GIST_FILENAME)
        if gist_file is None:
            raise MappingFormatError(f"Gist {self._gist_id} has no {GIST_FILENAME} file")
        try:
            document = json.loads(gist_file.content or "{}")
        except json.JSONDecodeError as e:
            raise MappingFormatError(f"{GIST_FILENAME} in gist {self._gist_id} is not valid JSON: {e}")
        pairs = parse_mappings(document)
        logger.info("Loaded %d account mapping(s) from gist %s", len(pairs), self._gist_id)
        return pairs

"""Tests for the Discord id ↔ GitHub login lookup."""

from types import SimpleNamespace

from reviewpolice_core.identity import IdentityMapper


def _pair(discord_id, login):
    return SimpleNamespace(discord_id=discord_id, github_login=login)


class TestIdentityMapper:
    def test_maps_both_directions(self, identity):
        assert identity.to_login("111") == "alice"
        assert identity.to_discord_id("bob") == "222"

    def test_misses_return_none(self, identity):
        assert identity.to_login("999") is None
        assert identity.to_discord_id("mallory") is None

    def test_empty_table_never_returns_empty_string(self):
        mapper = IdentityMapper([])
        assert mapper.to_login("111") is None
        assert mapper.to_discord_id("") is None
        assert len(mapper) == 0

    def test_discord_id_whitespace_is_stripped(self):
        mapper = IdentityMapper([_pair(" 111 ", "alice")])
        assert mapper.to_login("111") == "alice"
        assert mapper.to_login("111\n") == "alice"
        assert mapper.to_discord_id("alice") == "111"

    def test_numeric_ids_are_compared_as_strings(self):
        mapper = IdentityMapper([_pair(111, "alice")])
        assert mapper.to_login("111") == "alice"

    def test_last_pair_wins_for_duplicate_keys(self):
        mapper = IdentityMapper([_pair("111", "alice"), _pair("111", "alice-work")])
        assert mapper.to_login("111") == "alice-work"

    def test_pairs_sorted_by_discord_id(self, identity):
        assert identity.pairs() == [("111", "alice"), ("222", "bob"), ("333", "carol")]

"""Tests for the CLI entry point and commands."""

from unittest.mock import AsyncMock, MagicMock

from click.testing import CliRunner

from reviewpolice_cli.cli import main
from reviewpolice_core.config import DEFAULT_CONFIG
from reviewpolice_core.models import build_pull_request
from reviewpolice_store.base import MappingSource
from reviewpolice_store.models import IdentityPair


def _make_config(**overrides):
    config = {
        **DEFAULT_CONFIG,
        "repository": "acme/app",
        "github_token": "tok",
        "github_app_id": None,
        "github_private_key": None,
        "github_installation_id": None,
        "webhook_secret": "s3cret",
        "discord_token": "discord",
        "discord_channel_id": "1000",
        "discord_guild_id": "2000",
    }
    config.update(overrides)
    return config


def _pr(number, reviewers, title=None):
    return build_pull_request(
        number, title or f"PR {number}", f"https://github.com/acme/app/pull/{number}", "open", reviewers
    )


def _make_source(pulls=()):
    by_number = {p.number: p for p in pulls}
    source = MagicMock()
    source.list_open_pull_requests = AsyncMock(return_value=list(pulls))
    source.get_pull_request = AsyncMock(side_effect=lambda n: by_number.get(n))
    source.delete_requested_reviewers = AsyncMock(return_value=True)
    return source


def _patch_common(mocker, config=None, pairs=()):
    """Patch load_config, resolve_github_token and the mapping source for most tests."""
    cfg = config or _make_config()
    mocker.patch("reviewpolice_core.config.load_config", return_value=cfg)
    mocker.patch("reviewpolice_cli.auth.resolve_github_token", return_value="tok")
    mapping_source = MagicMock(spec=MappingSource)
    mapping_source.load.return_value = list(pairs)
    mapping_source.description = "account-mappings.json"
    mocker.patch("reviewpolice_cli.services.build_mapping_source", return_value=mapping_source)
    return cfg, mapping_source


class TestMain:
    def test_repo_option_is_passed_as_override(self, mocker):
        load = mocker.patch("reviewpolice_core.config.load_config", return_value=_make_config())
        mocker.patch("reviewpolice_cli.auth.resolve_github_token", return_value=None)
        mocker.patch("reviewpolice_cli.services.build_mapping_source")

        CliRunner().invoke(main, ["--config", "custom.yml", "--repo", "acme/other", "mappings"])

        load.assert_called_once_with("custom.yml", cli_overrides={"repository": "acme/other"})

    def test_file_mappings_never_ask_gh_for_a_token(self, mocker):
        mocker.patch("reviewpolice_core.config.load_config", return_value=_make_config(github_token=None))
        resolve = mocker.patch("reviewpolice_cli.auth.resolve_github_token")
        mapping_source = MagicMock(spec=MappingSource)
        mapping_source.load.return_value = []
        mapping_source.description = "account-mappings.json"
        mocker.patch("reviewpolice_cli.services.build_mapping_source", return_value=mapping_source)

        result = CliRunner().invoke(main, ["mappings"])

        assert result.exit_code == 0
        resolve.assert_not_called()


# ---------------------------------------------------------------------------
# show
# ---------------------------------------------------------------------------


class TestShowCommand:
    def test_lists_requests(self, mocker):
        _patch_common(mocker)
        source = _make_source([_pr(1, ["alice"], "Sole"), _pr(2, ["alice", "bob"], "Shared")])
        mocker.patch("reviewpolice_cli.commands.show.build_pull_request_source", return_value=source)

        result = CliRunner().invoke(main, ["show", "--login", "alice"])

        assert result.exit_code == 0, result.output
        assert "#1" in result.output
        assert "#2" in result.output

    def test_filters_by_type(self, mocker):
        _patch_common(mocker)
        source = _make_source([_pr(1, ["alice"], "Sole"), _pr(2, ["alice", "bob"], "Shared")])
        mocker.patch("reviewpolice_cli.commands.show.build_pull_request_source", return_value=source)

        result = CliRunner().invoke(main, ["show", "--login", "alice", "--type", "accepted"])

        assert "Sole" in result.output
        assert "Shared" not in result.output

    def test_empty_message(self, mocker):
        _patch_common(mocker)
        mocker.patch("reviewpolice_cli.commands.show.build_pull_request_source", return_value=_make_source())

        result = CliRunner().invoke(main, ["show", "--login", "carol", "--type", "unaccepted"])

        assert result.exit_code == 0
        assert "carol has no unaccepted review requests" in result.output

    def test_rejects_unknown_type(self, mocker):
        _patch_common(mocker)

        result = CliRunner().invoke(main, ["show", "--login", "alice", "--type", "pending"])

        assert result.exit_code != 0


# ---------------------------------------------------------------------------
# accept
# ---------------------------------------------------------------------------


class TestAcceptCommand:
    def test_accepts_given_prs(self, mocker):
        _patch_common(mocker)
        source = _make_source([_pr(7, ["alice", "bob"])])
        mocker.patch("reviewpolice_cli.commands.accept.build_pull_request_source", return_value=source)

        result = CliRunner().invoke(main, ["accept", "--login", "alice", "--pr", "7", "--pr", "8", "--yes"])

        assert result.exit_code == 0, result.output
        source.delete_requested_reviewers.assert_awaited_once_with(7, ["bob"])
        assert "PR #7: Your friends have been bailed out" in result.output
        assert "PR #8:" in result.output

    def test_interactive_selection(self, mocker):
        _patch_common(mocker)
        source = _make_source([_pr(7, ["alice", "bob"]), _pr(9, ["alice", "carol"])])
        mocker.patch("reviewpolice_cli.commands.accept.build_pull_request_source", return_value=source)

        result = CliRunner().invoke(main, ["accept", "--login", "alice"], input="9\ny\n")

        assert result.exit_code == 0, result.output
        source.delete_requested_reviewers.assert_awaited_once_with(9, ["carol"])

    def test_selection_must_be_an_unaccepted_request(self, mocker):
        _patch_common(mocker)
        source = _make_source([_pr(7, ["alice", "bob"])])
        mocker.patch("reviewpolice_cli.commands.accept.build_pull_request_source", return_value=source)

        result = CliRunner().invoke(main, ["accept", "--login", "alice"], input="42\n")

        assert result.exit_code != 0
        assert "PR #42 is not one of your unaccepted review requests" in result.output
        source.delete_requested_reviewers.assert_not_awaited()

    def test_declining_confirmation_aborts(self, mocker):
        _patch_common(mocker)
        source = _make_source([_pr(7, ["alice", "bob"])])
        mocker.patch("reviewpolice_cli.commands.accept.build_pull_request_source", return_value=source)

        result = CliRunner().invoke(main, ["accept", "--login", "alice", "--pr", "7"], input="n\n")

        assert result.exit_code != 0
        source.delete_requested_reviewers.assert_not_awaited()

    def test_nothing_to_accept(self, mocker):
        _patch_common(mocker)
        source = _make_source([_pr(7, ["alice"])])
        mocker.patch("reviewpolice_cli.commands.accept.build_pull_request_source", return_value=source)

        result = CliRunner().invoke(main, ["accept", "--login", "alice"])

        assert result.exit_code == 0
        assert "don't have any unaccepted review requests" in result.output


# ---------------------------------------------------------------------------
# mappings
# ---------------------------------------------------------------------------


class TestMappingsCommand:
    def test_prints_table(self, mocker):
        _patch_common(mocker, pairs=[IdentityPair("111", "alice"), IdentityPair("222", "bob")])

        result = CliRunner().invoke(main, ["mappings"])

        assert result.exit_code == 0
        assert "alice" in result.output
        assert "222" in result.output

    def test_empty_table(self, mocker):
        _patch_common(mocker)

        result = CliRunner().invoke(main, ["mappings"])

        assert "No account mappings found in account-mappings.json" in result.output

    def test_load_failure_is_a_usage_error(self, mocker):
        _, mapping_source = _patch_common(mocker)
        mapping_source.load.side_effect = FileNotFoundError("account-mappings.json")

        result = CliRunner().invoke(main, ["mappings"])

        assert result.exit_code == 2
        assert "Could not load account mappings" in result.output


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


class TestServeCommand:
    def _patch_serve(self, mocker):
        mocker.patch("reviewpolice_cli.commands.serve.configure_logging")
        mocker.patch("reviewpolice_cli.commands.serve.build_pull_request_source", return_value=_make_source())
        return mocker.patch("reviewpolice_cli.commands.serve.run_service", new_callable=AsyncMock)

    def test_runs_service_with_loaded_identity(self, mocker):
        _patch_common(mocker, pairs=[IdentityPair("111", "alice")])
        run = self._patch_serve(mocker)

        result = CliRunner().invoke(main, ["serve", "--port", "8080"])

        assert result.exit_code == 0, result.output
        run.assert_awaited_once()
        config, _source, identity = run.await_args.args
        assert config["listen_port"] == 8080
        assert identity.to_login("111") == "alice"

    def test_missing_secret_is_a_usage_error(self, mocker):
        _patch_common(mocker, config=_make_config(webhook_secret=None))
        run = self._patch_serve(mocker)

        result = CliRunner().invoke(main, ["serve"])

        assert result.exit_code == 2
        assert "GH_SECRET" in result.output
        run.assert_not_awaited()

    def test_relay_mode_requires_smee_url(self, mocker):
        _patch_common(mocker)
        self._patch_serve(mocker)

        result = CliRunner().invoke(main, ["serve", "--mode", "relay"])

        assert result.exit_code == 2
        assert "SMEE_IO_URL" in result.output

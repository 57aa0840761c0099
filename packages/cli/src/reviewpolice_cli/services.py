"""Builders shared by the CLI commands.

Each command builds what it needs from the loaded config here, so neither
reviewpolice_core nor reviewpolice_store know about the CLI config format.
"""

from __future__ import annotations

import click
from github import GithubException

from reviewpolice_cli.auth import resolve_github_auth
from reviewpolice_core.gh.pull_request import GitHubPullRequestSource, get_repo
from reviewpolice_core.identity import IdentityMapper
from reviewpolice_store.base import MappingSource
from reviewpolice_store.models import MappingFormatError


def build_mapping_source(config: dict) -> MappingSource:
    """Instantiate the configured mapping source.

    Source selection:
      mapping_source: file → FileMappingSource (mappings_path, default account-mappings.json)
      mapping_source: gist → GistMappingSource (mappings_gist_id, optional GitHub token)
    """
    source_type = config.get("mapping_source", "file")

    if source_type == "gist":
        from reviewpolice_store.gist import GistMappingSource

        gist_id = config.get("mappings_gist_id")
        if not gist_id:
            raise click.UsageError("mapping_source: gist requires mappings_gist_id in .reviewpolice.yml.")
        from reviewpolice_cli.auth import resolve_github_token

        return GistMappingSource(gist_id=gist_id, token=config.get("github_token") or resolve_github_token())

    if source_type == "file":
        from reviewpolice_store.file import FileMappingSource

        return FileMappingSource(config.get("mappings_path", "account-mappings.json"))

    raise click.UsageError(f"Unknown mapping_source {source_type!r}. Use 'file' or 'gist'.")


def load_identity(mapping_source: MappingSource) -> IdentityMapper:
    try:
        pairs = mapping_source.load()
    except (OSError, MappingFormatError, GithubException) as e:
        raise click.UsageError(f"Could not load account mappings from {mapping_source.description}: {e}")
    return IdentityMapper(pairs)


def build_pull_request_source(config: dict) -> GitHubPullRequestSource:
    repository = config.get("repository")
    if not repository:
        raise click.UsageError(
            "No repository configured. Set 'repository: owner/name' in .reviewpolice.yml or GH_REPOSITORY."
        )

    auth = resolve_github_auth(config)
    if auth is None:
        raise click.UsageError(
            "No GitHub credentials found. Configure the GitHub App (GH_APP_ID, GH_PRIVATE_KEY, "
            "GH_INSTALLATION_ID), set GITHUB_TOKEN, or run `gh auth login`."
        )

    try:
        repo = get_repo(repository, auth)
    except GithubException as e:
        raise click.UsageError(f"Could not open repository {repository}: {e}")
    return GitHubPullRequestSource(repo)

"""GitHub credential resolution.

Resolution order (stops at first success):
  1. GitHub App installation (GH_APP_ID, GH_PRIVATE_KEY, GH_INSTALLATION_ID).
     This is how the bot runs in production: it acts as the app, not as a
     person, so review-request removals are attributed to the bot.
  2. GITHUB_TOKEN environment variable
  3. `gh auth token` (GitHub CLI session, handy for the terminal commands)
"""

from __future__ import annotations

import logging
import os
import subprocess

from github import Auth

logger = logging.getLogger(__name__)


def resolve_github_token() -> str | None:
    """Return a GitHub token or None if no valid source is available.

    Never raises. Callers should check for None and emit a UsageError.
    """
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0:
            gh_token = result.stdout.strip()
            if gh_token:
                logger.debug("Resolved GitHub token via gh CLI session.")
                return gh_token
    except (FileNotFoundError, subprocess.TimeoutExpired):
        # gh is not installed or timed out.
        pass

    return None


def resolve_github_auth(config: dict) -> Auth.Auth | None:
    """Return PyGithub credentials for ``config``, or None when there are none."""
    app_id = config.get("github_app_id")
    private_key = config.get("github_private_key")
    installation_id = config.get("github_installation_id")
    if app_id and private_key and installation_id:
        logger.debug("Authenticating as GitHub App %s installation %s.", app_id, installation_id)
        return Auth.AppAuth(int(app_id), private_key).get_installation_auth(int(installation_id))

    token = config.get("github_token") or resolve_github_token()
    if token:
        return Auth.Token(token)
    return None

import os
from pathlib import Path
from typing import Optional

import yaml

from reviewpolice_core.errors import ConfigError

DEFAULT_CONFIG: dict = {
    "repository": None,  # "owner/name" of the repository whose pull requests are policed
    "mode": "listen",  # "listen" (GitHub posts to us) or "relay" (follow a smee.io channel)
    "listen_host": "0.0.0.0",
    "listen_port": 3000,
    "webhook_path": "/api/github/webhooks",
    "smee_url": None,
    "grace_window_seconds": 5.0,
    "opened_ttl_seconds": 60.0,
    "sweep_interval_seconds": 15.0,
    "relay_reconnect_seconds": 5.0,
    "mapping_source": "file",  # "file" or "gist"
    "mappings_path": "account-mappings.json",
    "mappings_gist_id": None,
    "discord_channel_id": None,
    "discord_guild_id": None,
    "product_owner": None,
}

MODES = ("listen", "relay")

# APP_MODE values understood for compatibility with existing deployments.
_APP_MODES = {"development": "relay", "release": "listen"}

# Deployment settings that may also come from the environment, which wins over the file.
_ENV_SETTINGS = {
    "GH_REPOSITORY": "repository",
    "DISCORD_CHANNEL_ID": "discord_channel_id",
    "DISCORD_GUILD_ID": "discord_guild_id",
    "GH_PRODUCT_OWNER": "product_owner",
    "SMEE_IO_URL": "smee_url",
}


def load_config(config_path: str = ".reviewpolice.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .reviewpolice.yml in the current directory
      3. CLI argument overrides
      4. Environment variables (credentials always, deployment ids when set)
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    for env_name, key in _ENV_SETTINGS.items():
        value = os.environ.get(env_name)
        if value:
            config[key] = value

    app_mode = os.environ.get("APP_MODE")
    if app_mode and app_mode.lower() in _APP_MODES:
        config["mode"] = _APP_MODES[app_mode.lower()]

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["github_app_id"] = os.environ.get("GH_APP_ID")
    config["github_private_key"] = _expand_newlines(os.environ.get("GH_PRIVATE_KEY"))
    config["github_installation_id"] = os.environ.get("GH_INSTALLATION_ID")
    config["webhook_secret"] = os.environ.get("GH_SECRET")
    config["discord_token"] = os.environ.get("DISCORD_TOKEN")

    return config


def _expand_newlines(value: Optional[str]) -> Optional[str]:
    # PEM keys stored in .env files usually have their line breaks escaped.
    if value is None:
        return None
    return value.replace("\\n", "\n")


def validate_serve_config(config: dict) -> None:
    """Raise ConfigError unless ``config`` has everything ``serve`` needs."""
    missing = [
        name
        for name, key in [
            ("repository", "repository"),
            ("GH_SECRET", "webhook_secret"),
            ("DISCORD_TOKEN", "discord_token"),
            ("DISCORD_CHANNEL_ID", "discord_channel_id"),
            ("DISCORD_GUILD_ID", "discord_guild_id"),
        ]
        if not config.get(key)
    ]

    mode = config.get("mode")
    if mode not in MODES:
        raise ConfigError(f"Unknown mode {mode!r}. Choose one of: {', '.join(MODES)}.")
    if mode == "relay" and not config.get("smee_url"):
        missing.append("SMEE_IO_URL")

    if config.get("mapping_source") == "gist" and not config.get("mappings_gist_id"):
        missing.append("mappings_gist_id")

    if missing:
        raise ConfigError(f"Missing required configuration: {', '.join(missing)}")

    for key in ("discord_channel_id", "discord_guild_id"):
        try:
            int(config[key])
        except (TypeError, ValueError):
            raise ConfigError(f"{key} must be a numeric Discord id, got {config[key]!r}")

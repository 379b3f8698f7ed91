"""Configuration loading from YAML files and the environment."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from tickit.errors import ConfigError

logger = logging.getLogger(__name__)

TICKIT_DEFAULTS = {
    "jql": "assignee = currentUser() ORDER BY updated DESC",
    "page-size": 50,
    "search-api": "jql",
    "rate-limit": 100,
    "rate-interval": 60,
    "max-retries": 3,
    "log-file": "",
    "log-level": "warning",
}

JIRA_CLI_PATH = Path("~/.config/jira-cli/config.yaml")

# Later entries win
_ENV_CREDENTIALS = (
    ("TICKIT_INSTANCE", "instance"),
    ("TICKIT_USERNAME", "username"),
    ("JIRA_API_TOKEN", "token"),
    ("TICKIT_TOKEN", "token"),
)


def _python_key(file_key: str) -> str:
    """Convert file-style key (hyphenated) to Python-style (underscored)."""
    return file_key.replace("-", "_")


def _coerce_setting(file_key: str, raw: Any):
    """Type-coerce a setting using its default."""
    default = TICKIT_DEFAULTS.get(file_key)
    if default is None:
        return raw
    if isinstance(default, int):
        try:
            value = int(raw)
        except (TypeError, ValueError):
            raise ConfigError(f"{file_key} must be a number, got {raw!r}") from None
        if value < 0:
            raise ConfigError(f"{file_key} cannot be negative")
        return value
    return "" if raw is None else str(raw)


def _default_settings() -> dict[str, Any]:
    return {_python_key(k): v for k, v in TICKIT_DEFAULTS.items()}


@dataclass
class Config:
    instance: str = ""
    username: str = ""
    token: str = ""
    auth_type: str = "api-token"
    settings: dict[str, Any] = field(default_factory=_default_settings)


def default_config_path(environ: Mapping[str, str] | None = None) -> Path:
    environ = os.environ if environ is None else environ
    base = environ.get("XDG_CONFIG_HOME") or "~/.config"
    return Path(base).expanduser() / "tickit" / "config.yaml"


def _read_yaml(path: Path) -> dict:
    """Read a YAML mapping. A missing file is an empty mapping."""
    try:
        text = path.read_text()
    except FileNotFoundError:
        return {}
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")
    logger.debug("loaded config from %s", path)
    return data


def _section(data: dict, name: str, path: Path) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' in {path} must be a mapping")
    return section


def _clean_instance(instance: str) -> str:
    """Accept a pasted URL by reducing it to the hostname."""
    instance = instance.strip()
    for scheme in ("https://", "http://"):
        if instance.startswith(scheme):
            instance = instance[len(scheme):]
    return instance.rstrip("/")


def _apply_jira_cli(config: Config, data: dict, path: Path) -> None:
    if data.get("instance"):
        config.instance = str(data["instance"])
    auth = _section(data, "auth", path)
    if auth.get("type"):
        config.auth_type = str(auth["type"])
    if auth.get("username"):
        config.username = str(auth["username"])
    if auth.get("token"):
        config.token = str(auth["token"])


def _apply_tickit(config: Config, data: dict, path: Path) -> None:
    jira = _section(data, "jira", path)
    for file_key, value in jira.items():
        attr = _python_key(file_key)
        if attr not in ("instance", "username", "token", "auth_type"):
            logger.warning("ignoring unknown jira setting %r in %s", file_key, path)
            continue
        if value:
            setattr(config, attr, str(value))

    for file_key, value in _section(data, "tickit", path).items():
        if file_key not in TICKIT_DEFAULTS:
            logger.warning("ignoring unknown setting %r in %s", file_key, path)
            continue
        config.settings[_python_key(file_key)] = _coerce_setting(file_key, value)


def load_config(
    path: Path | None = None,
    jira_cli_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Config:
    """Merge jira-cli's config, tickit's config and the environment, in that order."""
    environ = os.environ if environ is None else environ
    config = Config()

    cli_path = jira_cli_path or JIRA_CLI_PATH.expanduser()
    _apply_jira_cli(config, _read_yaml(cli_path), cli_path)

    own_path = path or default_config_path(environ)
    _apply_tickit(config, _read_yaml(own_path), own_path)

    for var, attr in _ENV_CREDENTIALS:
        if environ.get(var):
            setattr(config, attr, environ[var])

    config.instance = _clean_instance(config.instance)
    return config

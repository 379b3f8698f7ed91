"""Startup checks: is the config usable and does the tracker answer?"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from tickit.api.client import SEARCH_APIS, IssueTracker
from tickit.errors import (
    AuthenticationError,
    ConfigError,
    IoError,
    NetworkError,
    TrackerError,
    ValidationError,
)
from tickit.validators import validate_instance

if TYPE_CHECKING:
    from tickit.config import Config

logger = logging.getLogger(__name__)

PROBE_JQL = "assignee = currentUser() ORDER BY updated DESC"


class ConnectionStatus(Enum):
    CONNECTED = "connected"
    AUTHENTICATION_FAILED = "authentication_failed"
    NETWORK_ERROR = "network_error"
    CONFIGURATION_ERROR = "configuration_error"
    UNKNOWN_ERROR = "unknown_error"

    def message(self, detail: str | None = None) -> str:
        """User-facing description of this status."""
        if self is ConnectionStatus.CONNECTED:
            return "Connected"
        if self is ConnectionStatus.AUTHENTICATION_FAILED:
            return "Authentication failed. Please check your credentials."
        if self is ConnectionStatus.NETWORK_ERROR:
            return "Network error. Please check your internet connection."
        if self is ConnectionStatus.CONFIGURATION_ERROR:
            return "Configuration error. Please check your tickit config."
        return f"Unknown error: {detail or 'no details'}"


def validate_config(config: Config) -> None:
    """Raise ConfigError if the config cannot possibly connect."""
    if not config.instance:
        raise ConfigError("Jira instance cannot be empty")
    try:
        validate_instance(config.instance)
    except ValidationError as exc:
        raise ConfigError(exc.message) from exc
    if not config.username:
        raise ConfigError("Username cannot be empty")
    if config.auth_type != "api-token":
        raise ConfigError(f"Unsupported auth type '{config.auth_type}', use api-token")
    if not config.token:
        raise ConfigError("API token is required for api-token authentication")
    if config.settings["search_api"] not in SEARCH_APIS:
        raise ConfigError(f"search-api must be one of {', '.join(SEARCH_APIS)}")


def status_for(error: TrackerError) -> ConnectionStatus:
    if isinstance(error, AuthenticationError):
        return ConnectionStatus.AUTHENTICATION_FAILED
    if isinstance(error, (NetworkError, IoError)):
        return ConnectionStatus.NETWORK_ERROR
    if isinstance(error, ConfigError):
        return ConnectionStatus.CONFIGURATION_ERROR
    return ConnectionStatus.UNKNOWN_ERROR


async def check_connection(
    tracker: IssueTracker, jql: str = PROBE_JQL
) -> tuple[ConnectionStatus, str | None]:
    """Run a one-row search to prove the credentials work."""
    try:
        await tracker.search(jql, 0, 1)
    except TrackerError as exc:
        logger.warning("connection check failed: %s", exc)
        return status_for(exc), str(exc)
    return ConnectionStatus.CONNECTED, None

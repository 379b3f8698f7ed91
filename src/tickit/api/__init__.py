"""Resilient access to the issue tracker's REST API."""

from tickit.api.client import IssueTracker, JiraClient
from tickit.api.connection import ConnectionStatus, check_connection, validate_config
from tickit.api.ratelimit import RateLimiter
from tickit.api.retry import RetryConfig, is_retryable, retry

__all__ = [
    "ConnectionStatus",
    "IssueTracker",
    "JiraClient",
    "RateLimiter",
    "RetryConfig",
    "check_connection",
    "is_retryable",
    "retry",
    "validate_config",
]

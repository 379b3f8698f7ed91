"""Error types raised by tickit."""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for every error tickit raises on purpose."""

    prefix = "Error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.prefix}: {self.message}"


class NetworkError(TrackerError):
    """The request never got a response."""

    prefix = "Network error"


class AuthenticationError(TrackerError):
    prefix = "Authentication error"


class ValidationError(TrackerError):
    """Caller-supplied input was rejected before sending."""

    prefix = "Validation error"


class ApiError(TrackerError):
    """The server answered with a non-2xx status."""

    prefix = "API error"

    def __init__(self, status: int, body: str = ""):
        super().__init__(body)
        self.status = status
        self.body = body

    def __str__(self) -> str:
        return f"{self.prefix} ({self.status}): {self.body}"


class ConfigError(TrackerError):
    prefix = "Configuration error"


class ParseError(TrackerError):
    """A response could not be decoded; names the offending field."""

    prefix = "Parse error"

    def __init__(self, field: str, message: str | None = None, value: str | None = None):
        if message is None:
            message = f"Missing or invalid field '{field}'"
        super().__init__(message)
        self.field = field
        self.value = value


class InternalError(TrackerError):
    prefix = "Internal error"


class IoError(TrackerError):
    prefix = "IO error"

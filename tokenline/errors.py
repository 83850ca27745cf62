"""Error taxonomy for the request pipeline."""
from typing import Any, Optional


class ApiError(RuntimeError):
    """Base class for every failure surfaced by the client."""


class AuthError(ApiError):
    """No token could be obtained."""


class HttpError(ApiError):
    """The server answered with a status outside 2xx."""

    def __init__(self, status_code: int, message: str = "", body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.body = body


class TransportError(ApiError):
    """The network call failed before producing a status code."""


class UserCancelled(ApiError):
    """The user declined the file picker."""


class ConfigurationError(ValueError):
    pass


def error_message(exc: BaseException) -> Optional[str]:
    """Return the user-facing message of an exception, or None if it has none."""
    message = str(exc).strip()
    return message or None


def http_error_for(status_code: int, body: Any, not_found_message: str) -> HttpError:
    """Build the HttpError for a non-2xx response, taking the message from the body."""
    message = body.get("message") if isinstance(body, dict) else None
    if not message and status_code == 404:
        message = not_found_message
    return HttpError(status_code, str(message or ""), body)

"""
Models for tokenline.

Immutable dataclasses for configuration and per-call descriptors, plus the
mutable session cell shared by the whole client.
"""
import os
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from .errors import ConfigurationError


class HttpMethod(Enum):
    """HTTP methods supported by the request pipeline."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class ErrorPolicy(Enum):
    """What the executor does with a failed call."""
    SILENT = "silent"                        # re-raise, no dialog
    SHOW_AND_RAISE = "show_and_raise"        # dialog, then re-raise
    SHOW_AND_SWALLOW = "show_and_swallow"    # dialog, return None


@dataclass
class Session:
    """Holder of the bearer token and the logged-in user."""
    token: Optional[str] = None
    user: Any = None

    @property
    def has_token(self) -> bool:
        return bool(self.token)

    def store(self, token: str, user: Any) -> None:
        self.token = token
        self.user = user

    def clear(self) -> None:
        self.token = None
        self.user = None


@dataclass(frozen=True)
class RequestDescriptor:
    """Immutable description of a single API call."""
    path: str = ""
    query: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    method: HttpMethod = HttpMethod.GET
    wants_spinner: bool = True
    spinner_instant: bool = False
    error_policy: ErrorPolicy = ErrorPolicy.SHOW_AND_RAISE


@dataclass(frozen=True)
class TransportResponse:
    """Status code and decoded body returned by a transport."""
    status_code: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration for the API client."""
    remote_root: str = ""
    login_path: str = "/login"
    no_token_prefixes: Tuple[str, ...] = ("/login",)
    spinner_delay: float = 0.5  # seconds before a lazy spinner shows up
    upload_field_name: str = "file"
    timeout_seconds: float = 60
    # User-facing texts
    error_title: str = "Error"
    not_found_message: str = "Not found"
    network_error_message: str = "Network connection failed"
    loading_title: str = "Loading"
    uploading_title: str = "Uploading"

    @classmethod
    def from_env(cls, **overrides) -> "ClientConfig":
        """Build config from TOKENLINE_* environment variables."""
        values = {
            "remote_root": os.getenv("TOKENLINE_REMOTE_ROOT", "").strip().rstrip("/"),
        }
        try:
            raw_delay = os.getenv("TOKENLINE_SPINNER_DELAY")
            if raw_delay:
                values["spinner_delay"] = float(raw_delay)
            raw_timeout = os.getenv("TOKENLINE_TIMEOUT_SECONDS")
            if raw_timeout:
                values["timeout_seconds"] = float(raw_timeout)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid numeric setting: {exc}") from exc

        values.update({key: value for key, value in overrides.items() if value is not None})
        values["remote_root"] = str(values.get("remote_root", "")).rstrip("/")
        config = cls(**values)
        config.validate()
        return config

    def validate(self) -> None:
        if not self.remote_root:
            raise ConfigurationError("Missing required setting: TOKENLINE_REMOTE_ROOT")
        if self.spinner_delay < 0:
            raise ConfigurationError("TOKENLINE_SPINNER_DELAY must be 0 or greater")
        if self.timeout_seconds <= 0:
            raise ConfigurationError("TOKENLINE_TIMEOUT_SECONDS must be greater than 0")
        if not self.login_path.startswith("/"):
            raise ConfigurationError("login_path must start with '/'")

    def with_remote_root(self, remote_root: str) -> "ClientConfig":
        return replace(self, remote_root=remote_root.rstrip("/"))

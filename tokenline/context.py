"""Shared state of one client: session, loading counter and login flight."""
import asyncio
from dataclasses import dataclass, field
from typing import Optional

from .models import ClientConfig, Session


@dataclass
class LoadingCounter:
    """Reference count of requests that asked for the loading indicator."""
    count: int = 0
    timer: Optional[asyncio.TimerHandle] = None
    visible: bool = False


@dataclass
class ClientContext:
    """
    State shared by every component of one client.

    Created once at startup and injected into the coordinators, so nothing
    lives in module globals and each test gets a fresh instance.
    """
    config: ClientConfig
    session: Session = field(default_factory=Session)
    loading: LoadingCounter = field(default_factory=LoadingCounter)
    login_flight: Optional["asyncio.Future[str]"] = None
    remote_root: str = ""

    def __post_init__(self):
        if not self.remote_root:
            self.remote_root = self.config.remote_root.rstrip("/")

    def set_remote_root(self, root: str) -> None:
        self.remote_root = root.rstrip("/")

    @property
    def login_in_flight(self) -> bool:
        return self.login_flight is not None and not self.login_flight.done()

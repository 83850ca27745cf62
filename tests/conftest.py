"""Shared fixtures for tokenline tests."""
from unittest.mock import AsyncMock, Mock

import pytest

from tokenline.models import ClientConfig, TransportResponse
from tokenline.orchestrator import ApiClient

REMOTE_ROOT = "https://api.example.com"


@pytest.fixture
def presenter():
    return Mock()


@pytest.fixture
def transport():
    transport = AsyncMock()
    transport.request_once.return_value = TransportResponse(200, {"ok": True})
    return transport


@pytest.fixture
def login_provider():
    provider = AsyncMock()
    provider.get_login_code.return_value = "login-code-1"
    return provider


@pytest.fixture
def file_picker():
    return AsyncMock()


@pytest.fixture
def make_client(transport, presenter, login_provider, file_picker):
    """Factory for ApiClient wired to the mock collaborators."""

    def _make(token="tok", **config_overrides):
        config = ClientConfig(remote_root=REMOTE_ROOT, **config_overrides)
        client = ApiClient(
            config,
            login_code_provider=login_provider,
            transport=transport,
            presenter=presenter,
            file_picker=file_picker,
        )
        if token:
            client.context.session.store(token, {"id": 1})
        return client

    return _make

"""Tests for token acquisition and login deduplication."""
import asyncio

import pytest

from tokenline.errors import AuthError, HttpError
from tokenline.models import TransportResponse


def _delayed(*responses, delay=0.01):
    """Transport side effect returning responses in order after a short pause."""
    queue = list(responses)

    async def _request_once(url, method, headers, json_body=None):
        await asyncio.sleep(delay)
        return queue.pop(0)

    return _request_once


@pytest.mark.asyncio
async def test_cached_token_skips_login(make_client, login_provider, transport):
    client = make_client(token="cached")

    assert await client.get_token() == "cached"

    login_provider.get_login_code.assert_not_awaited()
    transport.request_once.assert_not_awaited()


@pytest.mark.asyncio
async def test_login_exchanges_code_and_stores_session(make_client, login_provider, transport):
    client = make_client(token=None)
    transport.request_once.return_value = TransportResponse(
        200, {"token": "fresh", "user": {"name": "ada"}}
    )

    token = await client.get_token()

    assert token == "fresh"
    assert client.context.session.token == "fresh"
    assert client.get_user_info() == {"name": "ada"}
    transport.request_once.assert_awaited_once_with(
        "https://api.example.com/login",
        "POST",
        {},
        {"code": "login-code-1"},
    )
    assert client.context.login_flight is None


@pytest.mark.asyncio
async def test_login_in_flight_tracks_the_running_login(make_client, transport):
    client = make_client(token=None)
    transport.request_once.side_effect = _delayed(
        TransportResponse(200, {"token": "t", "user": None}), delay=0.05
    )

    assert client.context.login_in_flight is False
    task = asyncio.create_task(client.get_token())
    await asyncio.sleep(0.01)
    assert client.context.login_in_flight is True

    assert await task == "t"
    assert client.context.login_in_flight is False


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_login(make_client, login_provider, transport):
    client = make_client(token=None)
    transport.request_once.side_effect = _delayed(
        TransportResponse(200, {"token": "shared", "user": None})
    )

    tokens = await asyncio.gather(*(client.get_token() for _ in range(5)))

    assert tokens == ["shared"] * 5
    login_provider.get_login_code.assert_awaited_once()
    assert transport.request_once.await_count == 1


@pytest.mark.asyncio
async def test_requests_waiting_on_login_use_its_token(make_client, transport):
    client = make_client(token=None)
    transport.request_once.side_effect = _delayed(
        TransportResponse(200, {"token": "t1", "user": None}),
        TransportResponse(200, {"n": 1}),
        TransportResponse(200, {"n": 2}),
    )

    await asyncio.gather(client.get("/a"), client.get("/b"))

    calls = transport.request_once.await_args_list
    assert calls[0].args[0].endswith("/login")
    assert [call.args[2] for call in calls[1:]] == [{"Authorization": "bearer t1"}] * 2


@pytest.mark.asyncio
async def test_missing_token_in_response_raises(make_client, transport):
    client = make_client(token=None)
    transport.request_once.return_value = TransportResponse(200, {"user": {}})

    with pytest.raises(AuthError, match="missing `token`"):
        await client.login()

    assert client.context.session.token is None
    assert client.context.login_flight is None


@pytest.mark.asyncio
async def test_failed_login_rejects_waiters_and_allows_retry(make_client, login_provider, transport):
    client = make_client(token=None)
    transport.request_once.side_effect = _delayed(
        TransportResponse(401, {"message": "bad code"}),
        TransportResponse(200, {"token": "second", "user": None}),
    )

    results = await asyncio.gather(
        *(client.get_token() for _ in range(3)),
        return_exceptions=True,
    )

    assert all(isinstance(result, HttpError) for result in results)
    # The server's rejection is surfaced as is, not rewrapped as AuthError.
    assert not any(isinstance(result, AuthError) for result in results)
    assert all(str(result) == "bad code" for result in results)
    assert client.context.login_flight is None

    assert await client.get_token() == "second"
    assert login_provider.get_login_code.await_count == 2


@pytest.mark.asyncio
async def test_login_failure_shown_once_by_outer_request(make_client, transport, presenter):
    client = make_client(token=None)
    transport.request_once.return_value = TransportResponse(500, {"message": "login down"})

    with pytest.raises(HttpError):
        await client.get("/items")

    presenter.show.assert_called_once_with(title="Error", content="login down", dismiss_only=True)
    assert client.loading.count == 0


@pytest.mark.asyncio
async def test_logout_clears_session(make_client):
    client = make_client(token="tok")

    client.logout()

    assert client.context.session.token is None
    assert client.get_user_info() is None

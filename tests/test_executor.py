"""Tests for the request pipeline."""
import pytest

from tokenline.errors import AuthError, HttpError, TransportError
from tokenline.models import ErrorPolicy, HttpMethod, TransportResponse
from tokenline.services.executor import build_query_string


def test_build_query_string_empty():
    assert build_query_string({}) == ""
    assert build_query_string(None) == ""


def test_build_query_string_keeps_insertion_order():
    assert build_query_string({"a": "1", "b": "2"}) == "?a=1&b=2"
    assert build_query_string({"b": "2", "a": "1"}) == "?b=2&a=1"


@pytest.mark.asyncio
async def test_get_with_query_and_token(make_client, transport):
    client = make_client(token="abc")
    transport.request_once.return_value = TransportResponse(200, {"items": []})

    result = await client.get("/items", query={"page": "2"})

    assert result == {"items": []}
    transport.request_once.assert_awaited_once_with(
        "https://api.example.com/items?page=2",
        "GET",
        {"Authorization": "bearer abc"},
        None,
    )


@pytest.mark.asyncio
async def test_url_without_query_has_no_question_mark(make_client, transport):
    client = make_client()

    await client.get("/items")

    url = transport.request_once.await_args.args[0]
    assert url == "https://api.example.com/items"
    assert "?" not in url


@pytest.mark.asyncio
async def test_post_put_delete_send_method_and_body(make_client, transport):
    client = make_client()

    await client.post("/items", body={"name": "a"})
    await client.put("/items/1", body={"name": "b"})
    await client.delete("/items/1")

    calls = transport.request_once.await_args_list
    assert [call.args[1] for call in calls] == ["POST", "PUT", "DELETE"]
    assert calls[0].args[3] == {"name": "a"}
    assert calls[1].args[3] == {"name": "b"}
    assert calls[2].args[3] is None


@pytest.mark.asyncio
async def test_body_returned_unchanged_for_2xx(make_client, transport):
    client = make_client()
    body = ["raw", {"nested": True}]
    transport.request_once.return_value = TransportResponse(204, body)

    assert await client.get("/things") is body


@pytest.mark.asyncio
async def test_404_without_message_uses_not_found(make_client, transport, presenter):
    client = make_client()
    transport.request_once.return_value = TransportResponse(404, {})

    with pytest.raises(HttpError) as exc_info:
        await client.get("/missing")

    assert exc_info.value.status_code == 404
    assert str(exc_info.value) == "Not found"
    presenter.show.assert_called_once_with(title="Error", content="Not found", dismiss_only=True)


@pytest.mark.asyncio
async def test_500_uses_message_from_body(make_client, transport, presenter):
    client = make_client()
    transport.request_once.return_value = TransportResponse(500, {"message": "boom"})

    with pytest.raises(HttpError, match="boom"):
        await client.get("/explode")

    presenter.show.assert_called_once_with(title="Error", content="boom", dismiss_only=True)


@pytest.mark.asyncio
async def test_error_without_message_shows_network_fallback(make_client, transport, presenter):
    client = make_client()
    transport.request_once.return_value = TransportResponse(502, "Bad gateway")

    with pytest.raises(HttpError) as exc_info:
        await client.get("/upstream")

    assert exc_info.value.message == ""
    assert exc_info.value.body == "Bad gateway"
    presenter.show.assert_called_once_with(
        title="Error",
        content="Network connection failed",
        dismiss_only=True,
    )


@pytest.mark.asyncio
async def test_silent_policy_raises_without_dialog(make_client, transport, presenter):
    client = make_client()
    transport.request_once.return_value = TransportResponse(400, {"message": "bad"})

    with pytest.raises(HttpError):
        await client.get("/bad", error_policy=ErrorPolicy.SILENT)

    presenter.show.assert_not_called()


@pytest.mark.asyncio
async def test_swallow_policy_shows_and_returns_none(make_client, transport, presenter):
    client = make_client()
    transport.request_once.return_value = TransportResponse(400, {"message": "bad"})

    result = await client.get("/bad", error_policy=ErrorPolicy.SHOW_AND_SWALLOW)

    assert result is None
    presenter.show.assert_called_once()


@pytest.mark.asyncio
async def test_transport_exception_is_wrapped_and_spinner_released(make_client, transport, presenter):
    client = make_client()
    transport.request_once.side_effect = ConnectionError("link down")

    with pytest.raises(TransportError, match="link down"):
        await client.get("/items", spinner_instant=True)

    assert client.loading.count == 0
    presenter.show.assert_called_once_with(title="Error", content="link down", dismiss_only=True)


@pytest.mark.asyncio
async def test_spinner_released_on_http_error(make_client, transport):
    client = make_client()
    transport.request_once.return_value = TransportResponse(500, {})

    with pytest.raises(HttpError):
        await client.get("/items")

    assert client.loading.count == 0


@pytest.mark.asyncio
async def test_no_spinner_when_not_requested(make_client, transport, presenter):
    client = make_client()

    await client.get("/items", spinner=False, spinner_instant=True)

    assert client.context.loading.timer is None
    presenter.show_busy.assert_not_called()


@pytest.mark.asyncio
async def test_auth_failure_skips_transport_and_spinner(make_client, transport, presenter, login_provider):
    client = make_client(token=None)
    login_provider.get_login_code.side_effect = OSError("no host")

    with pytest.raises(AuthError):
        await client.get("/items", spinner_instant=True)

    transport.request_once.assert_not_awaited()
    assert client.loading.count == 0
    presenter.show_busy.assert_not_called()
    presenter.show.assert_called_once()


@pytest.mark.asyncio
async def test_login_path_is_sent_without_token(make_client, transport):
    client = make_client(token="abc")

    await client.request("/login", method=HttpMethod.POST, body={"code": "x"})

    headers = transport.request_once.await_args.args[2]
    assert "Authorization" not in headers


@pytest.mark.asyncio
async def test_set_remote_root(make_client, transport):
    client = make_client()
    client.set_remote_root("https://other.example.com/")

    await client.get("/items")

    assert transport.request_once.await_args.args[0] == "https://other.example.com/items"

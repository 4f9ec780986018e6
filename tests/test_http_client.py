import json

import httpx
import pytest

from expense_tracker.core.errors import ExpenseTrackerError
from expense_tracker.services.http_client import HttpError, JsonClient
from tests.base import BASE_URL

pytestmark = pytest.mark.anyio


def client_for(handler, retries=2):
    return JsonClient(BASE_URL, retries=retries, backoff=0, transport=httpx.MockTransport(handler))


async def test_get_retries_server_errors_then_succeeds():
    answers = [503, 502, 200]
    seen = []

    def handler(request):
        seen.append(request.url.path)
        status = answers.pop(0)
        return httpx.Response(status, json=[{"ok": True}] if status == 200 else {})

    client = client_for(handler)
    assert await client.get("/expenses") == [{"ok": True}]
    assert seen == ["/api/v1/expenses"] * 3
    await client.aclose()


async def test_get_gives_up_after_retries():
    calls = []

    def handler(request):
        calls.append(1)
        return httpx.Response(500)

    client = client_for(handler, retries=1)
    with pytest.raises(HttpError) as exc:
        await client.get("/expenses")
    assert exc.value.status_code == 500
    assert len(calls) == 2


async def test_transport_errors_are_retried():
    calls = []

    def handler(request):
        calls.append(1)
        if len(calls) == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"id": "1"})

    client = client_for(handler)
    assert await client.get("/users/1") == {"id": "1"}
    assert len(calls) == 2


async def test_post_is_not_retried():
    calls = []

    def handler(request):
        calls.append(1)
        return httpx.Response(503)

    client = client_for(handler)
    with pytest.raises(HttpError):
        await client.post("/expenses", {"title": "x"})
    assert len(calls) == 1


async def test_client_errors_raise_immediately_with_status():
    calls = []

    def handler(request):
        calls.append(1)
        return httpx.Response(404, json="Not found")

    client = client_for(handler)
    with pytest.raises(HttpError) as exc:
        await client.get("/expenses/9")
    assert exc.value.status_code == 404
    assert len(calls) == 1


async def test_query_params_and_json_body_are_sent():
    captured = {}

    def handler(request):
        captured["params"] = dict(request.url.params)
        captured["body"] = request.content
        return httpx.Response(200, json={})

    client = client_for(handler)
    await client.get("/expenses", ownerId="u1", page=1)
    assert captured["params"] == {"ownerId": "u1", "page": "1"}
    await client.put("/expenses/1", {"amount": 3})
    assert json.loads(captured["body"]) == {"amount": 3}


async def test_empty_body_decodes_to_none_and_bad_json_raises():
    def handler(request):
        if request.url.path.endswith("/empty"):
            return httpx.Response(200)
        return httpx.Response(200, content=b"<html>")

    client = client_for(handler)
    assert await client.delete("/empty") is None
    with pytest.raises(HttpError):
        await client.get("/html")


async def test_bad_json_error_keeps_decoder_cause():
    def handler(request):
        return httpx.Response(200, content=b"{not json")

    client = client_for(handler)
    with pytest.raises(HttpError) as exc:
        await client.get("/expenses")
    assert exc.value.status_code == 200
    assert isinstance(exc.value.__cause__, ValueError)


def test_http_error_belongs_to_domain_errors():
    assert issubclass(HttpError, ExpenseTrackerError)


async def test_client_can_be_used_again_after_close():
    def handler(request):
        return httpx.Response(200, json={"id": "1"})

    client = client_for(handler)
    assert await client.get("/users/1") == {"id": "1"}
    await client.aclose()
    assert client.closed
    assert await client.get("/users/1") == {"id": "1"}
    assert not client.closed
    await client.aclose()

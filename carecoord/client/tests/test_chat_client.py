"""Tests for ChatProxyClient against a mocked transport."""

import json

import httpx
import pytest

from carecoord.client.chat_client import ChatProxyClient
from carecoord.client.config import ClientSettings
from carecoord.client.exceptions import ChatClientError
from carecoord.db.chat_messages.model import ChatRole

SETTINGS = ClientSettings(api_url="https://api.example.org", access_token="token-123")


def make_client(handler) -> ChatProxyClient:
    return ChatProxyClient(settings=SETTINGS, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_send_posts_message_with_bearer_token():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"response": "Quedan 5 kg."})

    async with make_client(handler) as client:
        reply = await client.send("¿Cuánto arroz?")

    assert reply == "Quedan 5 kg."
    assert seen == {
        "url": "https://api.example.org/api/chat",
        "auth": "Bearer token-123",
        "body": {"message": "¿Cuánto arroz?"},
    }


@pytest.mark.asyncio
async def test_error_status_carries_server_message():
    def handler(request):
        return httpx.Response(
            429, json={"error": "Rate limit exceeded. Please try again later."}
        )

    async with make_client(handler) as client:
        with pytest.raises(ChatClientError) as exc_info:
            await client.send("hi")

    assert exc_info.value.status_code == 429
    assert exc_info.value.message == "Rate limit exceeded. Please try again later."


@pytest.mark.asyncio
async def test_error_status_without_body():
    async with make_client(lambda request: httpx.Response(502, text="bad gateway")) as client:
        with pytest.raises(ChatClientError, match="HTTP error: 502"):
            await client.send("hi")


@pytest.mark.asyncio
async def test_malformed_payload():
    async with make_client(lambda request: httpx.Response(200, json={"reply": "x"})) as client:
        with pytest.raises(ChatClientError, match="Invalid response format"):
            await client.send("hi")


@pytest.mark.asyncio
async def test_non_json_payload():
    async with make_client(lambda request: httpx.Response(200, text="ok")) as client:
        with pytest.raises(ChatClientError):
            await client.send("hi")


@pytest.mark.asyncio
async def test_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with make_client(handler) as client:
        with pytest.raises(ChatClientError, match="Request error"):
            await client.send("hi")


@pytest.mark.asyncio
async def test_history():
    def handler(request):
        assert request.url.path == "/api/chat/history"
        assert request.url.params["limit"] == "50"
        return httpx.Response(
            200,
            json={
                "messages": [
                    {
                        "id": "1",
                        "role": "user",
                        "content": "hi",
                        "created_at": "2025-03-01T12:00:00Z",
                    }
                ],
                "total": 1,
            },
        )

    async with make_client(handler) as client:
        messages = await client.history()

    assert [(m.role, m.content) for m in messages] == [(ChatRole.USER, "hi")]


def test_identity_follows_access_token():
    assert make_client(lambda request: None).has_identity
    anonymous = ChatProxyClient(settings=ClientSettings(access_token=None))
    assert not anonymous.has_identity

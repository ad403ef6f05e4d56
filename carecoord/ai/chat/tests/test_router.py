"""Tests for the chat proxy HTTP endpoint."""

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from carecoord.ai.chat.constants import PAYMENT_REQUIRED_MESSAGE, RATE_LIMIT_MESSAGE
from carecoord.ai.chat.router import get_chat_service
from carecoord.ai.chat.service import ChatProxyService
from carecoord.ai.openai.exceptions import (
    OpenAIContentGenerationError,
    OpenAIPaymentRequiredError,
    OpenAIRateLimitError,
)
from carecoord.auth.config import AuthSettings, set_auth_settings
from carecoord.db.chat_messages.model import ChatRole
from carecoord.db.dependencies import get_chat_message_repository
from carecoord.main import app
from carecoord.testing import (
    FakeChatMessageRepository,
    FakeInventoryRepository,
    FakeProvider,
    FakeScheduleRepository,
    make_item,
)

AUTH_HEADERS = {"Authorization": "Bearer test-token"}


@pytest.fixture
def messages():
    return FakeChatMessageRepository()


@pytest.fixture
def provider():
    return FakeProvider(reply="We have rice.")


@pytest.fixture
def client(messages, provider):
    """Test client whose chat service runs on in-memory fakes."""

    def chat_service_override():
        return ChatProxyService(
            inventory_repository=FakeInventoryRepository([make_item("Rice", 5, 10)]),
            schedule_repository=FakeScheduleRepository(),
            message_repository=messages,
            provider=provider,
        )

    app.dependency_overrides[get_chat_service] = chat_service_override
    app.dependency_overrides[get_chat_message_repository] = lambda: messages

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


class TestChatEndpoint:
    def test_success_returns_reply_and_persists_two_rows(self, client, messages):
        response = client.post(
            "/api/chat", json={"message": "Do we have rice?"}, headers=AUTH_HEADERS
        )

        assert response.status_code == 200
        assert response.json() == {"response": "We have rice."}
        assert [m.role for m in messages.messages] == [
            ChatRole.USER.value,
            ChatRole.ASSISTANT.value,
        ]
        assert messages.messages[1].content == response.json()["response"]

    def test_rate_limit(self, client, provider, messages):
        provider.error = OpenAIRateLimitError("Rate limit exceeded", status_code=429)

        response = client.post("/api/chat", json={"message": "hi"}, headers=AUTH_HEADERS)

        assert response.status_code == 429
        assert response.json() == {"error": RATE_LIMIT_MESSAGE}
        assert messages.messages == []

    def test_payment_required(self, client, provider):
        provider.error = OpenAIPaymentRequiredError("Payment required", status_code=402)

        response = client.post("/api/chat", json={"message": "hi"}, headers=AUTH_HEADERS)

        assert response.status_code == 402
        assert response.json() == {"error": PAYMENT_REQUIRED_MESSAGE}

    def test_gateway_error(self, client, provider):
        provider.error = OpenAIContentGenerationError(
            "AI gateway error: 503", status_code=503
        )

        response = client.post("/api/chat", json={"message": "hi"}, headers=AUTH_HEADERS)

        assert response.status_code == 500
        assert response.json() == {"error": "AI gateway error: 503"}

    def test_missing_api_key(self, client, monkeypatch):
        monkeypatch.delenv("LLM_API_KEY")

        response = client.post("/api/chat", json={"message": "hi"}, headers=AUTH_HEADERS)

        assert response.status_code == 500
        assert response.json() == {"error": "LLM_API_KEY is not configured"}

    def test_malformed_body(self, client, messages):
        response = client.post(
            "/api/chat",
            content=b"not json",
            headers={**AUTH_HEADERS, "Content-Type": "application/json"},
        )

        assert response.status_code == 500
        assert "error" in response.json()
        assert messages.messages == []

    def test_missing_bearer_token(self, client):
        response = client.post("/api/chat", json={"message": "hi"})

        assert response.status_code == 401

    def test_preflight(self, client):
        response = client.options("/api/chat")

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert "authorization" in response.headers["access-control-allow-headers"]

    def test_cors_headers_on_errors(self, client, provider):
        provider.error = OpenAIRateLimitError("Rate limit exceeded")

        response = client.post("/api/chat", json={"message": "hi"}, headers=AUTH_HEADERS)

        assert response.headers["access-control-allow-origin"] == "*"


class TestChatHistoryEndpoint:
    def test_anonymous_caller_gets_empty_history(self, client):
        client.post("/api/chat", json={"message": "hi"}, headers=AUTH_HEADERS)

        response = client.get("/api/chat/history", headers=AUTH_HEADERS)

        assert response.status_code == 200
        assert response.json() == {"messages": [], "total": 0}

    def test_history_after_one_exchange(self, client):
        set_auth_settings(AuthSettings(jwt_secret="test-secret"))
        token = jwt.encode(
            {"sub": "user-1", "aud": "authenticated"}, "test-secret", algorithm="HS256"
        )
        headers = {"Authorization": f"Bearer {token}"}

        assert client.get("/api/chat/history", headers=headers).json()["total"] == 0

        client.post("/api/chat", json={"message": "How much rice?"}, headers=headers)
        data = client.get("/api/chat/history", headers=headers).json()

        assert data["total"] == 2
        assert [(m["role"], m["content"]) for m in data["messages"]] == [
            ("user", "How much rice?"),
            ("assistant", "We have rice."),
        ]

"""Async client for the chat proxy and chat history endpoints."""

from typing import Any

import httpx
from pydantic import ValidationError

from carecoord.ai.chat.schemas import ChatResponse
from carecoord.client.config import ClientSettings, get_client_settings
from carecoord.client.exceptions import ChatClientError
from carecoord.db.chat_messages.schemas import MessageListResponse, MessageResponse
from carecoord.db.constants import TRANSCRIPT_HISTORY_LIMIT
from carecoord.utils.logger import logger

CHAT_ENDPOINT = "/api/chat"
HISTORY_ENDPOINT = "/api/chat/history"


class ChatProxyClient:
    """Talks to ``POST /api/chat`` and ``GET /api/chat/history``.

    Every failure (network error, non-2xx status, malformed payload) is raised
    as ChatClientError; nothing is retried.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Client settings; read from the environment when None
            transport: Optional httpx transport, e.g. a MockTransport in tests
        """
        self.settings = settings or get_client_settings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def has_identity(self) -> bool:
        return bool(self.settings.access_token)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self.settings.access_token:
                headers["Authorization"] = f"Bearer {self.settings.access_token}"
            self._client = httpx.AsyncClient(
                base_url=self.settings.api_url,
                headers=headers,
                timeout=self.settings.request_timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ChatProxyClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        endpoint: str,
        json: dict | None = None,
        params: dict | None = None,
    ) -> Any:
        client = self._get_client()
        try:
            response = await client.request(method, endpoint, json=json, params=params)
        except httpx.RequestError as e:
            logger.warning("API request failed", endpoint=endpoint, error=str(e))
            raise ChatClientError(f"Request error: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.is_error:
            message = _error_message(data) or f"HTTP error: {response.status_code}"
            logger.warning(
                "API returned an error",
                endpoint=endpoint,
                status_code=response.status_code,
                error=message,
            )
            raise ChatClientError(
                message, status_code=response.status_code, response_data=data
            )

        if data is None:
            raise ChatClientError(
                "Invalid response format: body is not JSON",
                status_code=response.status_code,
            )
        return data

    async def send(self, message: str) -> str:
        """Send one message to the assistant.

        Args:
            message: User message

        Returns:
            str: The assistant's reply

        Raises:
            ChatClientError: For network errors, error statuses or malformed replies
        """
        data = await self._request("POST", CHAT_ENDPOINT, json={"message": message})
        try:
            return ChatResponse.model_validate(data).response
        except ValidationError as e:
            raise ChatClientError(
                f"Invalid response format: {e}", response_data=data
            ) from e

    async def history(
        self, limit: int = TRANSCRIPT_HISTORY_LIMIT
    ) -> list[MessageResponse]:
        """The caller's latest messages, oldest first.

        Raises:
            ChatClientError: For network errors, error statuses or malformed replies
        """
        data = await self._request("GET", HISTORY_ENDPOINT, params={"limit": limit})
        try:
            return MessageListResponse.model_validate(data).messages
        except ValidationError as e:
            raise ChatClientError(
                f"Invalid response format: {e}", response_data=data
            ) from e


def _error_message(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    error = data.get("error") or data.get("detail")
    return str(error) if error else None

"""HTTP client for the care coordination API."""

from carecoord.client.chat_client import ChatProxyClient
from carecoord.client.config import ClientSettings, get_client_settings
from carecoord.client.exceptions import ChatClientError

__all__ = ["ChatClientError", "ChatProxyClient", "ClientSettings", "get_client_settings"]

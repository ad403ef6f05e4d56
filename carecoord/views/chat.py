"""
Chat transcript state for the assistant panel.

States: idle, awaiting_response and error_displayed. A submit appends the
user's message to the transcript before the request goes out; on failure
the message stays and a dismissible Notification is raised instead of an
assistant reply.
"""

from enum import Enum

from pydantic import BaseModel, Field

from carecoord.client.chat_client import ChatProxyClient
from carecoord.client.exceptions import ChatClientError
from carecoord.db.chat_messages.model import ChatRole
from carecoord.db.constants import TRANSCRIPT_HISTORY_LIMIT
from carecoord.utils.logger import logger

DEFAULT_ERROR_MESSAGE = "Failed to send message. Please try again."


class ChatState(str, Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"
    ERROR_DISPLAYED = "error_displayed"


class TranscriptEntry(BaseModel):
    role: ChatRole
    content: str


class Notification(BaseModel):
    """Transient error shown to the user until dismissed."""

    title: str = Field(default="Error")
    message: str


class ChatInterface:
    """Drives a chat transcript against the chat proxy."""

    def __init__(
        self,
        client: ChatProxyClient,
        history_limit: int = TRANSCRIPT_HISTORY_LIMIT,
    ):
        self.client = client
        self.history_limit = history_limit
        self.transcript: list[TranscriptEntry] = []
        self.state = ChatState.IDLE
        self.notification: Notification | None = None

    @property
    def awaiting_response(self) -> bool:
        return self.state is ChatState.AWAITING_RESPONSE

    async def start(self) -> None:
        await self.load_history()

    async def load_history(self) -> None:
        """Seed the transcript with the caller's prior messages, oldest first.

        Without an identity the transcript starts empty. A failed load is
        logged and leaves the transcript unchanged.
        """
        if not self.client.has_identity:
            self.transcript = []
            return
        try:
            messages = await self.client.history(limit=self.history_limit)
        except ChatClientError as e:
            logger.warning("Failed to load chat history", error=str(e))
            return
        self.transcript = [
            TranscriptEntry(role=message.role, content=message.content)
            for message in messages
        ]

    async def submit(self, text: str) -> bool:
        """
        Send ``text`` to the assistant.

        Blank input and submits while a reply is pending are ignored without
        a request.

        Returns:
            bool: True if a reply was received and appended
        """
        message = text.strip()
        if not message or self.awaiting_response:
            return False

        self.notification = None
        self.transcript.append(TranscriptEntry(role=ChatRole.USER, content=message))
        self.state = ChatState.AWAITING_RESPONSE

        try:
            reply = await self.client.send(message)
        except ChatClientError as e:
            logger.warning(
                "Chat request failed", status_code=e.status_code, error=e.message
            )
            self.notification = Notification(message=e.message or DEFAULT_ERROR_MESSAGE)
            self.state = ChatState.ERROR_DISPLAYED
            return False
        finally:
            # Cancellation and unexpected errors must not leave the input locked.
            if self.state is ChatState.AWAITING_RESPONSE:
                self.state = ChatState.IDLE

        self.transcript.append(TranscriptEntry(role=ChatRole.ASSISTANT, content=reply))
        return True

    def dismiss_notification(self) -> None:
        self.notification = None
        if self.state is ChatState.ERROR_DISPLAYED:
            self.state = ChatState.IDLE

"""Exceptions raised by the API client."""

from typing import Any


class ChatClientError(Exception):
    """A request to the API failed or returned something unusable."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_data: Any = None,
    ) -> None:
        """
        Args:
            message: Error message, shown to the user as-is
            status_code: HTTP status code if a response was received
            response_data: Decoded response body, if any
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_data = response_data

"""Chat-completion gateway exceptions."""


class OpenAIError(Exception):
    """Base exception for gateway errors."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        status_code: int | None = None,
    ):
        """Initialize gateway error.

        Args:
            message: Error message
            original_error: Original exception that caused this error
            status_code: HTTP status returned by the gateway, if any
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.status_code = status_code


class OpenAIConfigurationError(OpenAIError):
    """Exception raised when a required setting such as the API key is missing."""

    pass


class OpenAIRateLimitError(OpenAIError):
    """Exception raised when the gateway answers 429."""

    pass


class OpenAIPaymentRequiredError(OpenAIError):
    """Exception raised when the gateway answers 402 (credits exhausted)."""

    pass


class OpenAIContentGenerationError(OpenAIError):
    """Exception raised for any other completion failure."""

    pass

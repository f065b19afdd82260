"""OpenAI API exceptions."""


class OpenAIError(Exception):
    """Base exception for OpenAI API errors."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        status_code: int | None = None,
    ):
        """Initialize OpenAI error.

        Args:
            message: Error message
            original_error: Original exception that caused this error
            status_code: Upstream HTTP status, when there was one
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.status_code = status_code


class OpenAIConfigurationError(OpenAIError):
    """Exception raised when the API key is not configured."""

    pass


class OpenAIConnectionError(OpenAIError):
    """Exception raised when OpenAI cannot be reached."""

    pass


class OpenAIUpstreamError(OpenAIError):
    """Exception raised when OpenAI answers with an error or breaks the stream."""

    pass

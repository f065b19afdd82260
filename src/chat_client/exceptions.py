"""Custom exception classes for the chat client."""


class ChatClientError(Exception):
    """Base exception for chat client errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CompletionRequestError(ChatClientError):
    """Raised when the completion endpoint answers with a non-success status."""

    pass


class CompletionConnectionError(ChatClientError):
    """Raised when the completion endpoint cannot be reached or the stream breaks."""

    pass


class MessageFinalizedError(ChatClientError):
    """Raised when appending to a message that is already finalized."""

    def __init__(self, message_id: str) -> None:
        super().__init__(f"Message {message_id} is finalized")
        self.message_id = message_id

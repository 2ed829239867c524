"""Exceptions raised by the conversation services.

Each error carries the HTTP status and machine-readable code the API
returns for it; the handlers in main.py do the mapping.
"""


class ConversationError(Exception):
    """Base exception for all conversation errors.

    Attributes:
        code: Machine-readable error code
        message: Human-readable error message
        status_code: HTTP status code for API responses
    """

    def __init__(self, message: str, code: str, status_code: int) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class ValidationError(ConversationError):
    """Raised when request input is missing or malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="validation_error", status_code=400)


class NotFoundError(ConversationError):
    """Raised for unknown conversations and for conversations not yet completed."""

    def __init__(self, message: str = "Conversation not found") -> None:
        super().__init__(message=message, code="not_found", status_code=404)


class ConflictError(ConversationError):
    """Raised when advancing a conversation that is already completed."""

    def __init__(self, message: str = "Conversation already completed") -> None:
        super().__init__(message=message, code="conflict", status_code=400)


class GenerationError(ConversationError):
    """Raised when the text-generation provider call fails. Never retried."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="generation_error", status_code=500)

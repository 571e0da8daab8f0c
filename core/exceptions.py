"""
Error taxonomy for document ingestion and model invocation
"""
from typing import Optional


class DocumentChatError(Exception):
    """Base class for every error the chat pipeline raises on purpose."""


class UnsupportedFormat(DocumentChatError):
    """The uploaded file is neither plain text nor PDF."""


class ReadFailure(DocumentChatError):
    """The file could not be read into text."""


class InvocationError(DocumentChatError):
    """The model endpoint kept failing until the retry budget ran out."""

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


class QueryRejected(DocumentChatError):
    """A query was refused before anything was sent to the model."""

    EMPTY = "empty"
    NO_DOCUMENT = "no_document"
    PENDING = "pending"

    def __init__(self, reason: str, message: Optional[str] = None):
        super().__init__(message or reason)
        self.reason = reason

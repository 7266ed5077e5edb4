"""
Error taxonomy for the card storage layer.

Every error carries a category so callers can react differently to bad
input, missing cards and storage failures (e.g. offer a retry only for
storage failures).
"""

import uuid
from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STORAGE = "storage"


USER_MESSAGES = {
    ErrorCategory.VALIDATION: "Please check the card details and try again.",
    ErrorCategory.NOT_FOUND: "This card no longer exists.",
    ErrorCategory.STORAGE: "Cannot access local storage.",
}


class CardSnapError(Exception):
    """Base exception for card storage operations"""

    category: ErrorCategory = ErrorCategory.STORAGE

    def __init__(
        self,
        message: str,
        technical_details: Optional[str] = None,
        trace_id: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.technical_details = technical_details
        self.trace_id = trace_id or uuid.uuid4().hex[:12]

    @property
    def user_message(self) -> str:
        """Human-readable text for the error's category"""
        return USER_MESSAGES[self.category]

    @property
    def retryable(self) -> bool:
        return self.category == ErrorCategory.STORAGE

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(message='{self.message}', trace_id='{self.trace_id}')>"


class StorageError(CardSnapError):
    """I/O failure against the local store"""
    category = ErrorCategory.STORAGE


class StorageInitError(StorageError):
    """The local store could not be opened"""


class StorageReadError(StorageError):
    """A read against the local store failed"""


class StorageWriteError(StorageError):
    """A write against the local store failed"""


class MalformedRecordError(CardSnapError):
    """A persisted record failed required-field validation during decode"""
    category = ErrorCategory.STORAGE

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        record_id: Optional[str] = None,
        technical_details: Optional[str] = None
    ):
        super().__init__(message, technical_details=technical_details)
        self.field = field
        self.record_id = record_id


class ValidationError(CardSnapError):
    """Caller-supplied card data failed a business rule"""
    category = ErrorCategory.VALIDATION

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class DuplicateCardError(ValidationError):
    """A card with the same identity already exists"""


class NotFoundError(CardSnapError):
    """The targeted card does not exist"""
    category = ErrorCategory.NOT_FOUND

    def __init__(self, card_id: str, message: Optional[str] = None):
        super().__init__(message or f"Card '{card_id}' not found")
        self.card_id = card_id


class RepositoryError(CardSnapError):
    """Unexpected storage-layer failure, wrapping the original cause"""
    category = ErrorCategory.STORAGE

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(
            message,
            technical_details=repr(cause) if cause is not None else None,
            trace_id=getattr(cause, "trace_id", None)
        )
        self.cause = cause
        self.__cause__ = cause

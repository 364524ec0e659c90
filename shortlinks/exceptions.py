"""Exceptions raised by the shortlinks core.

Every exception carries an ``ErrorKind`` so the service boundary can turn it
into a ``ServiceResult`` and the HTTP layer can map it to a status code.

Classes:
    ShortenerError:
        Generic base class for core exceptions.

    InvalidInputError:
        Malformed URL, out-of-range validity, malformed/reserved shortcode.

    ShortcodeConflictError:
        Requested custom shortcode is already in use.

    ShortcodeNotFoundError:
        Shortcode absent from the store.

    ShortcodeExpiredError:
        Shortcode exists but its validity window has passed.

    StorageError:
        Storage or snapshot I/O fault.

    SnapshotError:
        Snapshot file content could not be parsed.
"""

from enum import Enum
from typing import List, Optional


class ErrorKind(str, Enum):
    """Failure categories reported by the service."""

    INVALID_INPUT = "invalid_input"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    INTERNAL = "internal"


class ShortenerError(Exception):
    """Base class for core exceptions.

    Attributes:
        kind: Failure category
        message: Short human-readable summary
        details: Non-empty list of reasons
    """

    kind: ErrorKind = ErrorKind.INTERNAL
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[List[str]] = None):
        self.message = message or self.message
        self.details = list(details) if details else [self.message]
        super().__init__(self.message)


class InvalidInputError(ShortenerError):
    """Raised when request input fails validation."""

    kind = ErrorKind.INVALID_INPUT
    message = "Invalid input"


class ShortcodeConflictError(ShortenerError):
    """Raised when a custom shortcode is already taken."""

    kind = ErrorKind.CONFLICT
    message = "Shortcode already exists"


class ShortcodeNotFoundError(ShortenerError):
    """Raised when a shortcode does not exist in the store."""

    kind = ErrorKind.NOT_FOUND
    message = "Shortcode not found"


class ShortcodeExpiredError(ShortenerError):
    """Raised when a shortcode exists but has expired."""

    kind = ErrorKind.EXPIRED
    message = "URL has expired"


class StorageError(ShortenerError):
    """Raised on storage / snapshot I/O failure."""

    kind = ErrorKind.INTERNAL
    message = "Storage error"


class SnapshotError(StorageError):
    """Raised when a snapshot file is malformed."""

    message = "Malformed snapshot"

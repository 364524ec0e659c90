"""Core business logic for the shortlinks URL shortener."""

from .exceptions import ErrorKind
from .results import ServiceResult
from .scheduler import CleanupScheduler
from .service import URLShortenerService
from .shortcode import ShortCodeGenerator

__all__ = [
    "ErrorKind",
    "ServiceResult",
    "CleanupScheduler",
    "ShortCodeGenerator",
    "URLShortenerService",
]

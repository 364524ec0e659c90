"""Common utilities for URL shortener."""

from .validators import validate_url, validate_validity, is_private_host
from .logging_config import setup_logging, get_logger

__all__ = [
    "validate_url",
    "validate_validity",
    "is_private_host",
    "setup_logging",
    "get_logger",
]

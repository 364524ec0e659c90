"""Validation utilities for URL shortener."""

import ipaddress
import logging
import re
from typing import Any, List, Optional, Tuple
from urllib.parse import urlparse


MAX_URL_LENGTH = 2048
DEFAULT_VALIDITY_MINUTES = 30
MAX_VALIDITY_MINUTES = 525600  # one year

_PROTOCOL_RE = re.compile(r"^https?://", re.IGNORECASE)
_UNSAFE_RE = re.compile(r"(javascript|data|vbscript|file|ftp):", re.IGNORECASE)
_DOMAIN_LABEL_RE = re.compile(r"^[a-z0-9_](?:[a-z0-9_-]{0,61}[a-z0-9_])?$", re.IGNORECASE)
_TLD_RE = re.compile(r"^(?:[a-z]{2,63}|xn--[a-z0-9-]{1,59})$", re.IGNORECASE)
_INTEGER_RE = re.compile(r"^\s*[+-]?\d+\s*$")

logger = logging.getLogger("shortlinks.validators")


def _is_valid_host(host: str) -> bool:
    """Hostname with a TLD, or an IP address literal."""
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        pass

    labels = host.split(".")
    if len(labels) < 2:
        return False
    if not all(_DOMAIN_LABEL_RE.match(label) for label in labels):
        return False
    return bool(_TLD_RE.match(labels[-1]))


def is_private_host(host: str) -> bool:
    """Check whether a host is localhost or a private/loopback address.

    Args:
        host: Hostname or IP literal

    Returns:
        True for localhost, loopback, private and unspecified addresses
    """
    host = host.lower().strip("[]")
    if host == "localhost" or host.endswith(".localhost"):
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    return address.is_loopback or address.is_private or address.is_unspecified


def validate_url(url: Any, production: bool = False) -> Tuple[Optional[str], List[str]]:
    """Validate and normalize a URL.

    The protocol defaults to https when omitted. All problems found are
    reported together.

    Args:
        url: The URL to validate
        production: Reject localhost and private network hosts

    Returns:
        Tuple of (normalized_url or None, errors)
    """
    if not url or not isinstance(url, str):
        return None, ["URL is required and must be a string"]

    trimmed = url.strip()
    if not trimmed:
        return None, ["URL cannot be empty"]

    errors = []
    if len(trimmed) > MAX_URL_LENGTH:
        errors.append(f"URL must be less than {MAX_URL_LENGTH} characters")

    normalized = trimmed
    if not _PROTOCOL_RE.match(normalized):
        normalized = "https://" + normalized

    host = None
    try:
        result = urlparse(normalized)
        host = result.hostname
        # Accessing the port validates it
        result.port
        if result.scheme.lower() not in ("http", "https") or not host or not _is_valid_host(host) or " " in normalized:
            errors.append("Invalid URL format")
    except ValueError:
        errors.append("Invalid URL format")

    if production and host and is_private_host(host):
        errors.append("Localhost and internal URLs are not allowed in production")

    if _UNSAFE_RE.search(normalized):
        errors.append("URL contains potentially unsafe protocol")

    if errors:
        logger.warning(f"Invalid URL '{url}': {', '.join(errors)}")
        return None, errors

    return normalized, []


def validate_validity(validity: Any, default: int = DEFAULT_VALIDITY_MINUTES) -> Tuple[Optional[int], List[str]]:
    """Validate a validity period in minutes.

    Accepts ints, integral floats and integer strings; ``None`` means the
    default.

    Args:
        validity: Requested validity
        default: Value used when validity is None

    Returns:
        Tuple of (minutes or None, errors)
    """
    if validity is None:
        return default, []

    minutes = None
    if isinstance(validity, bool):
        minutes = None
    elif isinstance(validity, int):
        minutes = validity
    elif isinstance(validity, float) and validity.is_integer():
        minutes = int(validity)
    elif isinstance(validity, str) and _INTEGER_RE.match(validity):
        minutes = int(validity)

    if minutes is None:
        return None, ["Validity must be an integer number of minutes"]

    errors = []
    if minutes <= 0:
        errors.append("Validity must be greater than 0 minutes")
    if minutes > MAX_VALIDITY_MINUTES:
        errors.append(f"Validity cannot exceed {MAX_VALIDITY_MINUTES} minutes (1 year)")

    if errors:
        logger.warning(f"Invalid validity '{validity}': {', '.join(errors)}")
        return None, errors

    return minutes, []

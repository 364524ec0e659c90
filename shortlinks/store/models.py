"""Data models for shortened URLs and their click ledger."""

import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple


DEFAULT_VALIDITY_MINUTES = 30
_LEADING_DIGITS_RE = re.compile(r"^\s*(\d+)")
LOCAL_LOCATION = "Local/Localhost"

# Placeholder locations, indexed by the sum of the IP octets
MOCK_LOCATIONS = (
    "New York, US",
    "London, UK",
    "Tokyo, JP",
    "Sydney, AU",
    "Berlin, DE",
    "Toronto, CA",
    "Mumbai, IN",
    "São Paulo, BR",
)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with milliseconds and a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def derive_geo_location(ip_address: Optional[str]) -> str:
    """Map an IP address onto a placeholder location.

    Not real geolocation: loopback/unknown addresses map to
    ``Local/Localhost``, anything else to ``MOCK_LOCATIONS[sum(octets) % 8]``.
    Each dot-separated part contributes its leading decimal digits, so
    ``"2001:db8::1"`` counts as 2001; a part without leading digits counts
    as 0.

    Args:
        ip_address: Client IP address

    Returns:
        Location label
    """
    if not ip_address or ip_address == "Unknown" or ip_address.startswith("127.") or ip_address.startswith("::1"):
        return LOCAL_LOCATION

    total = 0
    for part in ip_address.split("."):
        match = _LEADING_DIGITS_RE.match(part)
        if match:
            total += int(match.group(1))
    return MOCK_LOCATIONS[total % len(MOCK_LOCATIONS)]


@dataclass(frozen=True)
class ClickContext:
    """Request metadata captured for a click."""

    referrer: Optional[str] = None
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


@dataclass(frozen=True)
class ClickEvent:
    """One recorded visit to a short link."""

    timestamp: datetime
    referrer: str = "Direct"
    user_agent: str = "Unknown"
    ip_address: str = "Unknown"
    geo_location: str = LOCAL_LOCATION

    @classmethod
    def build(cls, context: Optional[ClickContext], now: datetime) -> "ClickEvent":
        """Build a click from request context, applying defaults."""
        context = context or ClickContext()
        return cls(
            timestamp=now,
            referrer=context.referrer or "Direct",
            user_agent=context.user_agent or "Unknown",
            ip_address=context.ip_address or "Unknown",
            geo_location=derive_geo_location(context.ip_address),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "timestamp": format_timestamp(self.timestamp),
            "referrer": self.referrer,
            "userAgent": self.user_agent,
            "ipAddress": self.ip_address,
            "geoLocation": self.geo_location,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ClickEvent":
        """Create from dictionary."""
        return cls(
            timestamp=parse_timestamp(data["timestamp"]),
            referrer=data.get("referrer") or "Direct",
            user_agent=data.get("userAgent") or "Unknown",
            ip_address=data.get("ipAddress") or "Unknown",
            geo_location=data.get("geoLocation") or derive_geo_location(data.get("ipAddress")),
        )


@dataclass(frozen=True)
class URLRecord:
    """A shortened URL with its validity window and click ledger.

    Records are immutable; click recording and deactivation return a new
    version which the store swaps in atomically.
    """

    shortcode: str
    original_url: str
    created_at: datetime
    expires_at: datetime
    validity_minutes: int = DEFAULT_VALIDITY_MINUTES
    custom_shortcode: bool = False
    click_count: int = 0
    clicks: Tuple[ClickEvent, ...] = field(default_factory=tuple)
    is_active: bool = True

    @classmethod
    def create(
        cls,
        shortcode: str,
        original_url: str,
        validity_minutes: int = DEFAULT_VALIDITY_MINUTES,
        custom_shortcode: bool = False,
        now: Optional[datetime] = None,
    ) -> "URLRecord":
        """Create a fresh record; ``expires_at`` is fixed here and never recomputed."""
        created_at = now or utc_now()
        return cls(
            shortcode=shortcode,
            original_url=original_url,
            created_at=created_at,
            expires_at=created_at + timedelta(minutes=validity_minutes),
            validity_minutes=validity_minutes,
            custom_shortcode=custom_shortcode,
        )

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def is_effectively_active(self, now: datetime) -> bool:
        return self.is_active and not self.is_expired(now)

    def add_click(self, context: Optional[ClickContext], now: datetime) -> Tuple["URLRecord", ClickEvent]:
        """Append a click.

        Args:
            context: Referrer, user agent and IP of the visit
            now: Click time

        Returns:
            Tuple of (new record version, recorded click)
        """
        click = ClickEvent.build(context, now)
        updated = replace(
            self,
            clicks=self.clicks + (click,),
            click_count=self.click_count + 1,
        )
        return updated, click

    def deactivate(self) -> "URLRecord":
        return replace(self, is_active=False)

    def get_stats(self, now: datetime, short_link: Optional[str] = None) -> Dict[str, Any]:
        """Statistics view, recomputed on every call since expiry depends on ``now``."""
        expired = self.is_expired(now)
        return {
            "shortcode": self.shortcode,
            "originalUrl": self.original_url,
            "shortLink": short_link,
            "createdAt": format_timestamp(self.created_at),
            "expiresAt": format_timestamp(self.expires_at),
            "validityMinutes": self.validity_minutes,
            "clickCount": self.click_count,
            "isActive": self.is_active and not expired,
            "isExpired": expired,
            "customShortcode": self.custom_shortcode,
            "clicks": [click.to_dict() for click in self.clicks],
        }

    def to_dict(self) -> dict:
        """Convert to the snapshot representation."""
        return {
            "shortcode": self.shortcode,
            "originalUrl": self.original_url,
            "customShortcode": self.custom_shortcode,
            "createdAt": format_timestamp(self.created_at),
            "expiresAt": format_timestamp(self.expires_at),
            "validityMinutes": self.validity_minutes,
            "clickCount": self.click_count,
            "clicks": [click.to_dict() for click in self.clicks],
            "isActive": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "URLRecord":
        """Create from the snapshot representation.

        ``clickCount`` is taken from the ledger length so the two can never
        disagree after a load.
        """
        clicks = tuple(ClickEvent.from_dict(item) for item in data.get("clicks") or [])
        return cls(
            shortcode=data["shortcode"],
            original_url=data["originalUrl"],
            created_at=parse_timestamp(data["createdAt"]),
            expires_at=parse_timestamp(data["expiresAt"]),
            validity_minutes=int(data.get("validityMinutes", DEFAULT_VALIDITY_MINUTES)),
            custom_shortcode=bool(data.get("customShortcode", False)),
            click_count=len(clicks),
            clicks=clicks,
            is_active=bool(data.get("isActive", True)),
        )


@dataclass(frozen=True)
class StoreStats:
    """Aggregate counts over the store."""

    total: int
    active: int
    expired: int
    total_clicks: int

    def to_dict(self) -> dict:
        return {
            "totalUrls": self.total,
            "activeUrls": self.active,
            "expiredUrls": self.expired,
            "totalClicks": self.total_clicks,
        }

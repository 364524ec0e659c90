"""Pydantic schemas for API requests and responses.

JSON bodies use camelCase keys; attributes stay snake_case.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShortenRequest(BaseModel):
    """Request to shorten a URL.

    Fields are loosely typed; the service owns validation so that every
    reason is reported in one response.
    """

    url: Optional[Any] = Field(None, description="The URL to shorten (https is assumed without a protocol)")
    validity: Optional[Any] = Field(None, description="Validity in minutes (default 30)")
    shortcode: Optional[Any] = Field(None, description="Optional custom shortcode")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "url": "https://example.com/very/long/path/to/resource",
                    "validity": 30,
                },
                {
                    "url": "github.com/user/repo",
                    "validity": 1440,
                    "shortcode": "myrepo",
                },
            ]
        }
    }


class ShortenResponse(CamelModel):
    """Response after shortening a URL."""

    short_link: str = Field(..., description="The complete short URL")
    expiry: str = Field(..., description="Expiry timestamp (ISO-8601, UTC)")


class ClickRecordResponse(CamelModel):
    """One recorded click."""

    timestamp: str
    referrer: str
    user_agent: str
    ip_address: str
    geo_location: str


class URLStatsResponse(CamelModel):
    """Statistics view of a short URL."""

    shortcode: str
    original_url: str
    short_link: Optional[str] = None
    created_at: str
    expires_at: str
    validity_minutes: int
    click_count: int
    is_active: bool
    is_expired: bool
    custom_shortcode: bool
    clicks: List[ClickRecordResponse] = Field(default_factory=list)


class URLListResponse(BaseModel):
    """All stored URLs."""

    urls: List[URLStatsResponse]
    total: int


class StatisticsResponse(CamelModel):
    """Service-wide statistics."""

    total_urls: int
    active_urls: int
    expired_urls: int
    total_clicks: int


class CleanupResponse(CamelModel):
    """Result of a cleanup pass."""

    removed_count: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    service: str = Field(..., description="Service name")
    store: str = Field(..., description="Store status")
    version: str = Field(..., description="Service version")
    timestamp: str = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    error: str = Field(..., description="Error category")
    message: str = Field(..., description="First reason")
    details: List[str] = Field(default_factory=list, description="All reasons")

"""Redirect, health and service info routes."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from shortlinks.store.models import ClickContext, format_timestamp

from ..api.errors import error_response
from ..api.schemas import HealthResponse

SERVICE_NAME = "URL Shortener Microservice"
SERVICE_VERSION = "1.0.0"

router = APIRouter()


def click_context_from_request(request: Request) -> ClickContext:
    """Extract referrer, user agent and client IP from a request.

    The first ``X-Forwarded-For`` hop wins over the socket address.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        ip_address = forwarded_for.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None

    return ClickContext(
        referrer=request.headers.get("referer") or request.headers.get("referrer"),
        user_agent=request.headers.get("user-agent"),
        ip_address=ip_address,
    )


@router.get("/", include_in_schema=False)
async def service_info():
    """Describe the service endpoints."""
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "description": "HTTP URL Shortener with analytics capabilities",
        "endpoints": {
            "POST /shorturls": "Create a shortened URL",
            "GET /shorturls/{shortcode}": "Get URL statistics",
            "DELETE /shorturls/{shortcode}": "Delete a shortened URL",
            "POST /shorturls/{shortcode}/deactivate": "Deactivate a shortened URL",
            "GET /{shortcode}": "Redirect to original URL",
            "GET /health": "Health check",
            "GET /api/all": "Get all URLs",
            "GET /api/stats": "Get service statistics",
            "POST /api/cleanup": "Remove expired URLs",
        },
    }


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check endpoint for load balancers and monitoring."""
    health = await request.app.state.service.health_check()

    body = HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        service=SERVICE_NAME,
        store="healthy" if health["store"] else "unhealthy",
        version=SERVICE_VERSION,
        timestamp=format_timestamp(datetime.now(timezone.utc)),
    )
    if not health["overall"]:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body.model_dump())
    return body


@router.get("/{shortcode}", include_in_schema=False)
async def redirect_to_url(request: Request, shortcode: str):
    """Redirect to the original URL, recording the click."""
    result = await request.app.state.service.handle_redirect(
        shortcode,
        click_context_from_request(request),
    )
    if not result.success:
        return error_response(result)

    # 302 so every visit reaches the service and is counted
    return RedirectResponse(url=result.data["originalUrl"], status_code=status.HTTP_302_FOUND)

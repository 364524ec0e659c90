"""API routes implementation."""

from fastapi import APIRouter, Request, Response, status

from .errors import bad_request, error_response
from .schemas import (
    CleanupResponse,
    ErrorResponse,
    ShortenRequest,
    ShortenResponse,
    StatisticsResponse,
    URLListResponse,
    URLStatsResponse,
)

router = APIRouter()


@router.post(
    "/shorturls",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "Shortcode already exists"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Create short URL",
    description="Create a shortened URL. Optionally provide a validity in minutes and a custom shortcode.",
)
async def create_short_url(request: Request, body: ShortenRequest):
    """Create a shortened URL."""
    service = request.app.state.service

    if not body.url:
        return bad_request("URL is required", 'The "url" field is required in the request body')

    result = await service.create_short_url(
        original_url=body.url,
        validity=body.validity,
        custom_shortcode=body.shortcode,
    )
    if not result.success:
        return error_response(result)

    return ShortenResponse(short_link=result.data["shortLink"], expiry=result.data["expiry"])


@router.get(
    "/shorturls/{shortcode}",
    response_model=URLStatsResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid shortcode"},
        404: {"model": ErrorResponse, "description": "Shortcode not found"},
    },
    summary="Get URL statistics",
    description="Get click history and status of a shortened URL.",
)
async def get_url_statistics(request: Request, shortcode: str):
    """Get statistics for a shortened URL."""
    result = await request.app.state.service.get_statistics(shortcode)
    if not result.success:
        return error_response(result)

    return URLStatsResponse(**result.data)


@router.delete(
    "/shorturls/{shortcode}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse, "description": "Shortcode not found"}},
    summary="Delete short URL",
)
async def delete_short_url(request: Request, shortcode: str):
    """Delete a shortened URL."""
    result = await request.app.state.service.delete_short_url(shortcode)
    if not result.success:
        return error_response(result)

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/shorturls/{shortcode}/deactivate",
    response_model=URLStatsResponse,
    responses={404: {"model": ErrorResponse, "description": "Shortcode not found"}},
    summary="Deactivate short URL",
    description="Mark a shortened URL inactive without changing its expiry.",
)
async def deactivate_short_url(request: Request, shortcode: str):
    """Deactivate a shortened URL."""
    result = await request.app.state.service.deactivate(shortcode)
    if not result.success:
        return error_response(result)

    return URLStatsResponse(**result.data)


@router.get(
    "/api/all",
    response_model=URLListResponse,
    summary="List all URLs",
)
async def list_all_urls(request: Request):
    """List every stored URL with its statistics."""
    result = await request.app.state.service.list_all()
    if not result.success:
        return error_response(result)

    return URLListResponse(
        urls=[URLStatsResponse(**item) for item in result.data],
        total=len(result.data),
    )


@router.get(
    "/api/stats",
    response_model=StatisticsResponse,
    summary="Get statistics",
    description="Get service-wide totals.",
)
async def get_statistics(request: Request):
    """Get service statistics."""
    result = await request.app.state.service.get_store_statistics()
    if not result.success:
        return error_response(result)

    return StatisticsResponse(**result.data)


@router.post(
    "/api/cleanup",
    response_model=CleanupResponse,
    summary="Remove expired URLs",
)
async def run_cleanup(request: Request):
    """Run a cleanup pass immediately."""
    result = await request.app.state.service.run_cleanup()
    return CleanupResponse(**result)

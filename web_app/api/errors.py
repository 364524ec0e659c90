"""Mapping of service failures onto HTTP responses."""

from fastapi import status
from fastapi.responses import JSONResponse

from shortlinks.exceptions import ErrorKind
from shortlinks.results import ServiceResult


STATUS_BY_KIND = {
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.EXPIRED: status.HTTP_410_GONE,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(result: ServiceResult) -> int:
    return STATUS_BY_KIND.get(result.error_kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


def error_response(result: ServiceResult) -> JSONResponse:
    """Build the ``{error, message, details}`` body for a failed result."""
    return JSONResponse(status_code=status_for(result), content=result.to_error_dict())


def bad_request(message: str, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Bad Request", "message": message, "details": [detail]},
    )

"""
Error taxonomy for the timesheet API.

Each error is an ``HTTPException`` so routes can raise it directly; the
application renders every one of them as ``{"error": detail}``.
"""
from fastapi import HTTPException, status


class APIError(HTTPException):
    """Base class for errors surfaced to API callers."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: str = None, headers: dict = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class Unauthorized(APIError):
    """Missing or invalid credential."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"

    def __init__(self, detail: str = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(APIError):
    """Role, ownership or organization mismatch."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"


class NotFound(APIError):
    """Requested entity does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ValidationFailed(APIError):
    """Missing or malformed request data."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class UpstreamError(APIError):
    """The store or an external provider failed."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Upstream service failure"

"""Domain exceptions mapped to HTTP responses in main.py"""

from typing import Any, Dict, Optional

from fastapi import status


class SchoolPayError(Exception):
    """Base class for errors that carry an HTTP status and an error code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationRejected(SchoolPayError):
    """Input rejected before any database call was made."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_REJECTED"


class ResourceNotFound(SchoolPayError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "RESOURCE_NOT_FOUND"


class AuthenticationRequired(SchoolPayError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "AUTHENTICATION_REQUIRED"


class PermissionDenied(SchoolPayError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "PERMISSION_DENIED"


class RateLimited(SchoolPayError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "RATE_LIMITED"


class BackendCallFailed(SchoolPayError):
    """A select/insert/update/delete against the data store failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "BACKEND_CALL_FAILED"


class BackendUnreachable(SchoolPayError):
    """The data store or auth service could not be reached at all."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "BACKEND_UNREACHABLE"


class PartialUpdateFailed(BackendCallFailed):
    """A sequential multi-step write stopped midway; earlier steps stay applied."""

    code = "PARTIAL_UPDATE_FAILED"


class AuthRejected(AuthenticationRequired):
    """The auth service answered and refused the credentials or token."""

    code = "AUTH_REJECTED"


class AuthUnavailable(BackendUnreachable):
    """The auth service did not answer (network error or 5xx)."""

    code = "AUTH_UNAVAILABLE"

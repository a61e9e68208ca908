"""
Failure classification for the request boundary.

Every failure a caller can see is either a KnownError (the system knows
what went wrong and says so) or an unexpected exception, which the
application turns into a generic 500 without internal detail.

Recovery policy is decided per operation, not here:
- Bulk quantity reads fail OPEN (storage errors become an empty result)
- Collection valuation fails CLOSED (storage errors surface as an error)
"""

from enum import Enum
from typing import Any


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    MISSING_REQUIRED = "missing_required"
    BATCH_TOO_LARGE = "batch_too_large"

    # Access failures
    UNAUTHENTICATED = "unauthenticated"

    # Service failures
    SERVICE_UNAVAILABLE = "service_unavailable"

    # Unknown
    UNKNOWN = "unknown"


GENERIC_ERROR_MESSAGE = "Internal server error"


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        """Convert to the transport error body."""
        payload: dict[str, Any] = {"error": self.message, "kind": self.kind.value}
        if self.detail:
            payload["detail"] = self.detail
        if self.suggestion:
            payload["suggestion"] = self.suggestion
        return payload


class InvalidInputError(KnownError):
    """Request is missing data or carries malformed data."""

    def __init__(self, message: str, kind: FailureKind = FailureKind.INVALID_INPUT):
        super().__init__(kind=kind, message=message, status_code=400)


class BatchTooLargeError(KnownError):
    """
    Raised when a bulk request exceeds the per-request ceiling.

    Raised before any storage access, so oversized requests never reach
    the database.
    """

    def __init__(self, requested: int, limit: int, item_name: str = "cards"):
        self.requested = requested
        self.limit = limit
        super().__init__(
            kind=FailureKind.BATCH_TOO_LARGE,
            message=f"Maximum {limit} {item_name} per request",
            detail=f"Received {requested} {item_name}",
            suggestion=f"Split the request into batches of at most {limit} {item_name}.",
            status_code=400,
        )


class AuthenticationRequiredError(KnownError):
    """Raised when no authenticated user accompanies the request."""

    def __init__(self) -> None:
        super().__init__(
            kind=FailureKind.UNAUTHENTICATED,
            message="Authentication required",
            suggestion="Sign in and retry the request.",
            status_code=401,
        )


class StorageUnavailableError(KnownError):
    """
    Raised when storage fails on a path that must not degrade silently.

    The message is fixed; the underlying error is logged server-side only.
    """

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            kind=FailureKind.SERVICE_UNAVAILABLE,
            message="Collection data is temporarily unavailable",
            suggestion="Please try again in a moment.",
            status_code=503,
        )

"""
Error Taxonomy and Result Outcomes
==================================

Every failure the client can meet while talking to the blog backend is an
instance of ``BlogAdminAPIError``. The errors are raised inside the transport,
the status mapping and the payload normalizer, and converted into a
``Result`` at the Session and Resource Client boundary so that callers (and
the presentation layer) always receive a discriminated success/failure value
instead of an exception.

Author: Blog Admin Project
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar


# ============================================================================
# ENUMS
# ============================================================================

class ErrorKind(Enum):
    """Discriminator for every error the client can report."""
    UNREACHABLE = "unreachable"
    UNAUTHENTICATED = "unauthenticated"
    INVALID_CREDENTIALS = "invalid_credentials"
    FORBIDDEN = "forbidden"
    INVALID_REQUEST = "invalid_request"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    UNEXPECTED_STATUS = "unexpected_status"
    MALFORMED_RESPONSE = "malformed_response"
    NORMALIZATION_ERROR = "normalization_error"


class InvalidRequestReason(Enum):
    """Sub-reasons for a 400 response that the client can recognize."""
    GENERIC = "generic"
    LAST_ADMIN_PROTECTED = "last_admin_protected"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class BlogAdminAPIError(Exception):
    """Base exception for all blog admin API errors."""

    kind: ErrorKind = ErrorKind.UNEXPECTED_STATUS

    def __init__(self, message: str = "", *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def user_message(self) -> str:
        """Human-readable text suitable for an error dialog."""
        return self.message or "An unexpected error occurred."

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BlogAdminAPIError):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.message == other.message
            and self.status_code == other.status_code
        )

    def __hash__(self) -> int:
        return hash((type(self), self.message, self.status_code))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class UnreachableError(BlogAdminAPIError):
    """Raised when the server cannot be reached (connection failure or timeout)."""
    kind = ErrorKind.UNREACHABLE

    def __init__(self, message: str = "", *, timed_out: bool = False):
        super().__init__(message)
        self.timed_out = timed_out

    @property
    def user_message(self) -> str:
        if self.timed_out:
            return "Timed out. Please try again later."
        return "Unable to connect to the server. Please check your network connection"


class UnauthenticatedError(BlogAdminAPIError):
    """Raised when no token is available or the server rejected it (401)."""
    kind = ErrorKind.UNAUTHENTICATED

    @property
    def user_message(self) -> str:
        return "Unauthorized: Please login first"


class InvalidCredentialsError(BlogAdminAPIError):
    """Raised when the login endpoint rejects the username/password pair."""
    kind = ErrorKind.INVALID_CREDENTIALS

    @property
    def user_message(self) -> str:
        return "Wrong username or password"


class ForbiddenError(BlogAdminAPIError):
    """Raised when the authenticated user lacks the admin role (403)."""
    kind = ErrorKind.FORBIDDEN

    @property
    def user_message(self) -> str:
        return "Forbidden: Admin privileges required."


class InvalidRequestError(BlogAdminAPIError):
    """Raised when the server refused the request as invalid (400)."""
    kind = ErrorKind.INVALID_REQUEST

    def __init__(
        self,
        message: str = "",
        *,
        reason: InvalidRequestReason = InvalidRequestReason.GENERIC,
        status_code: Optional[int] = 400
    ):
        super().__init__(message, status_code=status_code)
        self.reason = reason

    @property
    def user_message(self) -> str:
        if self.reason is InvalidRequestReason.LAST_ADMIN_PROTECTED:
            return "Cannot delete the last admin user."
        return f"Invalid request: {self.message}" if self.message else "Invalid request."

    def __eq__(self, other: object) -> bool:
        result = super().__eq__(other)
        if result is not True:
            return result
        return self.reason == other.reason

    def __hash__(self) -> int:
        return hash((type(self), self.message, self.reason))

    def __repr__(self) -> str:
        return f"InvalidRequestError({self.reason.name}, {self.message!r})"


class NotFoundError(BlogAdminAPIError):
    """Raised when the addressed resource does not exist (404)."""
    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str = "", *, resource: str = "Resource", resource_id: Optional[int] = None):
        super().__init__(message, status_code=404)
        self.resource = resource
        self.resource_id = resource_id

    @property
    def user_message(self) -> str:
        if self.resource_id is None:
            return f"{self.resource} not found."
        return f"{self.resource} (id: {self.resource_id} ) not found."


class ServerError(BlogAdminAPIError):
    """Raised for any 5xx response."""
    kind = ErrorKind.SERVER_ERROR

    @property
    def user_message(self) -> str:
        return f"Server error: {self.message}" if self.message else "Server error."


class UnexpectedStatusError(BlogAdminAPIError):
    """Raised for a status code the client has no mapping for."""
    kind = ErrorKind.UNEXPECTED_STATUS

    @property
    def user_message(self) -> str:
        return f"Unexpected response from server (HTTP {self.status_code})."


class MalformedResponseError(BlogAdminAPIError):
    """Raised when a response body does not have the expected shape."""
    kind = ErrorKind.MALFORMED_RESPONSE

    @property
    def user_message(self) -> str:
        return "The server returned a response that could not be read."


class NormalizationError(BlogAdminAPIError):
    """Raised when a record cannot be converted into its canonical model."""
    kind = ErrorKind.NORMALIZATION_ERROR

    def __init__(self, message: str = "", *, record_kind: str = "", field: Optional[str] = None):
        super().__init__(message)
        self.record_kind = record_kind
        self.field = field


# ============================================================================
# RESULT
# ============================================================================

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Discriminated outcome of a client operation.

    Exactly one of ``value`` (on success) or ``error`` (on failure) is
    meaningful. ``epoch`` records the session epoch the request was issued
    under, so that results from a previous session can be recognized and
    discarded.
    """
    value: Optional[T] = None
    error: Optional[BlogAdminAPIError] = None
    epoch: Optional[int] = None

    @classmethod
    def success(cls, value: Any = None, *, epoch: Optional[int] = None) -> "Result":
        return cls(value=value, error=None, epoch=epoch)

    @classmethod
    def failure(cls, error: BlogAdminAPIError, *, epoch: Optional[int] = None) -> "Result":
        return cls(value=None, error=error, epoch=epoch)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        return None if self.error is None else self.error.kind

    def unwrap(self) -> T:
        """Return the value, or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value

    def map(self, fn: Callable[[T], U]) -> "Result[U]":
        if self.error is not None:
            return self
        return Result(value=fn(self.value), error=None, epoch=self.epoch)

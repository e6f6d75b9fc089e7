"""
Status-to-Outcome Mapping
=========================

One table translating HTTP status codes into client errors, shared by every
resource client. The resource label only changes the wording of the
not-found message.
"""

import json
from typing import Callable, Dict, Optional

from .config import LAST_ADMIN_MARKER
from .errors import (
    BlogAdminAPIError,
    ForbiddenError,
    InvalidRequestError,
    InvalidRequestReason,
    NotFoundError,
    ServerError,
    UnauthenticatedError,
    UnexpectedStatusError,
)
from .transport import RawResponse

# Known 400 messages that deserve a precise reason instead of a generic one
INVALID_REQUEST_MARKERS: Dict[str, InvalidRequestReason] = {
    LAST_ADMIN_MARKER: InvalidRequestReason.LAST_ADMIN_PROTECTED,
}


def server_message(body: str) -> str:
    """
    Extract the human message from an error body.

    The backend answers ``{"error": ...}`` or ``{"message": ...}``; anything
    else is returned as raw text.
    """
    text = (body or "").strip()
    try:
        payload = json.loads(text)
    except ValueError:
        return text
    if isinstance(payload, dict):
        for key in ("error", "message"):
            if isinstance(payload.get(key), str):
                return payload[key]
    return text


def _invalid_request(response: RawResponse, resource: str, resource_id: Optional[int]) -> BlogAdminAPIError:
    message = server_message(response.body)
    reason = InvalidRequestReason.GENERIC
    for marker, marker_reason in INVALID_REQUEST_MARKERS.items():
        # The marker may sit in a field other than error/message, so check the raw body too
        if marker in message or marker in response.body:
            reason = marker_reason
            break
    return InvalidRequestError(message, reason=reason)


STATUS_TABLE: Dict[int, Callable[[RawResponse, str, Optional[int]], BlogAdminAPIError]] = {
    400: _invalid_request,
    401: lambda r, resource, rid: UnauthenticatedError(server_message(r.body), status_code=401),
    403: lambda r, resource, rid: ForbiddenError(server_message(r.body), status_code=403),
    404: lambda r, resource, rid: NotFoundError(server_message(r.body), resource=resource, resource_id=rid),
}


def error_for_status(
    response: RawResponse,
    *,
    resource: str = "Resource",
    resource_id: Optional[int] = None
) -> Optional[BlogAdminAPIError]:
    """
    Map a response to an error, or None when it is a success (200).

    Args:
        response: The raw response
        resource: Label used in messages ("User", "Article", ...)
        resource_id: Id addressed by the request, if any
    """
    code = response.status_code
    if code == 200:
        return None
    factory = STATUS_TABLE.get(code)
    if factory is not None:
        return factory(response, resource, resource_id)
    if 500 <= code <= 599:
        return ServerError(server_message(response.body), status_code=code)
    return UnexpectedStatusError(server_message(response.body), status_code=code)

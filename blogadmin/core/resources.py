"""
Resource Clients
================

One client per collection of the admin API. Each client captures the
session token once when a call starts, issues the request through the shared
transport, maps the status with the shared table, and normalizes the body.

Nothing raises past this layer: every public method returns a ``Result``.

Usage:
------
    >>> users = UsersAPI(transport, session)
    >>> result = users.list()
    >>> if result.ok:
    ...     for user in result.value:
    ...         print(user.username)
    ... else:
    ...     print(result.error.user_message)
"""

import json
import logging
from typing import Any, Callable, Optional

from .config import DEFAULT_BAN_DURATION_HOURS, DEFAULT_BAN_REASON
from .errors import (
    BlogAdminAPIError,
    MalformedResponseError,
    Result,
    UnauthenticatedError,
)
from .models import ResourceKind
from .normalizer import NormalizationDiagnostics, normalize_list, normalize_stats
from .session import Session
from .status_map import error_for_status
from .transport import HttpTransport, RawResponse
from blogadmin.utils.logger import log_api_call

logger = logging.getLogger(__name__)


def _decode_json(response: RawResponse) -> Any:
    try:
        return json.loads(response.body)
    except (ValueError, RecursionError) as e:
        raise MalformedResponseError(f"Response body is not JSON: {e}") from e


# ============================================================================
# BASE CLIENT
# ============================================================================

class ResourceAPI:
    """
    Shared request plumbing for the admin collections.

    Subclasses set ``kind``, ``label`` (used in messages) and ``path``.
    """
    kind: ResourceKind
    label = "Resource"
    path = ""

    def __init__(
        self,
        transport: HttpTransport,
        session: Session,
        diagnostics: Optional[NormalizationDiagnostics] = None
    ):
        self.transport = transport
        self.session = session
        self.diagnostics = diagnostics if diagnostics is not None else NormalizationDiagnostics()

    def _execute(
        self,
        method: str,
        path: str,
        *,
        resource_id: Optional[int] = None,
        body: Optional[Any] = None,
        parse: Optional[Callable[[RawResponse], Any]] = None
    ) -> Result:
        credentials = self.session.capture()
        if credentials.token is None:
            logger.debug(f"{method} {path} skipped: not authenticated")
            return Result.failure(UnauthenticatedError("No active session"), epoch=credentials.epoch)

        try:
            response = self.transport.request(method, path, token=credentials.token, json=body)
            error = error_for_status(response, resource=self.label, resource_id=resource_id)
            if error is not None:
                if isinstance(error, UnauthenticatedError):
                    self.session.invalidate(credentials)
                raise error
            value = parse(response) if parse is not None else None
        except BlogAdminAPIError as e:
            logger.error(f"{method} {path} failed: {e!r}")
            return Result.failure(e, epoch=credentials.epoch)

        return Result.success(value, epoch=credentials.epoch)


class CollectionAPI(ResourceAPI):
    """A listable collection whose records can be deleted by id."""

    def _parse_list(self, response: RawResponse) -> list:
        payload = _decode_json(response)
        if not isinstance(payload, list):
            raise MalformedResponseError(f"Expected a JSON array of {self.kind.value}")
        return normalize_list(self.kind, payload, self.diagnostics)

    @log_api_call(api_name="Admin")
    def list(self) -> Result:
        """GET the whole collection as normalized records."""
        return self._execute("GET", self.path, parse=self._parse_list)

    @log_api_call(api_name="Admin")
    def delete(self, item_id: int) -> Result:
        """DELETE one record by id."""
        return self._execute("DELETE", f"{self.path}/{item_id}", resource_id=item_id)


# ============================================================================
# COLLECTION CLIENTS
# ============================================================================

class UsersAPI(CollectionAPI):
    """Moderation of user accounts: list, delete, ban, unban."""
    kind = ResourceKind.USERS
    label = "User"
    path = "/admin/users"

    def __init__(
        self,
        transport: HttpTransport,
        session: Session,
        diagnostics: Optional[NormalizationDiagnostics] = None,
        default_ban_reason: str = DEFAULT_BAN_REASON,
        default_ban_duration_hours: int = DEFAULT_BAN_DURATION_HOURS
    ):
        super().__init__(transport, session, diagnostics)
        self.default_ban_reason = default_ban_reason
        self.default_ban_duration_hours = default_ban_duration_hours

    @log_api_call(api_name="Admin")
    def ban(self, user_id: int, reason: Optional[str] = None, duration_hours: Optional[int] = None) -> Result:
        """
        POST /admin/users/{id}/ban

        Args:
            user_id: User to ban
            reason: Shown to the user; defaults to the configured reason
            duration_hours: Ban length; defaults to the configured duration
        """
        body = {
            "reason": reason if reason is not None else self.default_ban_reason,
            "durationInHours": duration_hours if duration_hours is not None else self.default_ban_duration_hours,
        }
        return self._execute("POST", f"{self.path}/{user_id}/ban", resource_id=user_id, body=body)

    @log_api_call(api_name="Admin")
    def unban(self, user_id: int) -> Result:
        """POST /admin/users/{id}/unban"""
        return self._execute("POST", f"{self.path}/{user_id}/unban", resource_id=user_id)


class ArticlesAPI(CollectionAPI):
    kind = ResourceKind.ARTICLES
    label = "Article"
    path = "/admin/articles"


class CommentsAPI(CollectionAPI):
    kind = ResourceKind.COMMENTS
    label = "Comment"
    path = "/admin/comments"


class StatsAPI(ResourceAPI):
    """Read-only aggregate counters."""
    kind = ResourceKind.STATS
    label = "Statistics"
    path = "/admin/stats"

    def _parse_stats(self, response: RawResponse):
        payload = _decode_json(response)
        if not isinstance(payload, dict):
            raise MalformedResponseError("Expected a JSON object of statistics")
        return normalize_stats(payload, self.diagnostics).unwrap()

    @log_api_call(api_name="Admin")
    def fetch(self) -> Result:
        """GET /admin/stats as a SiteStats value."""
        return self._execute("GET", self.path, parse=self._parse_stats)

"""
Session Management Module
=========================

The Session owns the authentication token and the identity of the logged-in
operator. It is an explicit object handed to every resource client, never a
process-wide global, so tests can build isolated sessions.

Lifecycle:
    unauthenticated --login--> authenticated --logout / 401--> unauthenticated

Every transition advances ``epoch``. Requests capture ``(token, epoch)`` when
they start; a result whose epoch is no longer current belongs to a previous
session and is discarded by the synchronization coordinator.
"""

import json
import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

from .errors import (
    BlogAdminAPIError,
    InvalidCredentialsError,
    MalformedResponseError,
    Result,
    UnauthenticatedError,
    UnexpectedStatusError,
)
from .models import Role, SessionInfo
from .status_map import error_for_status
from .transport import HttpTransport
from blogadmin.utils.logger import log_api_call


@dataclass(frozen=True)
class SessionCredentials:
    """Token and epoch captured at the start of a request."""
    token: Optional[str]
    epoch: int


class Session:
    """
    Holds the bearer token and the operator's identity.

    Attributes:
        transport: HTTP transport used for login/logout
        epoch: Counter advanced on every login, logout and invalidation
    """

    def __init__(self, transport: HttpTransport):
        self.logger = logging.getLogger(__name__)
        self.transport = transport

        self._lock = threading.Lock()
        self._token: Optional[str] = None
        self._username: Optional[str] = None
        self._role = Role.UNKNOWN
        self._epoch = 0
        self._listeners: List[Callable[[int], None]] = []

    # ------------------------------------------------------------------------
    # STATE ACCESS
    # ------------------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    @property
    def epoch(self) -> int:
        return self._epoch

    def current_token(self) -> Optional[str]:
        return self._token

    def current_username(self) -> Optional[str]:
        return self._username

    def current_role(self) -> Role:
        """Role of the operator; UNKNOWN when not authenticated."""
        with self._lock:
            return self._role if self._token is not None else Role.UNKNOWN

    def capture(self) -> SessionCredentials:
        with self._lock:
            return SessionCredentials(token=self._token, epoch=self._epoch)

    def is_current(self, epoch: Optional[int]) -> bool:
        return epoch is None or epoch == self._epoch

    def add_listener(self, callback: Callable[[int], None]):
        """Register a callback invoked with the new epoch after every transition."""
        self._listeners.append(callback)

    # ------------------------------------------------------------------------
    # AUTHENTICATION
    # ------------------------------------------------------------------------

    @log_api_call(api_name="Auth")
    def login(self, username: str, password: str) -> Result:
        """
        Authenticate against ``POST /auth/login``.

        The response must carry ``token`` and ``user.username`` and
        ``user.role``; none of them is defaulted.

        Returns:
            Result[SessionInfo]; failures are InvalidCredentials (401),
            Unreachable, UnexpectedStatus or MalformedResponse
        """
        epoch = self._epoch
        try:
            response = self.transport.request(
                "POST", "/auth/login", json={"username": username, "password": password}
            )
            if response.status_code == 401:
                raise InvalidCredentialsError("Wrong username or password", status_code=401)
            if response.status_code != 200:
                raise UnexpectedStatusError(f"Login failed with HTTP {response.status_code}",
                                            status_code=response.status_code)
            info = self._parse_login(response.body)
        except BlogAdminAPIError as e:
            self.logger.error(f"Login failed for {username}: {e!r}")
            return Result.failure(e, epoch=epoch)

        with self._lock:
            self._token = info.token
            self._username = info.username
            self._role = info.role
            self._epoch += 1
            epoch = self._epoch

        self.logger.info(f"Logged in as {info.username} (role: {info.role.value})")
        self._notify(epoch)
        return Result.success(info, epoch=epoch)

    @staticmethod
    def _parse_login(body: str) -> SessionInfo:
        try:
            payload = json.loads(body)
        except (ValueError, RecursionError) as e:
            raise MalformedResponseError(f"Login response is not JSON: {e}") from e

        if not isinstance(payload, dict):
            raise MalformedResponseError("Login response is not an object")
        token = payload.get("token")
        if not isinstance(token, str) or not token:
            raise MalformedResponseError("Login response has no token")
        user = payload.get("user")
        if not isinstance(user, dict):
            raise MalformedResponseError("Login response has no user object")
        username = user.get("username")
        role = user.get("role")
        if not isinstance(username, str) or not isinstance(role, str):
            raise MalformedResponseError("Login response user is missing username or role")

        return SessionInfo(token=token, username=username, role=Role.parse(role))

    @log_api_call(api_name="Auth")
    def logout(self) -> Result:
        """
        End the session with ``POST /auth/logout``.

        The token is cleared only when the server answers 200. On any other
        outcome it is kept so the operator can retry.
        """
        credentials = self.capture()
        if credentials.token is None:
            return Result.failure(UnauthenticatedError("No active session"), epoch=credentials.epoch)

        try:
            response = self.transport.request("POST", "/auth/logout", token=credentials.token)
            error = error_for_status(response, resource="Session")
            if error is not None:
                raise error
        except BlogAdminAPIError as e:
            self.logger.error(f"Logout failed, keeping session: {e!r}")
            return Result.failure(e, epoch=credentials.epoch)

        epoch = self._clear(credentials.token)
        self.logger.info("Logged out successfully")
        return Result.success(None, epoch=epoch)

    def invalidate(self, credentials: Optional[SessionCredentials] = None) -> bool:
        """
        Drop the session after the server rejected its token.

        When ``credentials`` are given, the session is cleared only if it
        still holds that token, so a late 401 from a previous session cannot
        log out a newer one.

        Returns:
            True if the session was cleared
        """
        token = credentials.token if credentials is not None else self._token
        if token is None:
            return False
        epoch = self._clear(token)
        if epoch is None:
            return False
        self.logger.warning("Session token rejected by server; session cleared")
        return True

    def _clear(self, token: str) -> Optional[int]:
        with self._lock:
            if self._token != token:
                return None
            self._token = None
            self._username = None
            self._role = Role.UNKNOWN
            self._epoch += 1
            epoch = self._epoch
        self._notify(epoch)
        return epoch

    def _notify(self, epoch: int):
        for callback in list(self._listeners):
            callback(epoch)

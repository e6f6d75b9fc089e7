"""
Blog Admin API Client
=====================

Single entry point that wires the transport, the session, the resource
clients and the synchronization coordinator together.

Usage:
    ```python
    with BlogAdminAPI(load_config()) as api:
        result = api.session.login("admin", "secret")
        if result.ok:
            api.coordinator.refresh_all()
    ```

Attributes:
    session: Session - login/logout and token ownership
    users: UsersAPI - list, delete, ban, unban
    articles: ArticlesAPI - list, delete
    comments: CommentsAPI - list, delete
    stats: StatsAPI - aggregate counters
    coordinator: SyncCoordinator - background loads and mutations
    diagnostics: NormalizationDiagnostics - shared by every client
"""

import logging
from concurrent.futures import Executor
from typing import Optional

from .coordinator import SyncCoordinator
from .normalizer import NormalizationDiagnostics
from .resources import ArticlesAPI, CommentsAPI, StatsAPI, UsersAPI
from .session import Session
from .transport import HttpTransport
from blogadmin.utils.config_manager import ClientConfig


class BlogAdminAPI:
    """Facade over the blog backend's admin API."""

    def __init__(
        self,
        client_config: Optional[ClientConfig] = None,
        *,
        transport: Optional[HttpTransport] = None,
        executor: Optional[Executor] = None
    ):
        """
        Args:
            client_config: Connection settings (defaults to ``ClientConfig()``)
            transport: Transport to use instead of building one from the config
            executor: Executor for background tasks instead of the daemon pool
        """
        self.config = client_config or ClientConfig()
        self.transport = transport or HttpTransport(self.config.base_url, timeout=self.config.timeout)
        self.diagnostics = NormalizationDiagnostics()

        self.session = Session(self.transport)
        self.users = UsersAPI(
            self.transport,
            self.session,
            self.diagnostics,
            default_ban_reason=self.config.default_ban_reason,
            default_ban_duration_hours=self.config.default_ban_duration_hours,
        )
        self.articles = ArticlesAPI(self.transport, self.session, self.diagnostics)
        self.comments = CommentsAPI(self.transport, self.session, self.diagnostics)
        self.stats = StatsAPI(self.transport, self.session, self.diagnostics)

        self.coordinator = SyncCoordinator(
            self.session,
            self.users,
            self.articles,
            self.comments,
            self.stats,
            executor=executor,
            max_workers=self.config.max_workers,
        )

        logging.info(f"Initialized BlogAdminAPI for {self.transport.base_url}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self):
        """Stop background workers and release the HTTP connection pool."""
        self.coordinator.shutdown(wait=False)
        self.transport.close()

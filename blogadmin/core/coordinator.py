"""
Synchronization Coordinator
===========================

Runs the background loads and mutations and owns the in-memory ``Snapshot``.

Key Features:
-------------
- Independent Loads: users, articles, comments and stats load concurrently
  on a daemon thread pool; kinds never wait on each other.
- Last-Initiated-Wins: every load gets a ticket. When a load completes, its
  result is applied only if no newer load for the same kind was started in
  the meantime, however late the newer one answers.
- Session Awareness: loads started or answered under a previous session are
  discarded, and a login/logout clears the snapshot.
- Single Writer: the snapshot is replaced per kind under a lock, so readers
  always see complete collections.
- Change Notification: subscribers receive one ``SyncEvent`` per completed
  load. Callbacks run on the worker thread; the presentation layer marshals
  them onto its own thread (see ``blogadmin.ui.dispatch``).

Usage:
------
    >>> coordinator = SyncCoordinator(session, users, articles, comments, stats)
    >>> coordinator.subscribe(lambda event: print(event.kind, event.reason))
    >>> coordinator.refresh_all()
    >>> future = coordinator.ban_user(7)
    >>> future.result().ok
    True

Author: Blog Admin Project
"""

import logging
import threading
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .config import MAX_WORKERS
from .errors import BlogAdminAPIError, MalformedResponseError, Result
from .models import ResourceKind, Snapshot
from .resources import ArticlesAPI, CommentsAPI, StatsAPI, UsersAPI
from .session import Session
from blogadmin.utils.concurrency import DaemonThreadPoolExecutor


class LoadState(Enum):
    """Per-kind load state."""
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class EventReason(Enum):
    """Why a SyncEvent was published."""
    LOADED = "loaded"              # result applied to the snapshot
    FAILED = "failed"              # load failed; previous data kept
    SUPERSEDED = "superseded"      # a newer load for the kind was started
    STALE_SESSION = "stale_session"
    RESET = "reset"                # session changed; snapshot cleared


@dataclass(frozen=True)
class SyncEvent:
    """
    Change notification for the presentation layer.

    Attributes:
        kind: Resource kind concerned (None for a RESET event)
        reason: What happened
        result: The load outcome (None for a RESET event)
    """
    kind: Optional[ResourceKind]
    reason: EventReason
    result: Optional[Result] = None

    @property
    def applied(self) -> bool:
        return self.reason in (EventReason.LOADED, EventReason.FAILED, EventReason.RESET)


# Kinds reloaded after a successful mutation. Deleting an article or comment
# changes counters in every other collection and in the statistics.
MUTATION_REFRESH: Dict[ResourceKind, Tuple[ResourceKind, ...]] = {
    ResourceKind.USERS: (ResourceKind.USERS,),
    ResourceKind.ARTICLES: tuple(ResourceKind),
    ResourceKind.COMMENTS: tuple(ResourceKind),
}


class SyncCoordinator:
    """
    Coordinates background loads and mutations for all resource kinds.

    Attributes:
        snapshot: Latest complete view of the loaded data (read-only)
    """

    def __init__(
        self,
        session: Session,
        users: UsersAPI,
        articles: ArticlesAPI,
        comments: CommentsAPI,
        stats: StatsAPI,
        executor: Optional[Executor] = None,
        max_workers: int = MAX_WORKERS
    ):
        self.logger = logging.getLogger(__name__)
        self._session = session
        self._users = users
        self._articles = articles
        self._comments = comments
        self._loaders: Dict[ResourceKind, Callable[[], Result]] = {
            ResourceKind.USERS: users.list,
            ResourceKind.ARTICLES: articles.list,
            ResourceKind.COMMENTS: comments.list,
            ResourceKind.STATS: stats.fetch,
        }

        self._owns_executor = executor is None
        self._executor = executor or DaemonThreadPoolExecutor(max_workers=max_workers)

        self._lock = threading.Lock()
        self._snapshot = Snapshot()
        self._states = {kind: LoadState.IDLE for kind in ResourceKind}
        self._errors: Dict[ResourceKind, Optional[BlogAdminAPIError]] = {kind: None for kind in ResourceKind}
        self._tickets = {kind: 0 for kind in ResourceKind}
        self._subscribers: List[Callable[[SyncEvent], None]] = []

        session.add_listener(self._on_session_changed)

    # ------------------------------------------------------------------------
    # READ SIDE
    # ------------------------------------------------------------------------

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    def state(self, kind: ResourceKind) -> LoadState:
        return self._states[kind]

    def last_error(self, kind: ResourceKind) -> Optional[BlogAdminAPIError]:
        """Error of the most recent applied failure for a kind, cleared on success."""
        return self._errors[kind]

    def subscribe(self, callback: Callable[[SyncEvent], None]) -> Callable[[], None]:
        """
        Register a change callback.

        Returns:
            A function that removes the subscription
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------------
    # LOADS
    # ------------------------------------------------------------------------

    def refresh_all(self) -> Dict[ResourceKind, Future]:
        """Start independent loads for every kind."""
        return {kind: self.refresh(kind) for kind in ResourceKind}

    def refresh(self, kind: ResourceKind) -> Future:
        """
        Start a load for one kind, superseding any load already in flight.

        Returns:
            Future resolving to the load's Result (whether or not it ends up
            being applied)
        """
        with self._lock:
            self._tickets[kind] += 1
            ticket = self._tickets[kind]
            epoch = self._session.epoch
            self._states[kind] = LoadState.LOADING
        self.logger.debug(f"Starting {kind.value} load #{ticket}")
        return self._executor.submit(self._run_load, kind, ticket, epoch)

    def _run_load(self, kind: ResourceKind, ticket: int, epoch: int) -> Result:
        try:
            result = self._loaders[kind]()
        except Exception as e:
            self.logger.error(f"{kind.value} load #{ticket} raised: {e}", exc_info=True)
            error = MalformedResponseError(f"Could not process {kind.value} response: {e}")
            error.__cause__ = e
            result = Result.failure(error, epoch=epoch)
        self._complete(kind, ticket, epoch, result)
        return result

    def _complete(self, kind: ResourceKind, ticket: int, epoch: int, result: Result):
        with self._lock:
            if ticket != self._tickets[kind]:
                reason = EventReason.SUPERSEDED
            elif not (self._session.is_current(epoch) and self._session.is_current(result.epoch)):
                reason = EventReason.STALE_SESSION
            elif result.ok:
                self._snapshot = self._snapshot.with_kind(kind, result.value)
                self._states[kind] = LoadState.LOADED
                self._errors[kind] = None
                reason = EventReason.LOADED
            else:
                # Previous data for this kind stays in the snapshot
                self._states[kind] = LoadState.FAILED
                self._errors[kind] = result.error
                reason = EventReason.FAILED

        if reason is EventReason.LOADED:
            self.logger.info(f"Applied {kind.value} load #{ticket}")
        elif reason is EventReason.FAILED:
            self.logger.warning(f"{kind.value} load #{ticket} failed: {result.error!r}")
        else:
            self.logger.debug(f"Discarded {kind.value} load #{ticket} ({reason.value})")

        self._publish(SyncEvent(kind=kind, reason=reason, result=result))

    # ------------------------------------------------------------------------
    # MUTATIONS
    # ------------------------------------------------------------------------

    def delete_user(self, user_id: int) -> Future:
        return self._mutate(ResourceKind.USERS, self._users.delete, user_id)

    def ban_user(self, user_id: int, reason: Optional[str] = None, duration_hours: Optional[int] = None) -> Future:
        return self._mutate(ResourceKind.USERS, self._users.ban, user_id, reason, duration_hours)

    def unban_user(self, user_id: int) -> Future:
        return self._mutate(ResourceKind.USERS, self._users.unban, user_id)

    def delete_article(self, article_id: int) -> Future:
        return self._mutate(ResourceKind.ARTICLES, self._articles.delete, article_id)

    def delete_comment(self, comment_id: int) -> Future:
        return self._mutate(ResourceKind.COMMENTS, self._comments.delete, comment_id)

    def _mutate(self, kind: ResourceKind, operation: Callable[..., Result], *args) -> Future:
        """
        Run a mutation in the background.

        The snapshot is never edited locally: on success the affected kinds
        are reloaded from the server.
        """
        def task() -> Result:
            result = operation(*args)
            if result.ok and self._session.is_current(result.epoch):
                for refresh_kind in MUTATION_REFRESH[kind]:
                    self.refresh(refresh_kind)
            return result

        return self._executor.submit(task)

    # ------------------------------------------------------------------------
    # SESSION & LIFECYCLE
    # ------------------------------------------------------------------------

    def _on_session_changed(self, epoch: int):
        with self._lock:
            self._snapshot = Snapshot()
            self._states = {kind: LoadState.IDLE for kind in ResourceKind}
            self._errors = {kind: None for kind in ResourceKind}
        self.logger.info(f"Session changed (epoch {epoch}); snapshot cleared")
        self._publish(SyncEvent(kind=None, reason=EventReason.RESET))

    def _publish(self, event: SyncEvent):
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(event)
            except Exception as e:
                self.logger.error(f"Subscriber {callback!r} failed on {event.reason.value}: {e}", exc_info=True)

    def shutdown(self, wait: bool = False):
        """Stop the worker pool if this coordinator created it."""
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

"""
Test doubles shared by the unit tests.

ScriptedTransport replaces HttpTransport with canned responses per route;
ManualExecutor replaces the worker pool so a test decides when (and in what
order) background tasks complete.
"""

import json
import threading
from collections import defaultdict, deque
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from typing import Any, Optional

from blogadmin.core.transport import RawResponse


@dataclass
class Call:
    method: str
    path: str
    token: Optional[str]
    json: Any


class ScriptedTransport:
    """
    Answers requests from per-route queues.

    Responses are served in the order they were queued. Once a route's queue
    is empty, the last response served keeps being returned. Queue an
    exception instance to make the call raise it.
    """
    base_url = "http://test.local/api"

    def __init__(self):
        self.calls = []
        self._routes = defaultdict(deque)
        self._last = {}
        self._lock = threading.Lock()
        self.closed = False

    def add(self, method: str, path: str, status: int = 200, body: Any = None):
        if isinstance(body, BaseException):
            self._routes[(method, path)].append(body)
            return self
        if body is None:
            text = ""
        elif isinstance(body, str):
            text = body
        else:
            text = json.dumps(body)
        self._routes[(method, path)].append(RawResponse(status_code=status, body=text))
        return self

    def request(self, method, path, *, token=None, json=None):
        with self._lock:
            self.calls.append(Call(method, path, token, json))
            route = (method, path)
            queue = self._routes.get(route)
            if queue:
                self._last[route] = queue.popleft()
            if route not in self._last:
                raise AssertionError(f"Unexpected request: {method} {path}")
            response = self._last[route]
        if isinstance(response, BaseException):
            raise response
        return response

    def calls_to(self, method, path):
        return [c for c in self.calls if c.method == method and c.path == path]

    def close(self):
        self.closed = True


class ManualExecutor(Executor):
    """Executor that only runs tasks when the test says so."""

    def __init__(self):
        self.pending = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.pending.append((fn, args, kwargs, future))
        return future

    def run(self, index: int = 0) -> Future:
        fn, args, kwargs, future = self.pending.pop(index)
        future.set_running_or_notify_cancel()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future

    def run_all(self):
        while self.pending:
            self.run(0)

    def shutdown(self, wait=True, cancel_futures=False):
        self.pending.clear()


LOGIN_PATH = "/auth/login"


def login_body(token="token-123", username="admin", role="admin"):
    return {"token": token, "user": {"id": 1, "username": username, "role": role}}


def log_in(session, transport, token="token-123", role="admin"):
    """Authenticate a Session against the scripted transport."""
    transport.add("POST", LOGIN_PATH, 200, login_body(token=token, role=role))
    result = session.login("admin", "secret")
    assert result.ok, result.error
    return result


def user_payload(user_id, username=None, **extra):
    record = {
        "id": user_id,
        "username": username or f"user{user_id}",
        "realName": "Test User",
        "dateOfBirth": "1990-05-17",
        "bio": "",
        "avatarUrl": None,
        "createdAt": "2025/1/1 13:38:34",
        "articleCount": 2,
        "commentCount": 5,
        "hasAvatar": False,
    }
    record.update(extra)
    return record


def article_payload(article_id, title=None, **extra):
    record = {
        "id": article_id,
        "title": title or f"Article {article_id}",
        "content": "Body text",
        "authorUsername": "alice",
        "authorId": 3,
        "createdAt": "2025/2/14 09:05:00",
        "commentCount": 1,
        "likeCount": 4,
        "viewCount": 120,
        "status": "published",
    }
    record.update(extra)
    return record


def comment_payload(comment_id, **extra):
    record = {
        "id": comment_id,
        "content": "Nice post",
        "articleId": 10,
        "articleTitle": "Article 10",
        "authorId": 4,
        "authorUsername": "bob",
        "createdAt": "2025/3/1 18:00:00",
        "status": "active",
        "likeCount": 0,
    }
    record.update(extra)
    return record


STATS_BODY = {
    "users": {"total": 10, "active": 8, "banned": 2},
    "articles": {"total": 5, "published": 4, "pending": 1, "totalViews": 300},
    "comments": {"total": 20, "visible": 19, "hidden": 1},
    "likes": {"total": 7},
}

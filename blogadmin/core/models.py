"""
Domain Models
=============

Canonical in-memory records produced by the payload normalizer. All models
are immutable; a refresh replaces whole collections rather than editing
records in place.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple


class Role(Enum):
    """Role of the authenticated operator."""
    ADMIN = "admin"
    USER = "user"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Role":
        if isinstance(value, str):
            for role in cls:
                if role.value == value.strip().lower():
                    return role
        return cls.UNKNOWN


class ResourceKind(Enum):
    """The independently refreshable collections of a snapshot."""
    USERS = "users"
    ARTICLES = "articles"
    COMMENTS = "comments"
    STATS = "stats"


class UserStatus(Enum):
    ACTIVE = "active"
    BANNED = "banned"


class ArticleStatus(Enum):
    PUBLISHED = "published"
    DRAFT = "draft"
    DELETED = "deleted"


class CommentStatus(Enum):
    ACTIVE = "active"
    DELETED = "deleted"


@dataclass(frozen=True)
class SessionInfo:
    """Identity returned by a successful login."""
    token: str
    username: str
    role: Role


@dataclass(frozen=True)
class User:
    id: int
    username: str
    created_at: datetime
    real_name: str = ""
    date_of_birth: Optional[date] = None
    bio: str = ""
    avatar_url: str = ""
    status: UserStatus = UserStatus.ACTIVE
    article_count: int = 0
    comment_count: int = 0
    has_avatar: bool = False

    @property
    def is_banned(self) -> bool:
        return self.status is UserStatus.BANNED


@dataclass(frozen=True)
class Article:
    id: int
    title: str
    content: str
    created_at: datetime
    author_username: str = ""
    author_id: int = 0
    updated_at: Optional[datetime] = None
    comment_count: int = 0
    like_count: int = 0
    view_count: int = 0
    status: ArticleStatus = ArticleStatus.PUBLISHED


@dataclass(frozen=True)
class Comment:
    id: int
    content: str
    created_at: datetime
    article_id: int = 0
    article_title: str = ""
    author_id: int = 0
    author_username: str = ""
    status: CommentStatus = CommentStatus.ACTIVE
    like_count: int = 0


@dataclass(frozen=True)
class SiteStats:
    """Aggregate counters, taken verbatim from the server."""
    total_users: int = 0
    active_users: int = 0
    banned_users: int = 0
    total_articles: int = 0
    total_comments: int = 0


@dataclass(frozen=True)
class Snapshot:
    """
    Point-in-time view of everything the client has loaded.

    Each collection is independently refreshable. ``None`` means that kind has
    never been loaded in this session, which keeps partial snapshots
    (e.g. users loaded, articles still pending) representable.
    """
    users: Optional[Tuple[User, ...]] = None
    articles: Optional[Tuple[Article, ...]] = None
    comments: Optional[Tuple[Comment, ...]] = None
    stats: Optional[SiteStats] = None

    def is_loaded(self, kind: ResourceKind) -> bool:
        return getattr(self, kind.value) is not None

    def with_kind(self, kind: ResourceKind, value) -> "Snapshot":
        """Return a copy with one kind replaced wholesale."""
        if kind is not ResourceKind.STATS and value is not None:
            value = tuple(value)
        return replace(self, **{kind.value: value})

    def find_user(self, user_id: int) -> Optional[User]:
        return next((u for u in self.users or () if u.id == user_id), None)

    def find_article(self, article_id: int) -> Optional[Article]:
        return next((a for a in self.articles or () if a.id == article_id), None)

    def find_comment(self, comment_id: int) -> Optional[Comment]:
        return next((c for c in self.comments or () if c.id == comment_id), None)

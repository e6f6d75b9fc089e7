"""
Display Helpers
===============

Turns snapshot records into plain values for tables, detail panels and
confirmation messages. Nothing here touches a widget, so any toolkit can use
it.
"""

from datetime import date, datetime
from typing import Optional, Tuple
from urllib.parse import urljoin, urlsplit

from .config import DEFAULT_AVATAR_URL, DISPLAY_DATETIME_FORMAT
from .models import Article, Comment, ResourceKind, User

# ============================================================================
# TABLE LAYOUTS
# ============================================================================

USER_COLUMNS = (
    "ID", "Username", "Real Name", "Date of Birth", "Bio", "Avatar URL",
    "Created At", "Status", "Article Count", "Comment Count", "Has Avatar",
)
ARTICLE_COLUMNS = ("ID", "Title", "Author", "Created At", "Comments", "Views", "Status")
COMMENT_COLUMNS = ("ID", "Content", "Article", "Author", "Created At", "Status")


def format_timestamp(value: Optional[datetime]) -> str:
    return value.strftime(DISPLAY_DATETIME_FORMAT) if value is not None else ""


def format_date(value: Optional[date]) -> str:
    return value.isoformat() if value is not None else ""


def user_row(user: User) -> Tuple:
    return (
        user.id,
        user.username,
        user.real_name,
        format_date(user.date_of_birth),
        user.bio,
        user.avatar_url,
        format_timestamp(user.created_at),
        user.status.value,
        user.article_count,
        user.comment_count,
        user.has_avatar,
    )


def article_row(article: Article) -> Tuple:
    return (
        article.id,
        article.title,
        article.author_username,
        format_timestamp(article.created_at),
        article.comment_count,
        article.view_count,
        article.status.value,
    )


def comment_row(comment: Comment) -> Tuple:
    return (
        comment.id,
        comment.content,
        comment.article_title,
        comment.author_username,
        format_timestamp(comment.created_at),
        comment.status.value,
    )


# ============================================================================
# AVATARS
# ============================================================================

def server_root(base_url: str) -> str:
    """``http://host:3000/api`` -> ``http://host:3000/``"""
    parts = urlsplit(base_url)
    return f"{parts.scheme}://{parts.netloc}/"


def resolve_avatar_url(user: User, base_url: str, default_url: str = DEFAULT_AVATAR_URL) -> str:
    """
    Absolute URL of a user's avatar.

    The backend stores avatar paths relative to the server root
    (``/uploads/avatars/7.png``); users without one get the default avatar.
    """
    if not user.avatar_url:
        return default_url
    return urljoin(server_root(base_url), user.avatar_url)


# ============================================================================
# CONFIRMATION MESSAGES
# ============================================================================

_SUCCESS_MESSAGES = {
    ("delete", ResourceKind.USERS): "Successfully deleted user (id: {id} ).",
    ("ban", ResourceKind.USERS): "Successfully banned user (id: {id} ).",
    ("unban", ResourceKind.USERS): "Successfully unbanned user (id: {id} ).",
    ("delete", ResourceKind.ARTICLES): "Article deleted successfully",
    ("delete", ResourceKind.COMMENTS): "Comment deleted successfully",
}


def success_message(action: str, kind: ResourceKind, item_id: int) -> str:
    template = _SUCCESS_MESSAGES.get((action, kind), "Operation completed successfully")
    return template.format(id=item_id)

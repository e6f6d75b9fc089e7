"""
Unit tests for display helpers and moderation permissions.
"""

import unittest
from datetime import date, datetime

import sys, os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..')))

from blogadmin.core.formatting import (
    USER_COLUMNS,
    article_row,
    comment_row,
    resolve_avatar_url,
    server_root,
    success_message,
    user_row,
)
from blogadmin.core.models import Article, Comment, ResourceKind, Role, User, UserStatus
from blogadmin.core.permissions import NO_ACTIONS, ModerationActions, moderation_actions

CREATED = datetime(2025, 1, 1, 13, 38, 34)


def _user(**kwargs):
    defaults = dict(id=7, username="alice", created_at=CREATED)
    defaults.update(kwargs)
    return User(**defaults)


class TestPermissions(unittest.TestCase):

    def test_admin_on_active_user(self):
        self.assertEqual(
            moderation_actions(Role.ADMIN, _user()),
            ModerationActions(can_ban=True, can_unban=False, can_delete=True),
        )

    def test_admin_on_banned_user(self):
        self.assertEqual(
            moderation_actions(Role.ADMIN, _user(status=UserStatus.BANNED)),
            ModerationActions(can_ban=False, can_unban=True, can_delete=True),
        )

    def test_no_actions(self):
        self.assertIs(moderation_actions(Role.ADMIN, None), NO_ACTIONS)
        self.assertIs(moderation_actions(Role.USER, _user()), NO_ACTIONS)
        self.assertIs(moderation_actions(Role.UNKNOWN, _user()), NO_ACTIONS)

    def test_role_parse(self):
        self.assertEqual(Role.parse("ADMIN"), Role.ADMIN)
        self.assertEqual(Role.parse("moderator"), Role.UNKNOWN)
        self.assertEqual(Role.parse(None), Role.UNKNOWN)


class TestRows(unittest.TestCase):

    def test_user_row(self):
        row = user_row(_user(date_of_birth=date(1990, 5, 17), article_count=2))

        self.assertEqual(len(row), len(USER_COLUMNS))
        self.assertEqual(row[0], 7)
        self.assertEqual(row[3], "1990-05-17")
        self.assertEqual(row[6], "2025-01-01 13:38:34")
        self.assertEqual(row[7], "active")
        self.assertEqual(row[8], 2)

    def test_user_row_without_birth_date(self):
        self.assertEqual(user_row(_user())[3], "")

    def test_article_and_comment_rows(self):
        article = Article(id=1, title="Hello", content="...", created_at=CREATED, author_username="bob")
        comment = Comment(id=2, content="Nice", created_at=CREATED, article_title="Hello")

        self.assertEqual(article_row(article)[:3], (1, "Hello", "bob"))
        self.assertEqual(article_row(article)[-1], "published")
        self.assertEqual(comment_row(comment)[2], "Hello")


class TestAvatars(unittest.TestCase):

    def test_server_root(self):
        self.assertEqual(server_root("http://localhost:3000/api"), "http://localhost:3000/")

    def test_relative_avatar(self):
        user = _user(avatar_url="/uploads/avatars/7.png")

        self.assertEqual(
            resolve_avatar_url(user, "http://localhost:3000/api"),
            "http://localhost:3000/uploads/avatars/7.png",
        )

    def test_absolute_avatar(self):
        user = _user(avatar_url="https://cdn.example/a.png")

        self.assertEqual(resolve_avatar_url(user, "http://localhost:3000/api"), "https://cdn.example/a.png")

    def test_default_avatar(self):
        self.assertEqual(resolve_avatar_url(_user(), "http://x/api", default_url="d.png"), "d.png")


class TestMessages(unittest.TestCase):

    def test_success_messages(self):
        self.assertEqual(success_message("delete", ResourceKind.USERS, 7), "Successfully deleted user (id: 7 ).")
        self.assertEqual(success_message("ban", ResourceKind.USERS, 7), "Successfully banned user (id: 7 ).")
        self.assertEqual(success_message("delete", ResourceKind.ARTICLES, 1), "Article deleted successfully")
        self.assertEqual(success_message("archive", ResourceKind.STATS, 1), "Operation completed successfully")


if __name__ == '__main__':
    unittest.main()

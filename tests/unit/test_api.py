"""
End-to-end tests of the client facade against a scripted backend.
"""

import unittest

import sys, os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..')))

from blogadmin.core.api import BlogAdminAPI
from blogadmin.core.models import ResourceKind, Role
from blogadmin.core.permissions import moderation_actions
from blogadmin.utils.config_manager import ClientConfig
from tests.unit.fakes import (
    LOGIN_PATH,
    STATS_BODY,
    ManualExecutor,
    ScriptedTransport,
    article_payload,
    comment_payload,
    login_body,
    user_payload,
)


class TestBlogAdminAPI(unittest.TestCase):

    def setUp(self):
        self.transport = ScriptedTransport()
        self.executor = ManualExecutor()
        self.api = BlogAdminAPI(
            ClientConfig(default_ban_reason="Spam", default_ban_duration_hours=12),
            transport=self.transport,
            executor=self.executor,
        )

    def test_login_then_load_everything(self):
        self.transport.add("POST", LOGIN_PATH, 200, login_body())
        self.transport.add("GET", "/admin/users", 200, [user_payload(1), user_payload(2, status="banned")])
        self.transport.add("GET", "/admin/articles", 200, [article_payload(3)])
        self.transport.add("GET", "/admin/comments", 200, [comment_payload(4)])
        self.transport.add("GET", "/admin/stats", 200, STATS_BODY)

        self.assertTrue(self.api.session.login("admin", "secret").ok)
        self.api.coordinator.refresh_all()
        self.executor.run_all()

        snapshot = self.api.coordinator.snapshot
        for kind in ResourceKind:
            self.assertTrue(snapshot.is_loaded(kind))
        banned = snapshot.find_user(2)
        self.assertTrue(moderation_actions(self.api.session.current_role(), banned).can_unban)
        self.assertEqual(self.api.session.current_role(), Role.ADMIN)

    def test_ban_defaults_come_from_config(self):
        self.transport.add("POST", LOGIN_PATH, 200, login_body())
        self.transport.add("POST", "/admin/users/2/ban", 200, {})
        self.api.session.login("admin", "secret")

        self.api.users.ban(2)

        self.assertEqual(self.transport.calls[-1].json, {"reason": "Spam", "durationInHours": 12})

    def test_clients_share_diagnostics(self):
        self.assertIs(self.api.users.diagnostics, self.api.diagnostics)
        self.assertIs(self.api.stats.diagnostics, self.api.diagnostics)

    def test_context_manager_closes_transport(self):
        with self.api:
            pass

        self.assertTrue(self.transport.closed)


if __name__ == '__main__':
    unittest.main()

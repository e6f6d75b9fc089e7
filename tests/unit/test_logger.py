"""
Unit tests for log masking and API call instrumentation.
"""

import logging
import tempfile
import unittest
from pathlib import Path

import sys, os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..')))

from blogadmin.core.errors import Result, UnauthenticatedError
from blogadmin.utils.logger import (
    LOG_FILE_NAME,
    SensitiveDataFilter,
    log_api_call,
    mask_sensitive_data,
    setup_logging,
    shutdown_logging,
)


class TestMasking(unittest.TestCase):

    def test_mask_nested_dict(self):
        data = {
            "username": "admin",
            "password": "hunter2",
            "token": "eyJhbGciOi.payload.signature-abcd",
            "headers": {"Authorization": "Bearer abc"},
            "items": [{"secret": "x"}],
        }

        masked = mask_sensitive_data(data)

        self.assertEqual(masked["username"], "admin")
        self.assertEqual(masked["password"], "***")
        self.assertEqual(masked["token"], "***abcd")
        self.assertEqual(masked["headers"]["Authorization"], "***")
        self.assertEqual(masked["items"][0]["secret"], "***")
        self.assertEqual(data["password"], "hunter2")

    def test_mask_strings(self):
        self.assertEqual(mask_sensitive_data("Authorization: Bearer abc.def"), "Authorization: Bearer ***")
        self.assertEqual(mask_sensitive_data('{"password": "hunter2"}'), '{"password": "***"}')
        self.assertEqual(mask_sensitive_data("token eyJa.eyJb.sig"), "token ***")

    def test_filter_masks_message_and_args(self):
        record = logging.LogRecord(
            "test", logging.INFO, __file__, 1, "sent %s", ('{"token": "abc"}',), None
        )

        self.assertTrue(SensitiveDataFilter().filter(record))
        self.assertEqual(record.getMessage(), 'sent {"token": "***"}')


class TestSetupLogging(unittest.TestCase):

    def setUp(self):
        self.root = logging.getLogger()
        self.saved_handlers = self.root.handlers[:]
        self.saved_level = self.root.level
        self.root.handlers = []

    def tearDown(self):
        for handler in self.root.handlers:
            handler.close()
        self.root.handlers = self.saved_handlers
        self.root.setLevel(self.saved_level)

    def test_log_file_is_masked(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_file = setup_logging(console_level=logging.CRITICAL, log_dir=Path(tmp) / "logs")

            logging.getLogger("blogadmin.test").debug("Request headers: Bearer s3cr3t-token")
            for handler in self.root.handlers:
                handler.flush()

            self.assertEqual(log_file.name, LOG_FILE_NAME)
            content = log_file.read_text(encoding="utf-8")
            self.assertIn("Bearer ***", content)
            self.assertNotIn("s3cr3t-token", content)

            shutdown_logging()
            self.assertIn("Shutting down logging system", log_file.read_text(encoding="utf-8"))

            for handler in self.root.handlers:
                handler.close()
            self.root.handlers = []


class TestLogApiCall(unittest.TestCase):

    def test_failed_result_is_logged(self):
        @log_api_call(api_name="Admin")
        def list_users():
            return Result.failure(UnauthenticatedError("No active session"))

        with self.assertLogs(__name__, level="INFO") as logs:
            list_users()

        self.assertTrue(any("FAILED (unauthenticated)" in line for line in logs.output))

    def test_exception_is_logged_and_raised(self):
        @log_api_call
        def explode():
            raise RuntimeError("boom")

        with self.assertLogs(__name__, level="ERROR"):
            with self.assertRaises(RuntimeError):
                explode()

    def test_passwords_are_not_logged(self):
        @log_api_call(api_name="Auth")
        def login(username, password):
            return Result.success(None)

        with self.assertLogs(__name__, level="DEBUG") as logs:
            login(username="admin", password="hunter2")

        self.assertFalse(any("hunter2" in line for line in logs.output))


if __name__ == '__main__':
    unittest.main()

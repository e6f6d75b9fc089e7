"""
Unit tests for the status table and the error/result types.
"""

import json
import unittest

import sys, os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..')))

from blogadmin.core.errors import (
    ErrorKind,
    ForbiddenError,
    InvalidRequestError,
    InvalidRequestReason,
    NotFoundError,
    Result,
    ServerError,
    UnauthenticatedError,
    UnexpectedStatusError,
    UnreachableError,
)
from blogadmin.core.status_map import error_for_status, server_message
from blogadmin.core.transport import RawResponse


def _response(status, body=None):
    text = json.dumps(body) if isinstance(body, dict) else (body or "")
    return RawResponse(status_code=status, body=text)


class TestStatusTable(unittest.TestCase):

    def test_mapping(self):
        cases = [
            (400, {"error": "Bad input"}, InvalidRequestError),
            (401, {"error": "No token"}, UnauthenticatedError),
            (403, {"error": "Admins only"}, ForbiddenError),
            (404, {"error": "Missing"}, NotFoundError),
            (500, {"error": "Boom"}, ServerError),
            (503, "Service Unavailable", ServerError),
            (418, "teapot", UnexpectedStatusError),
            (201, "", UnexpectedStatusError),
        ]
        for status, body, error_type in cases:
            with self.subTest(status=status):
                error = error_for_status(_response(status, body))
                self.assertIsInstance(error, error_type)
                self.assertEqual(error.status_code, status)

    def test_success(self):
        self.assertIsNone(error_for_status(_response(200, "[]")))

    def test_last_admin_marker(self):
        error = error_for_status(_response(400, {"error": "Cannot delete the last admin user"}), resource="User")

        self.assertEqual(error.reason, InvalidRequestReason.LAST_ADMIN_PROTECTED)
        self.assertEqual(error.user_message, "Cannot delete the last admin user.")

    def test_marker_outside_error_field(self):
        error = error_for_status(_response(400, {"detail": "Cannot delete the last admin"}))

        self.assertEqual(error.reason, InvalidRequestReason.LAST_ADMIN_PROTECTED)

    def test_generic_invalid_request(self):
        error = error_for_status(_response(400, {"message": "User is not banned"}))

        self.assertEqual(error.reason, InvalidRequestReason.GENERIC)
        self.assertEqual(error.message, "User is not banned")

    def test_not_found_uses_resource_label(self):
        error = error_for_status(_response(404), resource="Article", resource_id=9)

        self.assertEqual(error.user_message, "Article (id: 9 ) not found.")

    def test_server_message(self):
        self.assertEqual(server_message('{"error": "x"}'), "x")
        self.assertEqual(server_message('{"message": "y"}'), "y")
        self.assertEqual(server_message("plain text "), "plain text")
        self.assertEqual(server_message(""), "")


class TestErrorsAndResult(unittest.TestCase):

    def test_unreachable_messages(self):
        self.assertIn("network connection", UnreachableError().user_message)
        self.assertEqual(UnreachableError(timed_out=True).user_message, "Timed out. Please try again later.")

    def test_error_equality(self):
        self.assertEqual(InvalidRequestError("nope"), InvalidRequestError("nope"))
        self.assertNotEqual(
            InvalidRequestError("nope"),
            InvalidRequestError("nope", reason=InvalidRequestReason.LAST_ADMIN_PROTECTED),
        )
        self.assertNotEqual(ServerError("x", status_code=500), ServerError("x", status_code=502))

    def test_result(self):
        success = Result.success(3, epoch=2)
        failure = Result.failure(UnauthenticatedError("no"), epoch=2)

        self.assertTrue(success.ok)
        self.assertIsNone(success.kind)
        self.assertEqual(success.map(lambda v: v * 2).value, 6)
        self.assertEqual(success.map(lambda v: v * 2).epoch, 2)

        self.assertFalse(failure.ok)
        self.assertEqual(failure.kind, ErrorKind.UNAUTHENTICATED)
        self.assertIs(failure.map(lambda v: v * 2), failure)
        with self.assertRaises(UnauthenticatedError):
            failure.unwrap()


if __name__ == '__main__':
    unittest.main()

"""
Unit tests for the HTTP transport.
"""

import unittest
from unittest.mock import MagicMock, patch

import requests

import sys, os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..')))

from blogadmin.core.errors import UnreachableError
from blogadmin.core.transport import HttpTransport, RawResponse


class TestHttpTransport(unittest.TestCase):

    def setUp(self):
        self.transport = HttpTransport("http://localhost:3000/api/", timeout=7)

    def tearDown(self):
        self.transport.close()

    @patch.object(requests.Session, "request")
    def test_request_with_token_and_body(self, mock_request):
        mock_request.return_value = MagicMock(status_code=200, text='{"message": "ok"}')

        response = self.transport.request("POST", "/admin/users/7/ban", token="abc", json={"reason": "Spam"})

        self.assertEqual(response, RawResponse(200, '{"message": "ok"}'))
        args, kwargs = mock_request.call_args
        self.assertEqual(args, ("POST", "http://localhost:3000/api/admin/users/7/ban"))
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer abc")
        self.assertEqual(kwargs["headers"]["Content-Type"], "application/json")
        self.assertEqual(kwargs["json"], {"reason": "Spam"})
        self.assertEqual(kwargs["timeout"], 7)

    @patch.object(requests.Session, "request")
    def test_request_without_token(self, mock_request):
        mock_request.return_value = MagicMock(status_code=401, text="")

        response = self.transport.request("GET", "admin/users")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.body, "")
        self.assertNotIn("Authorization", mock_request.call_args[1]["headers"])

    @patch.object(requests.Session, "request")
    def test_timeout(self, mock_request):
        mock_request.side_effect = requests.exceptions.ReadTimeout("read timed out")

        with self.assertRaises(UnreachableError) as ctx:
            self.transport.request("GET", "/admin/stats")
        self.assertTrue(ctx.exception.timed_out)

    @patch.object(requests.Session, "request")
    def test_connection_refused(self, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError("refused")

        with self.assertRaises(UnreachableError) as ctx:
            self.transport.request("GET", "/admin/stats")
        self.assertFalse(ctx.exception.timed_out)


if __name__ == '__main__':
    unittest.main()

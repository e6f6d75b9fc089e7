"""
HTTP Transport
==============

Thin wrapper around ``requests.Session`` that issues one request and hands
back the status code and raw body. It knows nothing about resources or
status semantics; connection failures and timeouts are raised as
``UnreachableError`` and everything else is left to the status mapping.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from .config import DEFAULT_BASE_URL, NETWORK_TIMEOUT_SECONDS
from .errors import UnreachableError
from blogadmin.utils.logger import log_api_request, log_api_response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawResponse:
    """Status code and undecoded body of one HTTP exchange."""
    status_code: int
    body: str = ""


class HttpTransport:
    """
    Issues JSON requests against the backend's ``/api`` root.

    Attributes:
        base_url: API root, e.g. ``http://localhost:3000/api``
        timeout: Connect/read timeout in seconds
        session: The pooled ``requests.Session``
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = NETWORK_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
        })

    def request(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        json: Optional[Any] = None
    ) -> RawResponse:
        """
        Send one request.

        Args:
            method: HTTP verb
            path: Path below the API root (e.g. ``/admin/users``)
            token: Bearer token to attach, if any
            json: Optional JSON-serializable request body

        Returns:
            RawResponse with the status code and body text

        Raises:
            UnreachableError: connection refused, DNS failure, timeout, or
                any other failure below the HTTP layer
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers: Dict[str, str] = {}
        if token is not None:
            headers['Authorization'] = f"Bearer {token}"
        if json is not None:
            headers['Content-Type'] = 'application/json'

        log_api_request(logger, method, url, headers=headers, data=json)
        start_time = time.time()

        try:
            response = self.session.request(
                method, url, headers=headers, json=json, timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"Request timed out: {method} {url}")
            raise UnreachableError(str(e), timed_out=True) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error: {method} {url}: {e}")
            raise UnreachableError(str(e)) from e

        log_api_response(logger, response.status_code, response.text, time.time() - start_time)
        return RawResponse(status_code=response.status_code, body=response.text or "")

    def close(self):
        self.session.close()

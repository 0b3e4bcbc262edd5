"""
HTTP client manager for single outbound attempts.

This module provides the HTTP client used by the relay fetcher. One call is
one attempt: a GET with the fixed gateway headers and timeout. Anything but
a 200 response with a JSON body is reported as a TransportError.
"""

import time
import threading
import requests
from typing import Optional, Dict, Any
import logging

from .constants import (
    UPSTREAM_TIMEOUT,
    DEFAULT_HEADERS,
    SUCCESS_STATUS_CODE
)
from .exceptions import TransportError

logger = logging.getLogger(__name__)


class HttpClientManager:
    """
    Centralized HTTP client for upstream and relay requests.

    Features:
    - Shared requests session (connection pooling)
    - Fixed browser-like headers and per-attempt timeout
    - Strict success check (status 200 only)
    - Request metrics
    """

    def __init__(self, timeout: float = UPSTREAM_TIMEOUT,
                 headers: Optional[Dict[str, str]] = None,
                 session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.headers = dict(headers or DEFAULT_HEADERS)
        self.session = session or requests.Session()
        self._stats_lock = threading.Lock()
        self._stats = {
            'requests_made': 0,
            'requests_failed': 0
        }

    def _count(self, stat: str):
        with self._stats_lock:
            self._stats[stat] += 1

    def get_json(self, url: str, relay_name: str = '') -> Any:
        """
        Make one GET request and return the decoded JSON body.

        Args:
            url: Request URL (already rewritten for the relay)
            relay_name: Name of the relay, used for logging and errors

        Returns:
            Decoded JSON payload

        Raises:
            TransportError: On network errors, timeouts, non-200 status or
                an undecodable body
        """
        start_time = time.time()
        try:
            logger.debug("[%s] Making GET request to %s (timeout: %ss)",
                         relay_name, url, self.timeout)
            response = self.session.get(url, timeout=self.timeout, headers=self.headers)
        except requests.exceptions.RequestException as e:
            duration = time.time() - start_time
            self._count('requests_failed')
            logger.debug("[%s] Request failed after %.2fs: %s", relay_name, duration, e)
            raise TransportError(str(e), relay_name=relay_name) from e

        duration = time.time() - start_time
        logger.debug("[%s] Request completed in %.2fs (status: %d)",
                     relay_name, duration, response.status_code)

        if response.status_code != SUCCESS_STATUS_CODE:
            self._count('requests_failed')
            raise TransportError(
                f"Request failed with status code {response.status_code}",
                relay_name=relay_name,
                status_code=response.status_code
            )

        try:
            payload = response.json()
        except ValueError as e:
            self._count('requests_failed')
            raise TransportError(
                f"Invalid JSON response: {e}",
                relay_name=relay_name,
                status_code=response.status_code
            ) from e

        self._count('requests_made')
        return payload

    def close(self):
        """Close the underlying session."""
        self.session.close()

    def get_stats(self) -> Dict[str, Any]:
        """Get HTTP client statistics."""
        with self._stats_lock:
            stats = dict(self._stats)
        total_requests = stats['requests_made'] + stats['requests_failed']
        success_rate = (stats['requests_made'] / total_requests * 100) if total_requests > 0 else 0

        return {
            **stats,
            'success_rate': success_rate
        }

    def reset_stats(self):
        """Reset HTTP client statistics."""
        with self._stats_lock:
            self._stats = {
                'requests_made': 0,
                'requests_failed': 0
            }

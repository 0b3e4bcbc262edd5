"""
Inbound rate limiting for gateway clients.

Each client (by IP address) gets a fixed window of RATE_LIMIT_WINDOW_SECONDS
in which at most RATE_LIMIT_MAX_REQUESTS requests are accepted. Windows are
kept in a cachetools.TTLCache, so a client's window disappears on its own
once it is over and memory stays bounded by the number of active clients.
"""

import time
import threading
import logging
from typing import Callable, Dict, Tuple, Any

from cachetools import TTLCache

from .fetching.constants import (
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
    RATE_LIMIT_MAX_CLIENTS
)

logger = logging.getLogger(__name__)


# pylint: disable=too-few-public-methods
class RateLimitWindow:
    """Request counter of one client within its current window."""

    def __init__(self, started_at: float):
        self.started_at = started_at
        self.count = 0


class InboundRateLimiter:
    """
    Fixed-window rate limiter keyed by client identifier.

    Features:
    - Per-client request windows
    - Automatic window expiry through TTLCache
    - Thread-safe operations
    """

    def __init__(
        self,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
        window_seconds: float = RATE_LIMIT_WINDOW_SECONDS,
        max_clients: int = RATE_LIMIT_MAX_CLIENTS,
        clock: Callable[[], float] = time.monotonic
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        # Windows are mutated in place, so the TTL counts from window start
        self._windows: TTLCache = TTLCache(
            maxsize=max_clients, ttl=window_seconds, timer=clock
        )
        self._lock = threading.Lock()

    def acquire(self, client_id: str) -> Tuple[bool, float]:
        """
        Count one request for a client.

        Args:
            client_id: Client identifier, usually the IP address

        Returns:
            (allowed, retry_after) where retry_after is the number of seconds
            until the client's window resets, 0 when allowed
        """
        with self._lock:
            now = self._clock()
            window = self._windows.get(client_id)
            if window is None:
                window = RateLimitWindow(now)
                self._windows[client_id] = window

            if window.count >= self.max_requests:
                retry_after = max(0.0, window.started_at + self.window_seconds - now)
                logger.debug(
                    "Client %s is rate limited for %.1f more seconds",
                    client_id, retry_after
                )
                return False, retry_after

            window.count += 1
            return True, 0.0

    def clear_all(self):
        """Forget all client windows."""
        with self._lock:
            self._windows.clear()
        logger.info("All rate limit windows cleared")

    def get_all_rate_limits(self) -> Dict[str, Dict[str, Any]]:
        """Get the request count and remaining window time of every active client."""
        result = {}
        with self._lock:
            now = self._clock()
            for client_id, window in self._windows.items():
                result[client_id] = {
                    'count': window.count,
                    'remaining_seconds': max(
                        0.0, window.started_at + self.window_seconds - now
                    )
                }
        return result

"""
Relay fetcher with bounded retries and linear backoff.

Each fetch walks the shared proxy pool: attempt n goes through the next relay
in rotation, and a failed attempt is followed by a wait of
backoff_seconds * n before the next one. Attempts within one fetch are
strictly sequential.
"""

import time
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from .constants import DEFAULT_MAX_ATTEMPTS, BACKOFF_BASE_SECONDS
from .exceptions import TransportError, FetchError
from .http_client import HttpClientManager
from .proxy_pool import ProxyPool, RelayTarget, build_request_url

logger = logging.getLogger(__name__)


@dataclass
class FetchAttempt:
    """Outcome of one attempt, kept only for the duration of a fetch call."""
    relay: RelayTarget
    error: Optional[TransportError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class RelayFetcher:
    """
    Fetch upstream URLs through the rotating relay pool.

    Usage:
        fetcher = RelayFetcher(ProxyPool.from_config(proxies), HttpClientManager())
        payload = fetcher.fetch('https://example.org/anime/schedule')
    """

    def __init__(
        self,
        proxy_pool: ProxyPool,
        http_client: Optional[HttpClientManager] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff_seconds: float = BACKOFF_BASE_SECONDS,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize the relay fetcher.

        Args:
            proxy_pool: Shared relay rotation
            http_client: Client performing single attempts
            max_attempts: Default number of attempts per fetch
            backoff_seconds: Base wait, attempt n waits backoff_seconds * n
            sleep: Sleep function, replaceable in tests
        """
        self.proxy_pool = proxy_pool
        self.http_client = http_client or HttpClientManager()
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep

    def fetch(self, target_url: str, max_attempts: Optional[int] = None) -> Any:
        """
        Fetch a URL, trying up to max_attempts relays.

        Args:
            target_url: Full upstream URL
            max_attempts: Override of the default attempt count

        Returns:
            Payload of the first successful attempt

        Raises:
            FetchError: If every attempt failed
            ValueError: If max_attempts is smaller than 1
        """
        attempts_allowed = self.max_attempts if max_attempts is None else max_attempts
        if attempts_allowed < 1:
            raise ValueError(f'max_attempts must be at least 1, got {attempts_allowed}')

        history: List[FetchAttempt] = []
        for attempt in range(attempts_allowed):
            relay = self.proxy_pool.next()
            request_url = build_request_url(relay, target_url)
            logger.info('Attempt %d with proxy: %s', attempt + 1, relay.name)

            try:
                payload = self.http_client.get_json(request_url, relay_name=relay.name)
            except TransportError as e:
                history.append(FetchAttempt(relay=relay, error=e))
                logger.warning('Proxy %s failed: %s', relay.name, e)

                if attempt == attempts_allowed - 1:
                    raise FetchError(
                        f'All proxies failed: {e}',
                        url=target_url,
                        attempts=len(history),
                        last_error=e
                    ) from e

                wait = self.backoff_seconds * (attempt + 1)
                logger.debug('Waiting %.1f seconds before next attempt', wait)
                self._sleep(wait)
                continue

            history.append(FetchAttempt(relay=relay))
            logger.info('Success with proxy: %s', relay.name)
            return payload

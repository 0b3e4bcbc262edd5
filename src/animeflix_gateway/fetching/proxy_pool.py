"""
Round-robin pool of relay targets.

Every outbound attempt takes the next relay from the pool. Rotation is
continuous and shared by all requests, so consecutive attempts (also across
separate fetch calls) walk the configured list in order and wrap around.
"""

import threading
import logging
from dataclasses import dataclass
from typing import Iterable, List, Mapping
from urllib.parse import quote

logger = logging.getLogger(__name__)

# Characters JavaScript's encodeURIComponent leaves untouched, on top of the
# letters, digits and "_.-~" that quote() never encodes.
_COMPONENT_SAFE_CHARS = "!*'()"


@dataclass(frozen=True)
class RelayTarget:
    """A relay endpoint. An empty url_prefix means a direct upstream call."""
    name: str
    url_prefix: str = ''

    @property
    def is_direct(self) -> bool:
        return not self.url_prefix


def build_request_url(relay: RelayTarget, target_url: str) -> str:
    """
    Build the URL for one attempt through the given relay.

    Args:
        relay: Relay to send the request through
        target_url: Full upstream URL including its query string

    Returns:
        target_url unchanged for a direct relay, otherwise the relay prefix
        followed by the percent-encoded target URL
    """
    if relay.is_direct:
        return target_url
    return relay.url_prefix + quote(target_url, safe=_COMPONENT_SAFE_CHARS)


class ProxyPool:
    """
    Thread-safe round-robin rotation over relay targets.

    The cursor is guarded by a lock so every next() call returns a valid
    target and advances the rotation by exactly one step.
    """

    def __init__(self, targets: Iterable[RelayTarget]):
        self._targets: List[RelayTarget] = list(targets)
        if not self._targets:
            raise ValueError('ProxyPool needs at least one relay target')
        self._cursor = 0
        self._lock = threading.Lock()
        logger.info('Initialized ProxyPool with %d relays: %s',
                    len(self._targets), ', '.join(self.names()))

    @classmethod
    def from_config(cls, proxies: Iterable[Mapping[str, str]]) -> 'ProxyPool':
        """Create a pool from config entries of the form {'name': ..., 'url': ...}."""
        return cls(
            RelayTarget(name=entry['name'], url_prefix=entry.get('url') or '')
            for entry in proxies
        )

    def next(self) -> RelayTarget:
        """Return the relay at the cursor and advance the cursor by one."""
        with self._lock:
            relay = self._targets[self._cursor]
            self._cursor = (self._cursor + 1) % len(self._targets)
        return relay

    def size(self) -> int:
        return len(self._targets)

    def __len__(self) -> int:
        return len(self._targets)

    def names(self) -> List[str]:
        """Relay names in rotation order."""
        return [target.name for target in self._targets]

"""
Fallback search over candidate upstream paths.

The upstream exposes some logical resources under several historical paths.
The resolver tries them in priority order and accepts the first one that
returns non-empty data.
"""

import logging
from typing import Any, Optional, Sequence

from .exceptions import FetchError, ResolveError
from .fetcher import RelayFetcher

logger = logging.getLogger(__name__)


def is_non_empty(payload: Any) -> bool:
    """True for a list with items or a dict with keys. Scalars and None are empty."""
    if isinstance(payload, (list, tuple)):
        return len(payload) > 0
    if isinstance(payload, dict):
        return len(payload) > 0
    return False


class EndpointResolver:
    """Try candidate paths through the fetcher until one yields data."""

    def __init__(self, fetcher: RelayFetcher, base_url: str = ''):
        self.fetcher = fetcher
        self.base_url = base_url

    def resolve_first(self, candidate_paths: Sequence[str],
                      base_url: Optional[str] = None,
                      resource: str = 'resource') -> Any:
        """
        Return the payload of the first candidate with non-empty data.

        Args:
            candidate_paths: Paths in priority order
            base_url: Prefix for every path (defaults to the resolver's base_url)
            resource: Resource name used in the error message

        Returns:
            The accepted payload

        Raises:
            ResolveError: If every candidate failed or returned empty data
        """
        base = self.base_url if base_url is None else base_url

        for path in candidate_paths:
            try:
                payload = self.fetcher.fetch(base + path)
            except FetchError as e:
                logger.warning('Endpoint %s failed: %s', path, e)
                continue

            if is_non_empty(payload):
                logger.info('Success with endpoint: %s', path)
                return payload

            logger.warning('Endpoint %s returned empty data', path)

        raise ResolveError(
            f'Failed to fetch {resource}',
            resource=resource,
            candidates=candidate_paths
        )

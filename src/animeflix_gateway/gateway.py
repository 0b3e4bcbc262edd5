"""
Anime Gateway Module

Maps the gateway's logical resources onto upstream paths and cache keys.
Every cached resource follows the same pattern:

1. Look up the cache key
2. On a miss, fetch the single upstream path (or resolve the first
   non-empty candidate path)
3. Store only successful payloads

Streaming server data changes too often to cache and is always fetched.
"""

import datetime
import logging
from typing import Any, Dict, Sequence
from urllib.parse import quote

from .fetching import CacheManager, EndpointResolver, ProxyPool, RelayFetcher
from .fetching.constants import DEFAULT_API_BASE

logger = logging.getLogger(__name__)

# Latest releases have moved between upstream paths over time
LATEST_CANDIDATE_PATHS = (
    '/neko/latest',
    '/anime/home',
    '/anime/ongoing-anime',
)


class AnimeGateway:
    """
    Cache-fronted access to the upstream anime API.

    Usage:
        gateway = AnimeGateway(fetcher, resolver, cache, proxy_pool)
        payload = gateway.completed('2')
    """

    def __init__(
        self,
        fetcher: RelayFetcher,
        resolver: EndpointResolver,
        cache: CacheManager,
        proxy_pool: ProxyPool,
        api_base: str = DEFAULT_API_BASE
    ):
        self.fetcher = fetcher
        self.resolver = resolver
        self.cache = cache
        self.proxy_pool = proxy_pool
        self.api_base = api_base.rstrip('/')

    def _cached_fetch(self, cache_key: str, path: str) -> Any:
        return self.cache.get_or_fetch(
            cache_key, lambda: self.fetcher.fetch(self.api_base + path)
        )

    def _cached_resolve(self, cache_key: str, candidate_paths: Sequence[str],
                        resource: str) -> Any:
        return self.cache.get_or_fetch(
            cache_key,
            lambda: self.resolver.resolve_first(
                candidate_paths, base_url=self.api_base, resource=resource
            )
        )

    def latest(self) -> Any:
        return self._cached_resolve('latest', LATEST_CANDIDATE_PATHS, 'latest anime')

    def ongoing(self) -> Any:
        return self._cached_fetch('ongoing', '/anime/ongoing-anime')

    def completed(self, page: str = '1') -> Any:
        return self._cached_fetch(f'completed-{page}', f'/anime/complete-anime/{page}')

    def search(self, query: str) -> Any:
        """Search by title. The query is percent-encoded into the upstream path."""
        encoded = quote(query, safe="!*'()")
        return self._cached_fetch(f'search-{query}', f'/anime/search/{encoded}')

    def anime(self, slug: str) -> Any:
        return self._cached_fetch(f'anime-{slug}', f'/anime/anime/{slug}')

    def episode(self, slug: str) -> Any:
        return self._cached_fetch(f'episode-{slug}', f'/anime/episode/{slug}')

    def schedule(self) -> Any:
        return self._cached_fetch('schedule', '/anime/schedule')

    def genres(self) -> Any:
        return self._cached_fetch('genres', '/anime/genre')

    def genre(self, slug: str) -> Any:
        return self._cached_fetch(f'genre-{slug}', f'/anime/genre/{slug}')

    def samehadaku(self, endpoint: str) -> Any:
        return self._cached_fetch(f'samehadaku-{endpoint}', f'/anime/samehadaku/{endpoint}')

    def server(self, server_id: str) -> Any:
        """Fetch streaming server data. Never read from or written to the cache."""
        return self.fetcher.fetch(f'{self.api_base}/anime/server/{server_id}')

    def health(self) -> Dict[str, Any]:
        """Status summary for monitoring."""
        return {
            'status': 'OK',
            'timestamp': datetime.datetime.now(datetime.timezone.utc).isoformat(),
            'cacheSize': self.cache.size(),
            'activeProxies': self.proxy_pool.size()
        }

    def clear_cache(self) -> Dict[str, Any]:
        """Drop every cached payload."""
        previous_size = self.cache.clear()
        return {
            'message': 'Cache cleared',
            'previousSize': previous_size,
            'currentSize': self.cache.size()
        }

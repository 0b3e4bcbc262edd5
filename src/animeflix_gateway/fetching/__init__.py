"""
Animeflix Gateway Fetching Package

This package provides the request-dispatch core of the gateway: relay
rotation, multi-attempt fetching with backoff, fallback endpoint search and
the response cache in front of it.

Components:
- constants: Timeouts, retry counts, cache retention, headers and default relays
- proxy_pool: Round-robin relay rotation and relay URL building
- http_client: Single outbound attempts with fixed headers and timeout
- fetcher: Retry loop over the relay pool
- endpoint_resolver: First non-empty result among candidate paths
- cache_manager: Thread-safe cache with a fixed retention window
- exceptions: TransportError, FetchError, ResolveError
"""

from .constants import (
    DEFAULT_API_BASE,
    UPSTREAM_TIMEOUT,
    DEFAULT_MAX_ATTEMPTS,
    BACKOFF_BASE_SECONDS,
    CACHE_RETENTION,
    DEFAULT_HEADERS,
    DEFAULT_PROXIES
)

from .exceptions import GatewayError, TransportError, FetchError, ResolveError
from .proxy_pool import RelayTarget, ProxyPool, build_request_url
from .cache_manager import CacheEntry, CacheManager
from .http_client import HttpClientManager
from .fetcher import FetchAttempt, RelayFetcher
from .endpoint_resolver import EndpointResolver, is_non_empty

__all__ = [
    'DEFAULT_API_BASE',
    'UPSTREAM_TIMEOUT',
    'DEFAULT_MAX_ATTEMPTS',
    'BACKOFF_BASE_SECONDS',
    'CACHE_RETENTION',
    'DEFAULT_HEADERS',
    'DEFAULT_PROXIES',
    'GatewayError',
    'TransportError',
    'FetchError',
    'ResolveError',
    'RelayTarget',
    'ProxyPool',
    'build_request_url',
    'CacheEntry',
    'CacheManager',
    'HttpClientManager',
    'FetchAttempt',
    'RelayFetcher',
    'EndpointResolver',
    'is_non_empty'
]

from .__pkginfo__ import __version__

from .gateway import AnimeGateway
from .fetching import (
    CacheManager,
    EndpointResolver,
    ProxyPool,
    RelayFetcher,
    FetchError,
    ResolveError
)

__all__ = [
    '__version__',
    'AnimeGateway',
    'CacheManager',
    'EndpointResolver',
    'ProxyPool',
    'RelayFetcher',
    'FetchError',
    'ResolveError',
]

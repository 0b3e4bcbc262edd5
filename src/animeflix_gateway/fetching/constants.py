"""
Constants for the animeflix gateway fetching infrastructure.

This module defines the fixed timeout, retry, cache retention and header
values used by the relay fetcher, plus the default relay list.

Cache Strategy Overview:
- Retention: how long a stored payload is served before it counts as stale (5 minutes)
- Stale entries are not evicted on lookup, they are overwritten by the next store
- An optional prune job may remove stale entries in the background
"""

# Upstream API
DEFAULT_API_BASE = 'https://www.sankavollerei.com/anime'
UPSTREAM_REFERER = 'https://www.sankavollerei.com/'

# Timeout constants (in seconds)
UPSTREAM_TIMEOUT = 10      # Per outbound attempt, relay or direct

# Retry constants
DEFAULT_MAX_ATTEMPTS = 3   # Relays tried per fetch call
BACKOFF_BASE_SECONDS = 1   # Linear backoff: 1s, 2s, ...

# Cache retention (in seconds)
CACHE_RETENTION = 300      # 5 minutes

# Inbound rate limiting
RATE_LIMIT_MAX_REQUESTS = 100
RATE_LIMIT_WINDOW_SECONDS = 60
RATE_LIMIT_MAX_CLIENTS = 10000

# Only this status counts as a successful attempt
SUCCESS_STATUS_CODE = 200

# Headers sent with every outbound attempt
DEFAULT_HEADERS = {
    'User-Agent': (
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36'
    ),
    'Accept': 'application/json',
    'Accept-Language': 'en-US,en;q=0.9',
    'Referer': UPSTREAM_REFERER,
}

# Relay rotation order. An empty url means "call the upstream directly".
DEFAULT_PROXIES = [
    {'name': 'Direct', 'url': ''},
    {'name': 'CorsAnywhere', 'url': 'https://cors-anywhere.herokuapp.com/'},
    {'name': 'AllOrigins', 'url': 'https://api.allorigins.win/raw?url='},
    {'name': 'CorsProxy', 'url': 'https://corsproxy.io/?'},
    {'name': 'CodeTabs', 'url': 'https://api.codetabs.com/v1/proxy?quest='},
    {'name': 'ThingsProxy', 'url': 'https://thingproxy.freeboard.io/fetch/'},
]

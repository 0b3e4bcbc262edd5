from .setup import setup_logging, load_config
from .api import create_app
from .gateway import AnimeGateway
from .fetching import (
    CacheManager,
    EndpointResolver,
    HttpClientManager,
    ProxyPool,
    RelayFetcher
)
from .rate_limit_manager import InboundRateLimiter
from .scheduler import SchedulerThread, schedule_every, clear_jobs
import os
import sys
import logging

import uvicorn


CONFIGFILE = os.environ.get('ANIMEFLIX_CONFIG', 'config/gateway_config.yaml')


def build_gateway(config: dict) -> AnimeGateway:
    """Wire the relay pool, cache, fetcher and resolver from the configuration."""
    upstream = config['upstream']
    proxy_pool = ProxyPool.from_config(config['proxies'])
    cache = CacheManager(retention_seconds=config['cache']['retention_seconds'])
    fetcher = RelayFetcher(
        proxy_pool,
        HttpClientManager(timeout=upstream['timeout']),
        max_attempts=upstream['max_attempts'],
        backoff_seconds=upstream['backoff_seconds']
    )
    resolver = EndpointResolver(fetcher, base_url=upstream['api_base'])
    return AnimeGateway(fetcher, resolver, cache, proxy_pool, api_base=upstream['api_base'])


def main() -> int:
    # Configure a basic logger to be able to log even before the configuration is loaded
    setup_logging(level=logging.INFO)
    logger = logging.getLogger(__name__)
    logger.info('Looking for config file at %s', CONFIGFILE)

    config = load_config(CONFIGFILE)

    loglevel = config.get('loglevel', 'info')
    logfile = config['logfile_path'] if config.get('logfile_enabled') else None

    loglevel_mapping = {
        'debug': logging.DEBUG,
        'warning': logging.WARNING,
        'error': logging.ERROR,
        'info': logging.INFO
    }

    setup_logging(level=loglevel_mapping.get(loglevel, logging.INFO), logfile=logfile)
    logger = logging.getLogger(__name__)

    if not config.get('log_everything', False):
        logging.getLogger("urllib3.connectionpool").setLevel(logging.WARNING)
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    gateway = build_gateway(config)

    rate_limiter = None
    if config['rate_limit']['enabled']:
        rate_limiter = InboundRateLimiter(
            max_requests=config['rate_limit']['max_requests'],
            window_seconds=config['rate_limit']['window_seconds']
        )

    app = create_app(
        gateway,
        rate_limiter,
        cors_origins=config['server']['cors_origins'],
        trust_forwarded_for=config['rate_limit']['trust_forwarded_for']
    )

    scheduler = None
    prune_interval = config['cache']['prune_interval_minutes']
    if prune_interval and prune_interval > 0:
        schedule_every(prune_interval, 'minutes', gateway.cache.cleanup_expired,
                       'cache-prune')
        scheduler = SchedulerThread()
        scheduler.start()

    host = config['server']['host']
    port = config['server']['port']
    logger.info("AnimeFlix Backend running on port %d", port)
    logger.info("Proxies available: %d", gateway.proxy_pool.size())
    logger.info("Cache enabled: %d seconds", config['cache']['retention_seconds'])
    logger.info("API Base: %s", gateway.api_base)

    try:
        uvicorn.run(app, host=host, port=port, log_config=None)
    except KeyboardInterrupt:
        print("Shutting down")
    finally:
        if scheduler is not None:
            scheduler.stop()
            clear_jobs()
        gateway.fetcher.http_client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())

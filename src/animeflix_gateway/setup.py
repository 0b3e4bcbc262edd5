import copy
import logging
import sys
import os
import yaml
from logging.handlers import RotatingFileHandler

from .fetching.constants import (
    DEFAULT_API_BASE,
    UPSTREAM_TIMEOUT,
    DEFAULT_MAX_ATTEMPTS,
    BACKOFF_BASE_SECONDS,
    CACHE_RETENTION,
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
    DEFAULT_PROXIES
)

DEFAULT_CONFIG = {
    'loglevel': 'info',
    'logfile_enabled': False,
    'logfile_path': 'logs/animeflix_gateway.log',
    'log_everything': False,
    'server': {
        'host': '0.0.0.0',
        'port': 3000,
        'cors_origins': ['*'],
    },
    'upstream': {
        'api_base': DEFAULT_API_BASE,
        'timeout': UPSTREAM_TIMEOUT,
        'max_attempts': DEFAULT_MAX_ATTEMPTS,
        'backoff_seconds': BACKOFF_BASE_SECONDS,
    },
    'cache': {
        'retention_seconds': CACHE_RETENTION,
        'prune_interval_minutes': 0,
    },
    'rate_limit': {
        'enabled': True,
        'max_requests': RATE_LIMIT_MAX_REQUESTS,
        'window_seconds': RATE_LIMIT_WINDOW_SECONDS,
        'trust_forwarded_for': False,
    },
    'proxies': DEFAULT_PROXIES,
}


def setup_logging(level=logging.INFO, logfile=None):
    """Configure root logger with consistent formatting.

    Args:
        level (int): Log level to set for the root logger.
        logfile (str): If specified, log to this file as well as the console.

    Returns:
        logging.Logger: Root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers to avoid duplicates
    root_logger.handlers = []

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        "%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if logfile:
        logdir = os.path.dirname(logfile)
        if logdir and not os.path.exists(logdir):
            os.makedirs(logdir)
        file_handler = RotatingFileHandler(logfile, maxBytes=10*1024*1024, backupCount=2)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    return root_logger


def _merge(defaults: dict, overrides: dict) -> dict:
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _numeric(config: dict, section: str, key: str, convert):
    """Convert config[section][key] in place, raising RuntimeError on bad values."""
    value = config[section][key]
    try:
        converted = convert(value)
    except (TypeError, ValueError) as e:
        raise RuntimeError(f'{section}.{key} must be a number, got {value!r}') from e
    config[section][key] = converted
    return converted


def _validate_config(config: dict):
    if _numeric(config, 'upstream', 'max_attempts', int) < 1:
        raise RuntimeError('upstream.max_attempts must be at least 1')
    if _numeric(config, 'upstream', 'timeout', float) <= 0:
        raise RuntimeError('upstream.timeout must be positive')
    if _numeric(config, 'upstream', 'backoff_seconds', float) < 0:
        raise RuntimeError('upstream.backoff_seconds must not be negative')
    if _numeric(config, 'cache', 'retention_seconds', float) <= 0:
        raise RuntimeError('cache.retention_seconds must be positive')

    proxies = config['proxies']
    if not proxies:
        raise RuntimeError('No proxies configured, add at least a Direct entry')
    for entry in proxies:
        if not isinstance(entry, dict) or not entry.get('name'):
            raise RuntimeError(f'Invalid proxy entry {entry!r}, a name is required')


def load_config(configfile: str) -> dict:
    """ Load the configuration file and check for validity.

    Missing keys, or a missing file, fall back to DEFAULT_CONFIG. The PORT
    environment variable overrides server.port.

    Args:
        configfile (str): Path to the config file

    Returns:
        dict: The loaded configuration

    Raises:
        RuntimeError: If the config file is not a mapping or holds invalid values

    """
    config_from_file = {}
    if os.path.isfile(configfile):
        with open(configfile, 'r', encoding='UTF-8') as f:
            config_str = f.read()
        config_from_file = yaml.safe_load(config_str) or {}
        if not isinstance(config_from_file, dict):
            raise RuntimeError(f'Configfile {configfile} does not contain a mapping')
    else:
        logging.getLogger(__name__).warning(
            'Configfile %s not found, using defaults', configfile)

    config = _merge(DEFAULT_CONFIG, config_from_file)

    port = os.environ.get('PORT')
    if port:
        config['server']['port'] = int(port)

    _validate_config(config)
    return config

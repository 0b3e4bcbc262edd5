"""
Custom exceptions for the fetching package.

Failures are layered so that each component only sees the errors it is
responsible for:

1. TransportError - a single outbound attempt failed (network, timeout,
   non-200 status, undecodable body). Handled by the fetcher's retry loop.
2. FetchError - every attempt for one target URL failed.
3. ResolveError - every candidate path failed or returned empty data.

A cache miss is not an error and has no exception.
"""

from typing import Optional, Sequence


class GatewayError(Exception):
    """Base class for errors surfaced by the fetching layer."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransportError(GatewayError):
    """
    Exception raised when one outbound attempt fails.

    Attributes:
        relay_name: Name of the relay the attempt went through
        status_code: HTTP status if a response was received, None otherwise
    """

    def __init__(self, message: str, relay_name: str = '',
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.relay_name = relay_name
        self.status_code = status_code


class FetchError(GatewayError):
    """
    Exception raised when all attempts for a target URL are exhausted.

    The message embeds the detail of the last transport failure.
    """

    def __init__(self, message: str, url: str = '', attempts: int = 0,
                 last_error: Optional[TransportError] = None):
        super().__init__(message)
        self.url = url
        self.attempts = attempts
        self.last_error = last_error


class ResolveError(GatewayError):
    """Exception raised when no candidate path yields non-empty data."""

    def __init__(self, message: str, resource: str = '',
                 candidates: Sequence[str] = ()):
        super().__init__(message)
        self.resource = resource
        self.candidates = list(candidates)

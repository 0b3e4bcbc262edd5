"""
FastAPI application for the animeflix gateway.

Endpoints:
- GET /api/latest, /api/ongoing, /api/completed/{page}, /api/search/{query},
  /api/anime/{slug}, /api/episode/{slug}, /api/schedule, /api/genres,
  /api/genre/{slug}, /api/samehadaku/{endpoint}, /api/server/{server_id}
- GET /health - Cache size and relay count
- DELETE /cache - Clear the response cache

Handlers are plain functions, so FastAPI runs them in its worker threadpool
and the blocking relay fetches never stall the event loop.
"""

import logging
from typing import Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from .__pkginfo__ import __version__
from .fetching.exceptions import GatewayError
from .gateway import AnimeGateway
from .rate_limit_manager import InboundRateLimiter

logger = logging.getLogger(__name__)

ENDPOINTS = [
    '/api/latest',
    '/api/ongoing',
    '/api/completed/:page?',
    '/api/search/:query',
    '/api/anime/:slug',
    '/api/episode/:slug',
    '/api/schedule',
    '/api/genres',
    '/api/genre/:slug',
    '/api/samehadaku/:endpoint',
    '/api/server/:serverId',
]


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Map unexpected exceptions to the uniform JSON 500 inside the CORS layer."""

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception as e:  # pylint: disable=broad-except
            logger.error("Unhandled error in %s: %s", request.url.path, e, exc_info=e)
            return JSONResponse(status_code=500, content={'error': 'Internal server error'})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware that enforces the inbound rate limit per client IP.

    Clients are keyed by socket address. X-Forwarded-For is only used when
    trust_forwarded_for is set, i.e. behind a reverse proxy that sets it.
    """

    def __init__(self, app, limiter: InboundRateLimiter, trust_forwarded_for: bool = False):
        super().__init__(app)
        self.limiter = limiter
        self.trust_forwarded_for = trust_forwarded_for

    async def dispatch(self, request: Request, call_next) -> Response:
        client_ip = self._get_client_ip(request)
        allowed, wait_time = self.limiter.acquire(client_ip)

        if not allowed:
            logger.warning("Rate limit exceeded for %s", client_ip)
            return JSONResponse(
                status_code=429,
                content={'error': 'Too many requests, please try again later.'},
                headers={'Retry-After': str(int(wait_time) + 1)}
            )

        return await call_next(request)

    def _get_client_ip(self, request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded and self.trust_forwarded_for:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"


def create_app(
    gateway: AnimeGateway,
    rate_limiter: Optional[InboundRateLimiter] = None,
    cors_origins: Sequence[str] = ('*',),
    trust_forwarded_for: bool = False
) -> FastAPI:
    """
    Build the gateway web application.

    Args:
        gateway: Orchestration layer answering the API routes
        rate_limiter: Inbound limiter, None disables rate limiting
        cors_origins: Allowed CORS origins
        trust_forwarded_for: Key the rate limit on X-Forwarded-For instead of
            the socket address

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="AnimeFlix Backend API",
        description="Caching relay gateway for the anime content API",
        version=__version__,
    )

    if rate_limiter is not None:
        app.add_middleware(RateLimitMiddleware, limiter=rate_limiter,
                           trust_forwarded_for=trust_forwarded_for)
    app.add_middleware(UnhandledErrorMiddleware)
    # Added last so it wraps everything and error and 429 responses carry CORS headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        logger.error("Error in %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={'error': exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content={'error': 'Endpoint not found'})
        return JSONResponse(status_code=exc.status_code, content={'error': exc.detail})

    @app.get("/")
    def index():
        return {
            'message': 'AnimeFlix Backend API',
            'version': __version__,
            'endpoints': ENDPOINTS
        }

    @app.get("/api/latest")
    def latest():
        return gateway.latest()

    @app.get("/api/ongoing")
    def ongoing():
        return gateway.ongoing()

    @app.get("/api/completed")
    @app.get("/api/completed/{page}")
    def completed(page: str = '1'):
        return gateway.completed(page)

    @app.get("/api/search/{query:path}")
    def search(query: str):
        return gateway.search(query)

    @app.get("/api/anime/{slug}")
    def anime(slug: str):
        return gateway.anime(slug)

    @app.get("/api/episode/{slug}")
    def episode(slug: str):
        return gateway.episode(slug)

    @app.get("/api/schedule")
    def schedule():
        return gateway.schedule()

    @app.get("/api/genres")
    def genres():
        return gateway.genres()

    @app.get("/api/genre/{slug}")
    def genre(slug: str):
        return gateway.genre(slug)

    @app.get("/api/samehadaku/{endpoint}")
    def samehadaku(endpoint: str):
        return gateway.samehadaku(endpoint)

    @app.get("/api/server/{server_id}")
    def server(server_id: str):
        return gateway.server(server_id)

    @app.get("/health")
    def health():
        return gateway.health()

    @app.delete("/cache")
    def clear_cache():
        return gateway.clear_cache()

    return app

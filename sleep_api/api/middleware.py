"""API middleware for rate limiting and CORS"""
import logging
from typing import List
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi.middleware.cors import CORSMiddleware

from sleep_api.config import RATE_LIMIT, RATE_LIMIT_ENABLED

logger = logging.getLogger(__name__)

# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)

_route_limit = RATE_LIMIT


def route_rate_limit() -> str:
    """Per-IP limit applied by @limiter.limit on the sleep routes

    Read on every request, so the value set by the last
    setup_rate_limiting call wins.
    """
    return _route_limit


def setup_cors(app, origins: List[str]):
    """Configure CORS middleware"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    logger.info(f"CORS configured for origins: {origins}")


def setup_rate_limiting(app, limit: str = RATE_LIMIT, enabled: bool = RATE_LIMIT_ENABLED) -> None:
    """Configure rate limiting

    Counters are cleared so a freshly created app starts with a full budget.
    """
    global _route_limit
    _route_limit = limit
    limiter.enabled = enabled
    limiter.reset()

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    if enabled:
        logger.info(f"Rate limiting configured: {limit} per IP")
    else:
        logger.info("Rate limiting disabled")

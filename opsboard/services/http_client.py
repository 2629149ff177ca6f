"""
Pooled HTTP client for the droplet.

Every outbound call goes to the same host: one health probe per roster
worker on each status poll, plus PM2 control and usage lookups. The pool is
sized from the roster so a full fan-out never waits for a free connection,
and keep-alive connections cover one fan-out.
"""

import logging

import httpx

from opsboard.config import settings
from opsboard.config.workers import WORKERS

logger = logging.getLogger(__name__)

# Status polls that may fan out at the same time (dashboard tabs)
STATUS_POLLS_IN_FLIGHT = 2
# Control and usage calls running beside the polls
EXTRA_CONNECTIONS = 4

_client: httpx.AsyncClient | None = None


def droplet_limits(worker_count: int = len(WORKERS)) -> httpx.Limits:
    """Pool limits for ``worker_count`` workers probed per status poll."""
    return httpx.Limits(
        max_connections=worker_count * STATUS_POLLS_IN_FLIGHT + EXTRA_CONNECTIONS,
        max_keepalive_connections=worker_count,
    )


def droplet_timeout() -> httpx.Timeout:
    """Fallback timeout for calls that pass none.

    The overall bound is the slowest configured droplet call; connecting is
    bounded by the health probe timeout, since the droplet either answers
    quickly or is down.
    """
    slowest = max(
        settings.worker_health_timeout,
        settings.worker_control_timeout,
        settings.usage_timeout,
    )
    return httpx.Timeout(slowest, connect=settings.worker_health_timeout)


def get_http_client() -> httpx.AsyncClient:
    """Get or create the droplet client (request dependency)."""
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(timeout=droplet_timeout(), limits=droplet_limits())
        logger.debug(f"Created droplet HTTP client for {len(WORKERS)} workers")
    return _client


async def close_http_client() -> None:
    """Close the droplet client on shutdown."""
    global _client
    if _client is not None and not _client.is_closed:
        await _client.aclose()
        _client = None
        logger.debug("Closed droplet HTTP client")

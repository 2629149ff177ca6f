"""AI usage and budget, proxied from the usage tracker.

The dashboard prefers an empty panel to an error: any failure returns the
zeroed payload.
"""

import copy
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

MONTHLY_BUDGET_USD = 50

EMPTY_USAGE: dict[str, Any] = {
    "totals": {
        "requests": 0,
        "total_tokens": 0,
        "cost_usd": 0,
    },
    "budget": {
        "monthly_limit": MONTHLY_BUDGET_USD,
        "used": 0,
        "percent_used": 0,
    },
    "by_assistant": [],
}


def empty_usage() -> dict[str, Any]:
    return copy.deepcopy(EMPTY_USAGE)


async def fetch_usage(client: httpx.AsyncClient, usage_url: str, timeout: float) -> dict[str, Any]:
    """Usage totals from the tracker, or the zeroed payload."""
    try:
        response = await client.get(f"{usage_url}/api/usage", timeout=timeout)
    except httpx.HTTPError as e:
        logger.warning(f"AI usage fetch failed: {e!r}")
        return empty_usage()

    if not response.is_success:
        logger.warning(f"AI usage fetch returned {response.status_code}")
        return empty_usage()

    try:
        data = response.json()
    except ValueError:
        logger.warning("AI usage response was not JSON")
        return empty_usage()

    if not isinstance(data, dict):
        return empty_usage()
    return data

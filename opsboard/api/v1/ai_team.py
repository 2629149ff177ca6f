"""AI team endpoints: worker health, process control and usage."""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from opsboard.api.deps import HttpClient
from opsboard.config import WORKERS, settings
from opsboard.services.workers import (
    WorkerControlError,
    check_all_workers,
    fetch_usage,
    send_control,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai-team", tags=["ai-team"])


class WorkerControlRequest(BaseModel):
    workerId: str | None = None
    action: str | None = None


@router.get("/status")
async def get_worker_status(client: HttpClient):
    """Health of every worker in the roster, probed concurrently."""
    try:
        statuses = await check_all_workers(
            client,
            settings.ai_droplet_url,
            WORKERS,
            settings.worker_health_timeout,
        )
    except Exception as e:
        logger.error(f"AI team status check failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Status check failed",
        ) from e

    return {
        "success": True,
        "workers": [s.to_dict() for s in statuses],
        "lastCheck": datetime.now(UTC).isoformat(),
    }


@router.post("/control")
async def control_worker(data: WorkerControlRequest, client: HttpClient):
    """Start, stop or restart a worker through the droplet's process manager."""
    try:
        result = await send_control(
            client,
            settings.control_base_url,
            data.workerId,
            data.action,
            settings.worker_control_timeout,
        )
    except WorkerControlError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message,
        ) from e

    return {"success": True, **result}


@router.get("/usage")
async def get_usage(client: HttpClient):
    """AI usage totals and budget; zeroed when the tracker is unavailable."""
    usage = await fetch_usage(client, settings.usage_url, settings.usage_timeout)
    return {"success": True, **usage}

"""Operations panel endpoints."""

import logging

from fastapi import APIRouter

from opsboard.config import WORKERS, settings
from opsboard.services.host_metrics import collect_host_metrics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/operations", tags=["operations"])


@router.get("/droplet-status")
async def get_droplet_status():
    """OS metrics of the droplet this service runs on."""
    metrics = await collect_host_metrics(settings.host_command_timeout)

    # Per-service health lives on /ai-team/status; the panel only shows the roster size
    return {
        "success": True,
        "status": {
            "name": settings.droplet_name,
            "ip": settings.droplet_ip,
            "cpu": metrics.cpu,
            "memory": metrics.memory,
            "disk": metrics.disk,
            "uptime": metrics.uptime,
            "servicesOnline": len(WORKERS),
            "servicesDegraded": 0,
            "servicesOffline": 0,
        },
    }

"""Process control proxy for AI team workers."""

import logging
from typing import Any

import httpx

from opsboard.config.workers import get_worker
from opsboard.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

VALID_ACTIONS: tuple[str, ...] = ("start", "stop", "restart")


class WorkerControlError(Exception):
    """The droplet refused or never answered a control command."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


async def send_control(
    client: httpx.AsyncClient,
    control_base_url: str,
    worker_id: str | None,
    action: str | None,
    timeout: float,
) -> dict[str, Any]:
    """Ask the droplet's process manager to start, stop or restart a worker.

    Raises:
        ValidationError: missing fields, unknown action or unknown worker
        WorkerControlError: droplet unreachable or command rejected
    """
    if not worker_id or not action:
        raise ValidationError("workerId and action required")
    if action not in VALID_ACTIONS:
        raise ValidationError(f"Invalid action. Use: {', '.join(VALID_ACTIONS)}")

    worker = get_worker(worker_id)
    if worker is None:
        raise ValidationError(f"Unknown worker: {worker_id}")

    url = f"{control_base_url}/api/pm2/{action}"
    try:
        response = await client.post(url, json={"name": worker.pm2_name}, timeout=timeout)
    except httpx.HTTPError as e:
        logger.error(f"Control {action} {worker.pm2_name} failed: {e!r}")
        raise WorkerControlError("Control command failed - droplet may be unreachable") from e

    if not response.is_success:
        raise WorkerControlError(
            f"Failed to {action} {worker.pm2_name}: {response.text}",
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}

    logger.info(f"Control {action} {worker.pm2_name} ok")
    return {"message": f"{action} {worker.pm2_name} successful", **data}

"""Worker health fan-out.

Every worker is probed concurrently with its own timeout, so one hung
worker delays the aggregate by at most that timeout. A probe never raises:
failures become an ``offline`` or ``error`` entry for that worker.
"""

import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import httpx

from opsboard.config.workers import WorkerConfig

logger = logging.getLogger(__name__)

ONLINE = "online"
OFFLINE = "offline"
ERROR = "error"


@dataclass(frozen=True)
class WorkerStatus:
    id: str
    status: str
    response_time: int | None = None
    uptime: float | None = None
    cpu: float | None = None
    memory: float | None = None
    last_heartbeat: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Dashboard shape: camelCase keys, unset fields omitted."""
        data = {
            "id": self.id,
            "status": self.status,
            "responseTime": self.response_time,
            "uptime": self.uptime,
            "cpu": self.cpu,
            "memory": self.memory,
            "lastHeartbeat": self.last_heartbeat,
        }
        return {k: v for k, v in data.items() if v is not None}


async def check_worker_health(
    client: httpx.AsyncClient,
    base_url: str,
    worker: WorkerConfig,
    timeout: float,
) -> WorkerStatus:
    """Probe one worker's health endpoint."""
    url = f"{base_url}:{worker.port}{worker.health_path}"
    started = time.monotonic()

    try:
        async with asyncio.timeout(timeout):
            response = await client.get(url, timeout=timeout)
    except (httpx.HTTPError, TimeoutError) as e:
        logger.debug(f"Worker {worker.id} unreachable: {e!r}")
        return WorkerStatus(id=worker.id, status=OFFLINE)

    response_time = int((time.monotonic() - started) * 1000)

    if not response.is_success:
        logger.info(f"Worker {worker.id} health returned {response.status_code}")
        return WorkerStatus(id=worker.id, status=ERROR, response_time=response_time)

    try:
        data = response.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}

    return WorkerStatus(
        id=worker.id,
        status=ONLINE,
        response_time=response_time,
        uptime=data.get("uptime"),
        cpu=data.get("cpu"),
        memory=data.get("memory"),
        last_heartbeat=datetime.now(UTC).isoformat(),
    )


async def check_all_workers(
    client: httpx.AsyncClient,
    base_url: str,
    workers: Sequence[WorkerConfig],
    timeout: float,
) -> list[WorkerStatus]:
    """Probe all workers concurrently; results follow roster order."""
    tasks = [check_worker_health(client, base_url, worker, timeout) for worker in workers]
    return list(await asyncio.gather(*tasks))

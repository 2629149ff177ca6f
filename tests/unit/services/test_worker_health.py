"""Unit tests for the worker health fan-out."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from opsboard.config.workers import WORKERS, WorkerConfig
from opsboard.services.workers.health import WorkerStatus, check_all_workers, check_worker_health

BASE_URL = "http://droplet"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestCheckWorkerHealth:
    """Tests for a single probe."""

    @pytest.mark.asyncio
    async def test_online_with_reported_metrics(self):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={"uptime": 3600, "cpu": 12.5, "memory": 256})

        worker = WorkerConfig(id="chad", pm2_name="chad-5401", port=5401)
        async with _client(handler) as client:
            status = await check_worker_health(client, BASE_URL, worker, timeout=3)

        assert seen == ["http://droplet:5401/health"]
        assert status.status == "online"
        assert status.uptime == 3600
        assert status.cpu == 12.5
        assert status.response_time is not None
        assert status.last_heartbeat is not None

    @pytest.mark.asyncio
    async def test_non_2xx_is_error(self):
        worker = WORKERS[0]
        async with _client(lambda _req: httpx.Response(503)) as client:
            status = await check_worker_health(client, BASE_URL, worker, timeout=3)

        assert status.status == "error"
        assert status.uptime is None

    @pytest.mark.asyncio
    async def test_connection_failure_is_offline(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as client:
            status = await check_worker_health(client, BASE_URL, WORKERS[0], timeout=3)

        assert status == WorkerStatus(id=WORKERS[0].id, status="offline")

    @pytest.mark.asyncio
    async def test_non_json_body_still_online(self):
        async with _client(lambda _req: httpx.Response(200, text="ok")) as client:
            status = await check_worker_health(client, BASE_URL, WORKERS[0], timeout=3)

        assert status.status == "online"
        assert status.cpu is None

    @pytest.mark.asyncio
    async def test_hung_worker_times_out_offline(self):
        async def handler(_request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json={})

        async with _client(handler) as client:
            status = await check_worker_health(client, BASE_URL, WORKERS[0], timeout=0.05)

        assert status.status == "offline"


class TestCheckAllWorkers:
    """Tests for the concurrent fan-out."""

    @pytest.mark.asyncio
    async def test_one_entry_per_worker_in_roster_order(self):
        slow_port = WORKERS[2].port

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.port == slow_port:
                await asyncio.sleep(5)
            if request.url.port == WORKERS[4].port:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json={"uptime": 1})

        async with _client(handler) as client:
            statuses = await check_all_workers(client, BASE_URL, WORKERS, timeout=0.1)

        assert [s.id for s in statuses] == [w.id for w in WORKERS]
        assert statuses[2].status == "offline"
        assert statuses[4].status == "offline"
        assert statuses[0].status == "online"

    @pytest.mark.asyncio
    async def test_probes_run_concurrently(self):
        async def handler(_request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0.2)
            return httpx.Response(200, json={})

        loop = asyncio.get_running_loop()
        async with _client(handler) as client:
            started = loop.time()
            await check_all_workers(client, BASE_URL, WORKERS, timeout=3)
            elapsed = loop.time() - started

        assert elapsed < 0.2 * len(WORKERS) / 2


class TestWorkerStatusToDict:
    def test_camel_case_and_omits_unset(self):
        status = WorkerStatus(id="chad", status="online", response_time=12, uptime=5.0)
        assert status.to_dict() == {
            "id": "chad",
            "status": "online",
            "responseTime": 12,
            "uptime": 5.0,
        }

"""Unit tests for the worker roster."""

from opsboard.config.workers import WORKERS, WorkerConfig, get_worker


class TestWorkerRoster:
    def test_ids_are_unique(self):
        ids = [w.id for w in WORKERS]
        assert len(ids) == len(set(ids))

    def test_ports_are_unique(self):
        ports = [w.port for w in WORKERS]
        assert len(ports) == len(set(ports))

    def test_health_path(self):
        assert WORKERS[0].health_path == "/health"


class TestGetWorker:
    def test_known_worker(self):
        worker = get_worker("chad")
        assert worker == WorkerConfig(id="chad", pm2_name="chad-5401", port=5401)

    def test_unknown_worker(self):
        assert get_worker("nobody") is None

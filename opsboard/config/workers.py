"""Worker roster - the AI team processes running on the droplet."""

from dataclasses import dataclass


@dataclass(frozen=True)
class WorkerConfig:
    """A named worker process reachable on the droplet."""

    id: str
    pm2_name: str
    port: int

    @property
    def health_path(self) -> str:
        return "/health"


# Roster order is the order status responses are returned in
WORKERS: tuple[WorkerConfig, ...] = (
    WorkerConfig(id="chad", pm2_name="chad-5401", port=5401),
    WorkerConfig(id="jen", pm2_name="jen-5402", port=5402),
    WorkerConfig(id="susan", pm2_name="susan-5403", port=5403),
    WorkerConfig(id="clair", pm2_name="clair-5404", port=5404),
    WorkerConfig(id="mike", pm2_name="mike-5405", port=5405),
    WorkerConfig(id="tiffany", pm2_name="tiffany-5406", port=5406),
    WorkerConfig(id="ryan", pm2_name="ryan-5407", port=5407),
    WorkerConfig(id="terminal", pm2_name="terminal-server-5400", port=5400),
    WorkerConfig(id="dashboard", pm2_name="kodiack-dashboard-5500", port=5500),
)

_WORKERS_BY_ID: dict[str, WorkerConfig] = {w.id: w for w in WORKERS}


def get_worker(worker_id: str) -> WorkerConfig | None:
    """Look up a worker by its short id."""
    return _WORKERS_BY_ID.get(worker_id)

from opsboard.services.workers.control import VALID_ACTIONS, WorkerControlError, send_control
from opsboard.services.workers.health import WorkerStatus, check_all_workers, check_worker_health
from opsboard.services.workers.usage import empty_usage, fetch_usage

__all__ = [
    "VALID_ACTIONS",
    "WorkerControlError",
    "send_control",
    "WorkerStatus",
    "check_all_workers",
    "check_worker_health",
    "empty_usage",
    "fetch_usage",
]

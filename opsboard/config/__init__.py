"""Configuration package."""

from opsboard.config.settings import Settings, settings
from opsboard.config.workers import WORKERS, WorkerConfig, get_worker

__all__ = [
    "Settings",
    "settings",
    "WorkerConfig",
    "WORKERS",
    "get_worker",
]

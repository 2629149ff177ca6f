"""Droplet OS metrics from standard utilities.

Readings that cannot be taken stay at their zero defaults; the operations
panel shows zeros instead of an error.
"""

import logging
from dataclasses import dataclass

from opsboard.core.shell import CommandError, run_command

logger = logging.getLogger(__name__)

UNKNOWN_UPTIME = "—"


@dataclass
class HostMetrics:
    cpu: float = 0.0
    memory: float = 0.0
    disk: float = 0.0
    uptime: str = UNKNOWN_UPTIME


def parse_load_percent(loadavg: str, nproc: str) -> float:
    """1-minute load average as a percentage of available cores."""
    load = float(loadavg.split()[0])
    cores = int(nproc.strip() or 0) or 1
    return load / cores * 100


def parse_memory_percent(free_output: str) -> float:
    """Used/total of the ``Mem:`` row of ``free``."""
    for line in free_output.splitlines():
        if line.startswith("Mem:"):
            parts = line.split()
            total, used = float(parts[1]), float(parts[2])
            return used / total * 100 if total else 0.0
    return 0.0


def parse_disk_percent(df_output: str) -> float:
    """Capacity of the single filesystem in ``df -P`` output.

    Fields are read across all data lines, so a device name wrapped onto its
    own line by non-POSIX ``df`` still parses.
    """
    rows = [line for line in df_output.splitlines() if line.strip()]
    fields = " ".join(rows[1:]).split()
    use = next((field for field in fields if field.endswith("%")), None)
    if use is None:
        return 0.0
    return float(use.rstrip("%") or 0)


def parse_uptime(uptime_output: str) -> str:
    text = uptime_output.strip()
    return text.removeprefix("up ") or UNKNOWN_UPTIME


async def collect_host_metrics(timeout: float) -> HostMetrics:
    """Read CPU, memory, disk and uptime; stop at the first failing reading."""
    metrics = HostMetrics()
    try:
        loadavg = await run_command("cat", "/proc/loadavg", timeout=timeout)
        nproc = await run_command("nproc", timeout=timeout)
        metrics.cpu = parse_load_percent(loadavg, nproc)

        metrics.memory = parse_memory_percent(await run_command("free", timeout=timeout))
        metrics.disk = parse_disk_percent(await run_command("df", "-P", "/", timeout=timeout))
        metrics.uptime = parse_uptime(await run_command("uptime", "-p", timeout=timeout))
    except (CommandError, ValueError, IndexError) as e:
        logger.error(f"Failed to get system stats: {e}")
    return metrics

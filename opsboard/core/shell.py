"""Bounded subprocess execution.

Commands are run with an argument vector (never through a shell) and are
killed when they exceed their timeout.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """A subprocess failed to start, exited non-zero, or timed out."""

    def __init__(self, message: str, returncode: int | None = None):
        self.message = message
        self.returncode = returncode
        super().__init__(message)


async def run_command(*argv: str, timeout: float) -> str:
    """Run a command and return its stdout.

    Raises:
        CommandError: on spawn failure, non-zero exit, or timeout
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise CommandError(f"Failed to start {argv[0]}: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError:
        process.kill()
        await process.wait()
        raise CommandError(f"{argv[0]} timed out after {timeout}s") from None

    if process.returncode != 0:
        detail = stderr.decode("utf-8", errors="replace").strip()
        raise CommandError(
            detail or f"{argv[0]} exited with status {process.returncode}",
            returncode=process.returncode,
        )

    return stdout.decode("utf-8", errors="replace")

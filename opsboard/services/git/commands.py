from opsboard.core.shell import CommandError, run_command
from opsboard.services.git.exceptions import GitCommandError


async def run_git(repo_path: str, *args: str, timeout: float) -> str:
    """Run a read-only git command inside ``repo_path``."""
    try:
        return await run_command("git", "-C", repo_path, *args, timeout=timeout)
    except CommandError as e:
        raise GitCommandError(e.message, returncode=e.returncode) from e

"""Working tree status of a server-side checkout."""

from opsboard.services.git.commands import run_git
from opsboard.services.git.types import WorkingTreeFile

# First matching code wins, so "MD" reads as modified
CHANGE_TYPES = (
    ("M", "modified"),
    ("A", "added"),
    ("D", "deleted"),
    ("R", "renamed"),
    ("?", "untracked"),
    ("!", "ignored"),
)


def change_type(code: str) -> str:
    for marker, name in CHANGE_TYPES:
        if marker in code:
            return name
    return "unknown"


def parse_porcelain(output: str) -> list[WorkingTreeFile]:
    """Parse ``git status --porcelain`` (v1) output.

    Each line is a two-character status code, a space, then the path. Renames
    keep git's ``old -> new`` form in ``file``.
    """
    files: list[WorkingTreeFile] = []
    for line in output.split("\n"):
        if not line.strip():
            continue
        code = line[:2]
        files.append(WorkingTreeFile(status=code.strip(), file=line[3:], type=change_type(code)))
    return files


async def get_working_tree_status(repo_path: str, timeout: float) -> list[WorkingTreeFile]:
    """Uncommitted and untracked files in ``repo_path``."""
    output = await run_git(repo_path, "status", "--porcelain", timeout=timeout)
    return parse_porcelain(output)

"""Read-only git access to server-side working trees."""

from opsboard.services.git.commands import run_git
from opsboard.services.git.commits import (
    SHA_PATTERN,
    get_commit_detail,
    get_commit_log,
    validate_sha,
)
from opsboard.services.git.exceptions import GitCommandError
from opsboard.services.git.paths import check_repo_path, is_under_root
from opsboard.services.git.status import get_working_tree_status, parse_porcelain
from opsboard.services.git.types import (
    CommitAuthor,
    CommitRecord,
    CommitSummary,
    WorkingTreeFile,
)

__all__ = [
    "run_git",
    "SHA_PATTERN",
    "get_commit_detail",
    "get_commit_log",
    "validate_sha",
    "GitCommandError",
    "check_repo_path",
    "is_under_root",
    "get_working_tree_status",
    "parse_porcelain",
    "CommitAuthor",
    "CommitRecord",
    "CommitSummary",
    "WorkingTreeFile",
]

"""Commit lookups against a server-side working tree."""

import logging
import re

from opsboard.core.exceptions import NotFoundError, ValidationError
from opsboard.services.git.commands import run_git
from opsboard.services.git.exceptions import GitCommandError
from opsboard.services.git.types import CommitAuthor, CommitRecord, CommitSummary

logger = logging.getLogger(__name__)

SHA_PATTERN = re.compile(r"^[a-f0-9]{6,40}$")

# Fields are separated by ASCII unit separators so subjects may contain anything
FIELD_SEP = "\x1f"
COMMIT_META_FORMAT = "%H%x1f%h%x1f%an%x1f%ae%x1f%ad%x1f%s"
LOG_FORMAT = "%H%x1f%h%x1f%an%x1f%ad%x1f%s"


def validate_sha(sha: str | None) -> str:
    """Reject anything that is not 6-40 lowercase hex characters."""
    if not sha or not SHA_PATTERN.fullmatch(sha):
        raise ValidationError("Invalid SHA format")
    return sha


async def get_commit_detail(repo_path: str, sha: str, timeout: float) -> CommitRecord:
    """Message, metadata and file stat of one commit.

    A failing message lookup means the commit does not exist. A failing stat
    lookup leaves the stat empty rather than failing the request.
    """
    validate_sha(sha)

    try:
        full_message = (await run_git(repo_path, "show", "-s", "--format=%B", sha, timeout=timeout)).strip()
    except GitCommandError as e:
        logger.info(f"Commit {sha} not found in {repo_path}: {e.message}")
        raise NotFoundError("Commit") from e

    meta_raw = (
        await run_git(
            repo_path,
            "show",
            "-s",
            f"--format={COMMIT_META_FORMAT}",
            "--date=iso",
            sha,
            timeout=timeout,
        )
    ).strip()
    fields = meta_raw.split(FIELD_SEP, 5)
    fields += [""] * (6 - len(fields))
    full_sha, short_sha, author_name, author_email, date, subject = fields

    try:
        stat = (await run_git(repo_path, "show", "--stat", "--format=", sha, timeout=timeout)).strip()
    except GitCommandError as e:
        logger.warning(f"git stat failed for {sha} in {repo_path}: {e.message}")
        stat = ""

    lines = full_message.split("\n")
    body = "\n".join(lines[1:]).strip()

    return CommitRecord(
        sha=full_sha,
        sha_short=short_sha,
        subject=subject,
        body=body,
        full_message=full_message,
        author=CommitAuthor(name=author_name, email=author_email),
        date=date,
        stat=stat,
    )


async def get_commit_log(repo_path: str, limit: int, timeout: float) -> list[CommitSummary]:
    """The newest ``limit`` commits of the checked-out branch."""
    output = await run_git(
        repo_path,
        "log",
        "-n",
        str(limit),
        "--date=iso",
        f"--pretty=format:{LOG_FORMAT}",
        timeout=timeout,
    )

    commits: list[CommitSummary] = []
    for line in output.split("\n"):
        if not line.strip():
            continue
        fields = line.split(FIELD_SEP, 4)
        fields += [""] * (5 - len(fields))
        sha, sha_short, author, date, message = fields
        commits.append(
            CommitSummary(sha=sha, sha_short=sha_short, author=author, date=date, message=message)
        )
    return commits

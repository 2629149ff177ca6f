from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class CommitAuthor:
    name: str
    email: str


@dataclass(frozen=True)
class CommitRecord:
    """Full detail of one commit."""

    sha: str
    sha_short: str
    subject: str
    body: str
    full_message: str
    author: CommitAuthor
    date: str
    stat: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CommitSummary:
    """One line of ``git log``."""

    sha: str
    sha_short: str
    author: str
    date: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class WorkingTreeFile:
    """One entry of ``git status --porcelain``."""

    status: str
    file: str
    type: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import BigInteger, Column, DateTime, Identity, String, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

# Reporter event types
GIT_STATUS = "git_status"
PC_GIT_STATUS = "pc_git_status"
GIT_COMMIT = "git_commit"
PC_GIT_COMMIT = "pc_git_commit"

REPO_STATUS_EVENT_TYPES: tuple[str, ...] = (GIT_STATUS, PC_GIT_STATUS)
REPO_HISTORY_EVENT_TYPES: tuple[str, ...] = (GIT_COMMIT, PC_GIT_COMMIT, GIT_STATUS, PC_GIT_STATUS)


class OpsEvent(SQLModel, table=True):
    """Append-only observation emitted by a reporter.

    Rows are written by the external sensors; this service only reads them.
    The identity ``id`` is strictly increasing and breaks ties between rows
    that share a timestamp.
    """

    __tablename__ = "ops_events"
    __table_args__ = {"schema": "ops"}

    id: int | None = Field(
        default=None,
        sa_column=Column(BigInteger, Identity(always=False), primary_key=True),
    )
    service_id: str = Field(sa_column=Column(String(100), nullable=False, index=True))
    event_type: str = Field(sa_column=Column(String(50), nullable=False, index=True))
    # "metadata" is reserved on declarative classes, so the attribute is renamed
    event_metadata: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column("metadata", JSONB, nullable=False, server_default=text("'{}'::jsonb")),
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(
            DateTime(timezone=True), nullable=False, index=True, server_default=text("now()")
        ),
    )

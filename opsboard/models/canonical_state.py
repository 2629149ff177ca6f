from datetime import datetime
from typing import Any

from sqlalchemy import Column, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel


class CanonicalState(SQLModel, table=True):
    """Reconciled state per node or repo, maintained by the upstream canonizer."""

    __tablename__ = "canonical_state"
    __table_args__ = {"schema": "ops"}

    type: str = Field(sa_column=Column(String(20), primary_key=True))
    id: str = Field(sa_column=Column(String(255), primary_key=True))
    node_id: str | None = Field(default=None, max_length=100, index=True)
    current_state: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSONB))
    drift_status: str | None = Field(default=None, max_length=20)
    drift_reasons: list[str] = Field(default_factory=list, sa_column=Column(JSONB))
    node_sensor_last_seen: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )
    origin_tracker_last_seen: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )
    updated_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))

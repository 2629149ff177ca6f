"""Read-side operations over the reporter event log.

The event log is owned by the reporters; nothing here writes to it.
"""

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from opsboard.models.ops_event import OpsEvent


class EventOperations:
    """Queries over ops.ops_events."""

    def __init__(self) -> None:
        self.model = OpsEvent

    async def latest_per_service(
        self,
        db: AsyncSession,
        event_types: Sequence[str],
        since: datetime,
    ) -> list[OpsEvent]:
        """Most recent matching event of every service since ``since``.

        Equivalent to ``ROW_NUMBER() OVER (PARTITION BY service_id ORDER BY
        timestamp DESC, id DESC) = 1``; the id breaks timestamp ties.
        """
        rn = (
            func.row_number()
            .over(
                partition_by=OpsEvent.service_id,
                order_by=(OpsEvent.timestamp.desc(), OpsEvent.id.desc()),  # type: ignore[union-attr]
            )
            .label("rn")
        )
        ranked = (
            select(OpsEvent.id.label("event_id"), rn)  # type: ignore[union-attr]
            .where(
                OpsEvent.event_type.in_(event_types),  # type: ignore[attr-defined]
                OpsEvent.timestamp > since,  # type: ignore[operator]
            )
            .subquery()
        )
        statement = (
            select(OpsEvent)
            .join(ranked, OpsEvent.id == ranked.c.event_id)
            .where(ranked.c.rn == 1)
            .order_by(OpsEvent.service_id)
        )
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def latest_for_service(
        self,
        db: AsyncSession,
        service_id: str,
        event_type: str,
    ) -> OpsEvent | None:
        """Most recent event of one type from one service."""
        statement = (
            select(OpsEvent)
            .where(
                OpsEvent.service_id == service_id,
                OpsEvent.event_type == event_type,
            )
            .order_by(OpsEvent.timestamp.desc(), OpsEvent.id.desc())  # type: ignore[union-attr]
            .limit(1)
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def list_recent(
        self,
        db: AsyncSession,
        event_types: Sequence[str],
        limit: int = 500,
    ) -> list[OpsEvent]:
        """Newest-first events of the given types."""
        statement = (
            select(OpsEvent)
            .where(OpsEvent.event_type.in_(event_types))  # type: ignore[attr-defined]
            .order_by(OpsEvent.timestamp.desc(), OpsEvent.id.desc())  # type: ignore[union-attr]
            .limit(limit)
        )
        result = await db.execute(statement)
        return list(result.scalars().all())


event_ops = EventOperations()

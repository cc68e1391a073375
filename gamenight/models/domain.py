"""Database models for Gamenight.

Pick state itself lives in Redis. PostgreSQL keeps the audit trail: one row
per scheduled task run and one row per pick transition that changed or locked
a pick.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from gamenight.models.base import Base


class PickTransition(Base):
    """
    Audit row for a pick state transition.

    Only transitions that matter for review are stored: NEW_PICK,
    REEVALUATED, LOCKED and OVERRIDDEN.
    """

    __tablename__ = "pick_transitions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    category: Mapped[str] = mapped_column(String(10), nullable=False)
    pick_date: Mapped[str] = mapped_column(String(10), nullable=False)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    previous_event_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    event_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    reason: Mapped[str | None] = mapped_column(String(50), nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tier: Mapped[str | None] = mapped_column(String(10), nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("idx_pick_transitions_category_date", "category", "pick_date"),
    )

    def __repr__(self) -> str:
        return f"<PickTransition {self.category} {self.kind} {self.event_id}>"


class JobRun(Base):
    """
    Task execution audit log.

    Every scheduled refresh run is logged here for:
    1. Monitoring and alerting
    2. Debugging failures
    """

    __tablename__ = "job_runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    job_name: Mapped[str] = mapped_column(String(100), nullable=False)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, doc="'running', 'success', 'failed'"
    )
    records_processed: Mapped[int] = mapped_column(Integer, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    job_metadata: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata", JSONB, nullable=True
    )

    def __repr__(self) -> str:
        return f"<JobRun {self.job_name} status={self.status}>"

"""logs table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class Log(Base):
    """One stored logs.tf log. The id is the logs.tf id, so a log is stored at most once."""

    __tablename__ = "logs"
    __table_args__ = (
        CheckConstraint("player_count >= 0", name="ck_logs_player_count"),
        CheckConstraint("duration_secs >= 0", name="ck_logs_duration_secs"),
        Index("idx_logs_played_at", "played_at"),
    )

    log_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    played_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    map_name: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str | None] = mapped_column(String(256), nullable=True)
    player_count: Mapped[int] = mapped_column(Integer, nullable=False)
    duration_secs: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )

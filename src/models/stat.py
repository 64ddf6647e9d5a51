"""stats table model."""

from __future__ import annotations

from sqlalchemy import BigInteger, CheckConstraint, Enum, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class Stat(Base):
    """One performance of one player in one log.

    Columns that do not apply to a row's kind are NULL: overall rows have no
    class, class rows carry no healing, medic rows no damage.
    """

    __tablename__ = "stats"
    __table_args__ = (
        CheckConstraint(
            "(kind = 'overall' AND player_class IS NULL) OR (kind <> 'overall' AND player_class IS NOT NULL)",
            name="ck_stats_kind_class",
        ),
        CheckConstraint("won_rounds <= num_rounds", name="ck_stats_rounds"),
        Index("idx_stats_player_class", "steam_id", "player_class", "kind"),
        Index("idx_stats_log", "log_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    log_id: Mapped[int] = mapped_column(ForeignKey("logs.log_id", ondelete="CASCADE"), nullable=False)
    steam_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    kind: Mapped[str] = mapped_column(
        Enum("overall", "class", "medic", name="performance_kind", native_enum=False),
        nullable=False,
    )
    player_class: Mapped[str | None] = mapped_column(String(16), nullable=True)

    won_rounds: Mapped[int] = mapped_column(Integer, nullable=False)
    num_rounds: Mapped[int] = mapped_column(Integer, nullable=False)
    damage_taken: Mapped[int] = mapped_column(Integer, nullable=False)

    damage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    kills: Mapped[int | None] = mapped_column(Integer, nullable=True)
    assists: Mapped[int | None] = mapped_column(Integer, nullable=True)
    deaths: Mapped[int | None] = mapped_column(Integer, nullable=True)
    medkits: Mapped[int | None] = mapped_column(Integer, nullable=True)
    medkits_hp: Mapped[int | None] = mapped_column(Integer, nullable=True)
    healing: Mapped[int | None] = mapped_column(Integer, nullable=True)
    average_uber_length_secs: Mapped[float | None] = mapped_column(Float, nullable=True)
    num_ubers: Mapped[int | None] = mapped_column(Integer, nullable=True)
    num_drops: Mapped[int | None] = mapped_column(Integer, nullable=True)
    time_played_secs: Mapped[int | None] = mapped_column(Integer, nullable=True)

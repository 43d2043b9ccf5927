"""
League tier configuration.
"""

import uuid
from typing import Optional

from sqlalchemy import CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from featherlearn.kernel.models.base import Base, TimestampMixin, generate_uuid


class LeagueTier(Base, TimestampMixin):
    """
    One rung of the league ladder.

    Covers league points in [min_points, max_points); max_points is NULL for
    the open-ended top tier.
    """

    __tablename__ = "league_tiers"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    level: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    min_points: Mapped[int] = mapped_column(Integer, nullable=False)
    max_points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    weekly_xp_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    weekly_feather_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    promotion_xp_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    promotion_feather_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("min_points >= 0", name="ck_league_tiers_min_non_negative"),
        CheckConstraint(
            "max_points IS NULL OR max_points > min_points",
            name="ck_league_tiers_range_ordered",
        ),
    )

    def __repr__(self) -> str:
        return f"<LeagueTier {self.name} [{self.min_points}, {self.max_points})>"

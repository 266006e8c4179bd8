"""
CritterTrack Backend — Litter SQLAlchemy Model
==============================================

What:  ORM model representing the `litters` table.

parent_ids is a JSON array of animal ids. Like animals.father_id it is
advisory: the store does not check that the referenced animals exist or
belong to the same user.
"""

import uuid
from datetime import date
from typing import List

from sqlalchemy import JSON, CheckConstraint, Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from crittertrack.database import Base


class Litter(Base):
    """A litter record owned by a single user."""

    __tablename__ = "litters"

    sequential_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    id: Mapped[str] = mapped_column(
        String(128),
        unique=True,
        nullable=False,
        default=lambda: str(uuid.uuid4()),
    )

    user_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(1024), nullable=False)
    birth_date: Mapped[date] = mapped_column(Date, nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    parent_ids: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (
        Index("idx_litters_user_id", "user_id"),
        CheckConstraint("count >= 0", name="ck_litters_count_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Litter(id={self.id}, name='{self.name}', user_id={self.user_id})>"

"""
CritterTrack Backend — Animal SQLAlchemy Model
==============================================

What:  ORM model representing the `animals` table.
Who:   Used by SqlCredentialStore and by Alembic for schema management.

Table Design Rationale:
    - user_id: foreign key to users.id with ON DELETE CASCADE. An animal
      belongs to exactly one user.
    - father_id / mother_id: plain strings, deliberately NOT foreign keys.
      Parents may be animals that were deleted, belong to another breeder,
      or were never entered; a dangling reference is valid data.
    - show_*: five independent flags controlling what a public profile
      shows. show_on_profile gates the animal as a whole.

Query Patterns:
    - Owner list:  WHERE user_id = :owner [AND lower(species) LIKE :term]
    - Owner get:   WHERE id = :id AND user_id = :owner
    - Public list: WHERE user_id = :owner AND show_on_profile
      → all served by idx_animals_user_id
"""

import uuid
from datetime import date

from sqlalchemy import Boolean, Date, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from crittertrack.database import Base


class Animal(Base):
    """An animal record owned by a single user."""

    __tablename__ = "animals"

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
        comment="Owning user; every authenticated query filters on this",
    )

    # ── Details ───────────────────────────────────────────────────────────
    name: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    species: Mapped[str] = mapped_column(String(1024), nullable=False)
    breeder: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(16), nullable=True)
    color_variety: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    coat_variety: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    registry_code: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    owner: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    remarks: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    genetics_code: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    # ── Pedigree (advisory, not enforced) ─────────────────────────────────
    father_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    mother_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    # ── Public profile visibility ─────────────────────────────────────────
    show_on_profile: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    show_registry_code: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    show_owner: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    show_remarks: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    show_parents: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    __table_args__ = (
        Index("idx_animals_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Animal(id={self.id}, species='{self.species}', user_id={self.user_id})>"

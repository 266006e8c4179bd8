"""
CritterTrack Backend — User SQLAlchemy Model
============================================

What:  ORM model representing the `users` table.
Who:   Used by SqlCredentialStore and by Alembic for schema management.

Table Design:
    - sequential_id: integer autoincrement primary key. Assigned by the
      database at insert time, so it is monotonically increasing and is
      used for stable ordering and display ("breeder #42").
    - id: opaque UUID string, unique. This is the identity carried in
      tokens and referenced by animals.user_id / litters.user_id.
    - email: unique, stored trimmed and lower-cased.
    - password_hash: bcrypt hash; plaintext never reaches this layer.
"""

import uuid

from sqlalchemy import Boolean, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from crittertrack.database import Base


class User(Base):
    """
    A registered account, optionally presented publicly as a breeder.

    Lifecycle:
        1. Created on registration
        2. Mutated only through profile update
        3. Never deleted in scope (deleting would cascade to animals/litters)
    """

    __tablename__ = "users"

    sequential_id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Monotonically increasing number assigned at creation",
    )

    id: Mapped[str] = mapped_column(
        String(128),
        unique=True,
        nullable=False,
        default=lambda: str(uuid.uuid4()),
        comment="Opaque user identifier (UUID string) carried in tokens",
    )

    # Unique index is the storage-level guard against duplicate registration
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        comment="Login email, trimmed and lower-cased",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the password",
    )

    personal_name: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    breeder_name: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    profile_picture_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    is_breeder_profile: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, sequential_id={self.sequential_id})>"

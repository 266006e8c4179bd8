"""Create users, animals and litters tables

Revision ID: 001
Revises: None
Create Date: 2025-03-01 00:00:00.000000+00:00

What:  Initial schema. Mirrors crittertrack/models/*.py.
How:   Each table has an integer `sequential_id` primary key (creation
       order) and a unique string `id` (UUID) that the API exposes.
       animals/litters reference users.id with ON DELETE CASCADE.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _flag(name: str) -> sa.Column:
    return sa.Column(name, sa.Boolean(), nullable=False, server_default=sa.text("false"))


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("sequential_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("id", sa.String(length=128), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("personal_name", sa.String(length=1024), nullable=True),
        sa.Column("breeder_name", sa.String(length=1024), nullable=True),
        sa.Column("profile_picture_url", sa.String(length=2048), nullable=True),
        _flag("is_breeder_profile"),
        sa.PrimaryKeyConstraint("sequential_id", name="pk_users"),
        sa.UniqueConstraint("id", name="uq_users_id"),
        # Backs the registration race: the loser's INSERT fails here
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "animals",
        sa.Column("sequential_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("id", sa.String(length=128), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("name", sa.String(length=1024), nullable=True),
        sa.Column("species", sa.String(length=1024), nullable=False),
        sa.Column("breeder", sa.String(length=1024), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(length=16), nullable=True),
        sa.Column("color_variety", sa.String(length=1024), nullable=True),
        sa.Column("coat_variety", sa.String(length=1024), nullable=True),
        sa.Column("registry_code", sa.String(length=1024), nullable=True),
        sa.Column("owner", sa.String(length=1024), nullable=True),
        sa.Column("remarks", sa.String(length=2048), nullable=True),
        sa.Column("genetics_code", sa.String(length=1024), nullable=True),
        # Pedigree links are advisory: no foreign key
        sa.Column("father_id", sa.String(length=128), nullable=True),
        sa.Column("mother_id", sa.String(length=128), nullable=True),
        _flag("show_on_profile"),
        _flag("show_registry_code"),
        _flag("show_owner"),
        _flag("show_remarks"),
        _flag("show_parents"),
        sa.PrimaryKeyConstraint("sequential_id", name="pk_animals"),
        sa.UniqueConstraint("id", name="uq_animals_id"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_animals_user_id", ondelete="CASCADE"
        ),
    )
    op.create_index("idx_animals_user_id", "animals", ["user_id"])

    op.create_table(
        "litters",
        sa.Column("sequential_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("id", sa.String(length=128), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("name", sa.String(length=1024), nullable=False),
        sa.Column("birth_date", sa.Date(), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("parent_ids", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("sequential_id", name="pk_litters"),
        sa.UniqueConstraint("id", name="uq_litters_id"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_litters_user_id", ondelete="CASCADE"
        ),
        sa.CheckConstraint("count >= 0", name="ck_litters_count_non_negative"),
    )
    op.create_index("idx_litters_user_id", "litters", ["user_id"])


def downgrade() -> None:
    op.drop_index("idx_litters_user_id", table_name="litters")
    op.drop_table("litters")
    op.drop_index("idx_animals_user_id", table_name="animals")
    op.drop_table("animals")
    op.drop_table("users")

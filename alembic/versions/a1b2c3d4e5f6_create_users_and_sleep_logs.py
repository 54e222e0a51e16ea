"""Create users and sleep_logs tables.

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create users and sleep_logs."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "sleep_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            comment="Owner of the record (users.id)",
        ),
        sa.Column("sleep_date", sa.Date(), nullable=False),
        sa.Column("sleep_score", sa.Float(), nullable=False),
        sa.Column("bed_time", sa.String(5), nullable=False),
        sa.Column("wakeup_time", sa.String(5), nullable=False),
        sa.Column("sleep_duration", sa.Integer(), nullable=False),
        sa.Column("wakeup_count", sa.Integer(), nullable=False),
        sa.Column("deep_sleep_continuity", sa.Float(), nullable=False),
        sa.Column("deep_sleep_percentage", sa.Float(), nullable=False),
        sa.Column("light_sleep_percentage", sa.Float(), nullable=False),
        sa.Column("rem_sleep_percentage", sa.Float(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("user_id", "sleep_date", name="uq_sleep_logs_user_date"),
        comment="Nightly sleep metrics entered manually or imported from CSV",
    )
    op.create_index("ix_sleep_logs_user_id", "sleep_logs", ["user_id"])
    op.create_index("ix_sleep_logs_sleep_date", "sleep_logs", ["sleep_date"])


def downgrade() -> None:
    """Drop sleep_logs and users."""
    op.drop_index("ix_sleep_logs_sleep_date", table_name="sleep_logs")
    op.drop_index("ix_sleep_logs_user_id", table_name="sleep_logs")
    op.drop_table("sleep_logs")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")

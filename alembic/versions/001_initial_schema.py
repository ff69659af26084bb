"""Initial identity schema.

Revision ID: 001
Revises:
Create Date: 2025-01-01 00:00:00.000000
"""

import sqlalchemy as sa

from alembic import op

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Users
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("user_name", sa.String(256), nullable=False),
        sa.Column("normalized_user_name", sa.String(256), nullable=False),
        sa.Column("email", sa.String(256), nullable=False),
        sa.Column("normalized_email", sa.String(256), nullable=False),
        sa.Column("email_confirmed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("security_stamp", sa.String(64), nullable=False),
        sa.Column("otp_secret", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index("ix_users_normalized_user_name", "users", ["normalized_user_name"], unique=True)
    op.create_index("ix_users_normalized_email", "users", ["normalized_email"], unique=True)

    # Roles
    op.create_table(
        "roles",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("normalized_name", sa.String(256), nullable=False),
    )
    op.create_index("ix_roles_normalized_name", "roles", ["normalized_name"], unique=True)

    # Membership
    op.create_table(
        "user_roles",
        sa.Column(
            "user_id",
            sa.Uuid,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "role_id",
            sa.Uuid,
            sa.ForeignKey("roles.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )


def downgrade() -> None:
    op.drop_table("user_roles")
    op.drop_index("ix_roles_normalized_name", table_name="roles")
    op.drop_table("roles")
    op.drop_index("ix_users_normalized_email", table_name="users")
    op.drop_index("ix_users_normalized_user_name", table_name="users")
    op.drop_table("users")

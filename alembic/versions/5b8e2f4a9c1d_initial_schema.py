"""initial schema

Revision ID: 5b8e2f4a9c1d
Revises:
Create Date: 2026-10-12 09:41:03.214877

Creates users, auth_tokens, archives and workspace_entries. Tables that already
exist (created by Base.metadata.create_all() on an earlier start) are skipped.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '5b8e2f4a9c1d'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _table_exists(table_name):
    """Check if a table exists."""
    bind = op.get_bind()
    insp = inspect(bind)
    return table_name in insp.get_table_names()


def upgrade() -> None:
    if not _table_exists("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("email", sa.String(), nullable=False, unique=True),
            sa.Column("is_master", sa.Boolean(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("last_login_at", sa.DateTime(), nullable=True),
        )
        op.create_index("ix_users_id", "users", ["id"])

    if not _table_exists("auth_tokens"):
        op.create_table(
            "auth_tokens",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
            sa.Column("email", sa.String(), nullable=False),
            sa.Column("token_hash", sa.String(), nullable=False),
            sa.Column("token_type", sa.String(), nullable=True),
            sa.Column("expires_at", sa.DateTime(), nullable=False),
            sa.Column("used_at", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
        )
        op.create_index("ix_auth_tokens_id", "auth_tokens", ["id"])
        op.create_index("ix_auth_tokens_email", "auth_tokens", ["email"])
        op.create_index("ix_auth_tokens_token_hash", "auth_tokens", ["token_hash"])

    if not _table_exists("archives"):
        op.create_table(
            "archives",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("type", sa.String(), nullable=False),
            sa.Column("company_name", sa.String(), nullable=False),
            sa.Column("record_name", sa.String(), nullable=True),
            sa.Column("data", sa.JSON(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
        )
        op.create_index("ix_archives_id", "archives", ["id"])
        op.create_index("ix_archives_type", "archives", ["type"])
        op.create_index("ix_archives_company_name", "archives", ["company_name"])

    if not _table_exists("workspace_entries"):
        op.create_table(
            "workspace_entries",
            sa.Column("key", sa.String(), primary_key=True),
            sa.Column("value", sa.JSON(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
        )


def downgrade() -> None:
    op.drop_table("workspace_entries")
    op.drop_table("archives")
    op.drop_table("auth_tokens")
    op.drop_table("users")

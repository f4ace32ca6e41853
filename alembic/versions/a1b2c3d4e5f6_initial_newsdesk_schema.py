"""Initial newsdesk schema: roles, users, blogs, editions

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op
from newsdesk.constants.roles import SEED_ROLES, SYNC_ROLE_ID_SEQUENCE

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CONTENT_STATUSES = ("draft", "pending", "approved", "published")


def _status_type():
    if op.get_bind().dialect.name == "postgresql":
        return postgresql.ENUM(*CONTENT_STATUSES, name="contentstatus", create_type=False)
    return sa.Enum(*CONTENT_STATUSES, name="contentstatus")


def _publishable_columns() -> list:
    return [
        sa.Column("status", _status_type(), nullable=False, server_default="draft"),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cover", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        postgresql.ENUM(*CONTENT_STATUSES, name="contentstatus").create(bind, checkfirst=True)

    roles = op.create_table(
        "roles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False, unique=True),
        sa.Column("permissions", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_roles_id"), "roles", ["id"], unique=False)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=False, unique=True),
        sa.Column("role_id", sa.Integer(), sa.ForeignKey("roles.id"), nullable=False),
        sa.Column("extra_permissions", sa.JSON(), nullable=False),
        sa.Column("removed_permissions", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=False)

    op.create_table(
        "blogs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("byliner", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("meta_title", sa.Text(), nullable=False),
        sa.Column("meta_description", sa.Text(), nullable=False),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("likes", sa.Integer(), nullable=False, server_default="0"),
        *_publishable_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_blogs_id"), "blogs", ["id"], unique=False)
    op.create_index(op.f("ix_blogs_slug"), "blogs", ["slug"], unique=True)
    op.create_index(op.f("ix_blogs_status"), "blogs", ["status"], unique=False)
    op.create_index(op.f("ix_blogs_owner_id"), "blogs", ["owner_id"], unique=False)
    op.create_index("idx_blogs_status_published_at", "blogs", ["status", "published_at"], unique=False)

    op.create_table(
        "editions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("edition_number", sa.Integer(), nullable=False, unique=True),
        sa.Column("edition_link", sa.String(), nullable=False),
        *_publishable_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_editions_id"), "editions", ["id"], unique=False)
    op.create_index(op.f("ix_editions_status"), "editions", ["status"], unique=False)
    op.create_index(op.f("ix_editions_owner_id"), "editions", ["owner_id"], unique=False)
    op.create_index("idx_editions_status_published_at", "editions", ["status", "published_at"], unique=False)

    # Sentinel ids follow the default_role_id and superuser_role_id settings
    op.bulk_insert(roles, SEED_ROLES)
    if bind.dialect.name == "postgresql":
        op.execute(SYNC_ROLE_ID_SEQUENCE)


def downgrade() -> None:
    op.drop_index("idx_editions_status_published_at", table_name="editions")
    op.drop_index(op.f("ix_editions_owner_id"), table_name="editions")
    op.drop_index(op.f("ix_editions_status"), table_name="editions")
    op.drop_index(op.f("ix_editions_id"), table_name="editions")
    op.drop_table("editions")

    op.drop_index("idx_blogs_status_published_at", table_name="blogs")
    op.drop_index(op.f("ix_blogs_owner_id"), table_name="blogs")
    op.drop_index(op.f("ix_blogs_status"), table_name="blogs")
    op.drop_index(op.f("ix_blogs_slug"), table_name="blogs")
    op.drop_index(op.f("ix_blogs_id"), table_name="blogs")
    op.drop_table("blogs")

    op.drop_index(op.f("ix_users_username"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_table("users")

    op.drop_index(op.f("ix_roles_id"), table_name="roles")
    op.drop_table("roles")

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        postgresql.ENUM(name="contentstatus").drop(bind, checkfirst=True)

"""Initial blog schema with the fixed role set.

Revision ID: 0001
Revises:
Create Date: 2026-10-18 09:00:00

"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import uuid4

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ROLES = (
    ("Administrator", "Administrators"),
    ("Editor", "Editors"),
    ("Author", "Authors"),
    ("Contributor", "Contributors"),
    ("Owner", "Blog Owner"),
)


def _id() -> sa.Column[str]:
    return sa.Column("id", sa.String(36), nullable=False)


def _audit() -> list[sa.Column[object]]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.String(36), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_by", sa.String(36), nullable=True),
    ]


def upgrade() -> None:
    roles = op.create_table(
        "roles",
        _id(),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("description", sa.String(2000), nullable=True),
        *_audit(),
        sa.PrimaryKeyConstraint("id", name="pk_roles"),
        sa.UniqueConstraint("name", name="uq_roles_name"),
    )
    op.create_table(
        "users",
        _id(),
        sa.Column("name", sa.String(191), nullable=False),
        sa.Column("slug", sa.String(191), nullable=False),
        sa.Column("email", sa.String(191), nullable=False),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("website", sa.String(2000), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("profile_image", sa.String(2000), nullable=True),
        sa.Column("cover_image", sa.String(2000), nullable=True),
        sa.Column("last_seen", sa.DateTime(timezone=True), nullable=True),
        *_audit(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("slug", name="uq_users_slug"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_table(
        "roles_users",
        _id(),
        sa.Column("role_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], name="fk_roles_users_role_id_roles"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_roles_users_user_id_users"),
        sa.PrimaryKeyConstraint("id", name="pk_roles_users"),
    )
    op.create_table(
        "settings",
        _id(),
        sa.Column("key", sa.String(50), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        sa.Column("group", sa.String(50), nullable=False),
        *_audit(),
        sa.PrimaryKeyConstraint("id", name="pk_settings"),
        sa.UniqueConstraint("key", name="uq_settings_key"),
    )
    op.create_table(
        "tags",
        _id(),
        sa.Column("name", sa.String(191), nullable=False),
        sa.Column("slug", sa.String(191), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("feature_image", sa.String(2000), nullable=True),
        sa.Column("parent_id", sa.String(36), nullable=True),
        sa.Column("visibility", sa.String(50), nullable=False),
        sa.Column("meta_title", sa.String(2000), nullable=True),
        sa.Column("meta_description", sa.String(2000), nullable=True),
        *_audit(),
        sa.PrimaryKeyConstraint("id", name="pk_tags"),
        sa.UniqueConstraint("slug", name="uq_tags_slug"),
    )
    op.create_table(
        "posts",
        _id(),
        sa.Column("uuid", sa.String(36), nullable=False),
        sa.Column("title", sa.String(2000), nullable=False),
        sa.Column("slug", sa.String(191), nullable=False),
        sa.Column("mobiledoc", sa.Text(), nullable=True),
        sa.Column("html", sa.Text(), nullable=True),
        sa.Column("plaintext", sa.Text(), nullable=True),
        sa.Column("feature_image", sa.String(2000), nullable=True),
        sa.Column("featured", sa.Boolean(), nullable=False),
        sa.Column("page", sa.Boolean(), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("language", sa.String(6), nullable=False),
        sa.Column("visibility", sa.String(50), nullable=False),
        sa.Column("meta_title", sa.String(2000), nullable=True),
        sa.Column("meta_description", sa.String(2000), nullable=True),
        sa.Column("custom_excerpt", sa.String(2000), nullable=True),
        sa.Column("author_id", sa.String(36), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("published_by", sa.String(36), nullable=True),
        *_audit(),
        sa.PrimaryKeyConstraint("id", name="pk_posts"),
        sa.UniqueConstraint("slug", name="uq_posts_slug"),
    )
    op.create_table(
        "posts_tags",
        _id(),
        sa.Column("post_id", sa.String(36), nullable=False),
        sa.Column("tag_id", sa.String(36), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["post_id"], ["posts.id"], name="fk_posts_tags_post_id_posts"),
        sa.ForeignKeyConstraint(["tag_id"], ["tags.id"], name="fk_posts_tags_tag_id_tags"),
        sa.PrimaryKeyConstraint("id", name="pk_posts_tags"),
        sa.UniqueConstraint("post_id", "tag_id", name="uq_posts_tags_post_tag"),
    )
    op.create_table(
        "subscribers",
        _id(),
        sa.Column("email", sa.String(191), nullable=False),
        sa.Column("name", sa.String(191), nullable=True),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("post_id", sa.String(36), nullable=True),
        sa.Column("subscribed_url", sa.String(2000), nullable=True),
        sa.Column("subscribed_referrer", sa.String(2000), nullable=True),
        sa.Column("unsubscribed_url", sa.String(2000), nullable=True),
        sa.Column("unsubscribed_at", sa.DateTime(timezone=True), nullable=True),
        *_audit(),
        sa.PrimaryKeyConstraint("id", name="pk_subscribers"),
        sa.UniqueConstraint("email", name="uq_subscribers_email"),
    )

    op.bulk_insert(
        roles,
        [
            {"id": uuid4().hex, "name": name, "description": description}
            for name, description in ROLES
        ],
    )


def downgrade() -> None:
    for table in (
        "subscribers",
        "posts_tags",
        "posts",
        "tags",
        "settings",
        "roles_users",
        "users",
        "roles",
    ):
        op.drop_table(table)

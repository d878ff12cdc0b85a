"""Create attachment tables

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
import sqlalchemy as sa
from alembic import op

from attachment_hub.models.media_type import DEFAULT_MEDIA_TYPES

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create attachment, ownership and media type tables."""
    op.create_table(
        "attachments",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("module", sa.String(100), nullable=False),
        sa.Column("group", sa.String(100), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("save_name", sa.String(255), nullable=False),
        sa.Column("ext", sa.String(20), nullable=False, server_default=""),
        sa.Column("md5", sa.String(32), nullable=False),
        sa.Column("path", sa.String(500), nullable=False),
        sa.Column("full_path", sa.String(800), nullable=False),
        sa.Column("size", sa.BigInteger, nullable=False),
        sa.Column("size_text", sa.String(50), nullable=False),
        sa.Column("media_type", sa.String(100), nullable=True),
        sa.Column("auth", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_attachments_module_group", "attachments", ["module", "group"])

    op.create_table(
        "attachment_owners",
        sa.Column(
            "attachment_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("attachments.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("account_id", sa.Uuid(as_uuid=True), primary_key=True),
    )
    op.create_index(
        "ix_attachment_owners_account_id", "attachment_owners", ["account_id"]
    )

    media_types = op.create_table(
        "media_types",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("ext", sa.String(20), nullable=False, unique=True),
        sa.Column("value", sa.String(100), nullable=False),
    )
    op.bulk_insert(
        media_types,
        [{"ext": ext, "value": value} for ext, value in DEFAULT_MEDIA_TYPES.items()],
    )


def downgrade() -> None:
    """Drop attachment tables."""
    op.drop_table("media_types")
    op.drop_index("ix_attachment_owners_account_id", table_name="attachment_owners")
    op.drop_table("attachment_owners")
    op.drop_index("idx_attachments_module_group", table_name="attachments")
    op.drop_table("attachments")

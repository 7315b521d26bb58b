"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18

Creates:
- organization, account
- document, collaboration, section, entity
- note
- project, project_membership
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all tables."""
    # organization table
    op.create_table(
        "organization",
        sa.Column("organization_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # account table
    op.create_table(
        "account",
        sa.Column("account_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("organization_id", sa.Integer(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organization.organization_id"]),
        sa.UniqueConstraint("organization_id", "email", name="uq_account_org_email"),
    )
    op.create_index("idx_account_org", "account", ["organization_id"])

    # document table
    op.create_table(
        "document",
        sa.Column("document_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("account_id", sa.Integer(), nullable=False),
        sa.Column("organization_id", sa.Integer(), nullable=False),
        sa.Column("access", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("source", sa.Text(), nullable=True),
        sa.Column("related_article", sa.Text(), nullable=True),
        sa.Column("published_url", sa.Text(), nullable=True),
        sa.Column("language", sa.Text(), nullable=False, server_default="en"),
        sa.Column("page_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("full_text", sa.Text(), nullable=False, server_default=""),
        sa.Column("file_name", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["account_id"], ["account.account_id"]),
        sa.ForeignKeyConstraint(["organization_id"], ["organization.organization_id"]),
    )
    op.create_index("idx_document_account", "document", ["account_id"])
    op.create_index("idx_document_org_access", "document", ["organization_id", "access"])

    # collaboration table
    op.create_table(
        "collaboration",
        sa.Column("collaboration_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("document_id", sa.Integer(), nullable=False),
        sa.Column("account_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["document_id"], ["document.document_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["account_id"], ["account.account_id"]),
        sa.UniqueConstraint("document_id", "account_id", name="uq_collaboration_doc_account"),
    )
    op.create_index("idx_collaboration_account", "collaboration", ["account_id"])

    # section table
    op.create_table(
        "section",
        sa.Column("section_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("document_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("page", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["document_id"], ["document.document_id"], ondelete="CASCADE"),
    )

    # entity table
    op.create_table(
        "entity",
        sa.Column("entity_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("document_id", sa.Integer(), nullable=False),
        sa.Column("kind", sa.Text(), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("relevance", sa.Float(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["document_id"], ["document.document_id"], ondelete="CASCADE"),
    )
    op.create_index("idx_entity_document", "entity", ["document_id"])

    # note table
    op.create_table(
        "note",
        sa.Column("note_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("document_id", sa.Integer(), nullable=False),
        sa.Column("account_id", sa.Integer(), nullable=False),
        sa.Column("organization_id", sa.Integer(), nullable=False),
        sa.Column("page", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("access", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["document_id"], ["document.document_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["account_id"], ["account.account_id"]),
        sa.ForeignKeyConstraint(["organization_id"], ["organization.organization_id"]),
    )
    op.create_index("idx_note_document", "note", ["document_id"])

    # project table
    op.create_table(
        "project",
        sa.Column("project_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("account_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["account_id"], ["account.account_id"]),
    )
    op.create_index("idx_project_account", "project", ["account_id"])

    # project_membership table
    op.create_table(
        "project_membership",
        sa.Column("membership_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("document_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["project_id"], ["project.project_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["document_id"], ["document.document_id"], ondelete="CASCADE"),
        sa.UniqueConstraint("project_id", "document_id", name="uq_membership_project_doc"),
    )
    op.create_index("idx_membership_document", "project_membership", ["document_id"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("project_membership")
    op.drop_table("project")
    op.drop_table("note")
    op.drop_table("entity")
    op.drop_table("section")
    op.drop_table("collaboration")
    op.drop_table("document")
    op.drop_table("account")
    op.drop_table("organization")

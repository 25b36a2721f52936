"""Create projects, forms and form_responses tables.

Initial migration.  Form pages are a single JSONB document per form;
responses reference their form with ON DELETE CASCADE.

Revision ID: 20261019_forms
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# revision identifiers, used by Alembic.
revision = "20261019_forms"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # --- projects ---
    op.create_table(
        "projects",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("owner_id", sa.Text, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("total_views", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", TIMESTAMP(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_projects_owner_id", "projects", ["owner_id"])

    # --- forms ---
    op.create_table(
        "forms",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "project_id",
            UUID(as_uuid=True),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("owner_id", sa.Text, nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        # Lifecycle
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'draft'")),
        sa.Column("visibility", sa.String(20), nullable=False, server_default=sa.text("'public'")),
        sa.Column("published_link", sa.Text, nullable=True),
        # Document
        sa.Column("pages", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        # Analytics
        sa.Column("total_views", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("total_responses", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("average_response_time", sa.Float, nullable=False, server_default=sa.text("0")),
        sa.Column("daily_views", JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")),
        # Timestamps
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", TIMESTAMP(timezone=True), nullable=False, server_default=sa.text("now()")),
        # Constraints
        sa.CheckConstraint("status IN ('draft', 'published')", name="ck_form_status"),
        sa.CheckConstraint("visibility IN ('public', 'private')", name="ck_form_visibility"),
        sa.CheckConstraint(
            "status != 'published' OR published_link IS NOT NULL",
            name="ck_published_has_link",
        ),
    )
    op.create_index("ix_forms_project_id", "forms", ["project_id"])
    op.create_index("ix_forms_owner_id", "forms", ["owner_id"])
    op.create_index("ix_forms_status", "forms", ["status"])
    op.create_index("ix_forms_owner_updated", "forms", ["owner_id", "updated_at"])

    # --- form_responses ---
    op.create_table(
        "form_responses",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "form_id",
            UUID(as_uuid=True),
            sa.ForeignKey("forms.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("responder_id", sa.Text, nullable=True),
        sa.Column("answers", JSONB, nullable=False),
        sa.Column("time_taken_seconds", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_form_responses_form_id", "form_responses", ["form_id"])


def downgrade() -> None:
    op.drop_index("ix_form_responses_form_id", table_name="form_responses")
    op.drop_table("form_responses")

    op.drop_index("ix_forms_owner_updated", table_name="forms")
    op.drop_index("ix_forms_status", table_name="forms")
    op.drop_index("ix_forms_owner_id", table_name="forms")
    op.drop_index("ix_forms_project_id", table_name="forms")
    op.drop_table("forms")

    op.drop_index("ix_projects_owner_id", table_name="projects")
    op.drop_table("projects")

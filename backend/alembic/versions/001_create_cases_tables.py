"""Create cases and custom_fields tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates `cases` and `custom_fields`.
How:   PostgreSQL-specific pieces: JSONB for custom field values and a GIN
       full-text index over the searchable case columns.

Rollback: downgrade() drops both tables (destructive, all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Must match app.services.case_service.search_document()
SEARCH_DOCUMENT = (
    "coalesce(case_number, '') || ' ' || coalesce(subject, '') || ' ' || "
    "coalesce(description, '') || ' ' || coalesce(department, '') || ' ' || "
    "coalesce(contact_name, '') || ' ' || coalesce(business_name, '')"
)


def upgrade() -> None:
    op.create_table(
        "cases",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "case_number",
            sa.String(100),
            nullable=False,
            comment="External case identifier, unique across all cases",
        ),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("department", sa.String(50), nullable=False),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'open'"),
        ),
        sa.Column("contact_name", sa.String(255), nullable=True),
        sa.Column("business_name", sa.String(255), nullable=True),
        sa.Column("coid", sa.String(100), nullable=True),
        sa.Column("mid", sa.String(100), nullable=True),
        sa.Column(
            "custom_fields",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("case_number", name="uq_cases_case_number"),
    )

    # Listing is always newest first
    op.create_index("idx_cases_created_at", "cases", [sa.text("created_at DESC")])
    op.create_index("idx_cases_business_name", "cases", ["business_name"])
    op.create_index("idx_cases_department", "cases", ["department"])
    op.create_index("idx_cases_coid", "cases", ["coid"])
    op.create_index("idx_cases_mid", "cases", ["mid"])

    op.execute(
        "CREATE INDEX idx_cases_search ON cases "
        f"USING GIN (to_tsvector('english'::regconfig, {SEARCH_DOCUMENT}))"
    )

    op.create_table(
        "custom_fields",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("field_id", sa.String(100), nullable=False),
        sa.Column("label", sa.String(255), nullable=False),
        sa.Column(
            "field_type",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'text'"),
        ),
        sa.Column(
            "required",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    # Not unique: duplicate definitions are allowed by default
    op.create_index("ix_custom_fields_field_id", "custom_fields", ["field_id"])


def downgrade() -> None:
    op.drop_index("ix_custom_fields_field_id", table_name="custom_fields")
    op.drop_table("custom_fields")
    op.execute("DROP INDEX IF EXISTS idx_cases_search")
    op.drop_index("idx_cases_mid", table_name="cases")
    op.drop_index("idx_cases_coid", table_name="cases")
    op.drop_index("idx_cases_department", table_name="cases")
    op.drop_index("idx_cases_business_name", table_name="cases")
    op.drop_index("idx_cases_created_at", table_name="cases")
    op.drop_table("cases")

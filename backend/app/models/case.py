"""
CaseDesk Backend — Case SQLAlchemy Model
==========================================

What:  ORM model representing the `cases` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Used by CaseService for CRUD operations and by Alembic for schema management.

Table Design:
    - UUID primary key assigned by the application (exposed as `_id`)
    - case_number: natural external identifier, UNIQUE
    - department/status: short enum-like strings, checked in the service layer
    - contact/business columns: nullable; required only under REQUIRE_CONTACT_FIELDS
    - custom_fields: open-ended string → string mapping (JSONB on PostgreSQL)
    - created_at/updated_at: UTC, system-managed

    The full-text GIN index over the searchable columns is PostgreSQL-only and
    is created by the Alembic migration, not by this model.
"""

import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy import JSON, DateTime, Index, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

DEPARTMENTS = ("Payments", "Payroll", "QBO")
CASE_STATUSES = ("open", "closed")

# Columns folded into the full-text search document, in index order
SEARCHABLE_COLUMNS = (
    "case_number",
    "subject",
    "description",
    "department",
    "contact_name",
    "business_name",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Case(Base):
    """
    A support/service ticket record.

    Lifecycle:
        Created by POST, mutated in place by PUT, removed by DELETE.
        No soft-delete, no versioning.

    Query Patterns:
        - List newest first: ORDER BY created_at DESC LIMIT/OFFSET
        - Exact filters on business_name, department, coid, mid
        - Lookup by primary key
    """

    __tablename__ = "cases"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    case_number: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment="External case identifier, unique across all cases",
    )
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    department: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="open")

    # ── Contact / Business Metadata ───────────────────────────────────────
    contact_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    business_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    coid: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    mid: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Keys correlate with CustomField.field_id; no referential integrity
    custom_fields: Mapped[Dict[str, str]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=dict,
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    __table_args__ = (
        Index("idx_cases_created_at", created_at.desc()),
        Index("idx_cases_business_name", "business_name"),
        Index("idx_cases_department", "department"),
        Index("idx_cases_coid", "coid"),
        Index("idx_cases_mid", "mid"),
    )

    def __repr__(self) -> str:
        return (
            f"<Case(id={self.id}, case_number='{self.case_number}', "
            f"status='{self.status}')>"
        )

"""
CaseDesk Backend — CustomField SQLAlchemy Model
=================================================

What:  ORM model for the `custom_fields` table: definitions of extra data
       fields that cases can carry in their `custom_fields` mapping.

The user-facing `id` attribute is stored as `field_id`; the primary key is a
separate UUID (exposed as `_id`). `field_id` is NOT unique: duplicate
definitions are accepted unless ENFORCE_UNIQUE_CUSTOM_FIELD_IDS is set.
Deleting a definition leaves stored case values untouched.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

FIELD_TYPES = ("text", "textarea")


class CustomField(Base):
    __tablename__ = "custom_fields"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    field_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    field_type: Mapped[str] = mapped_column(String(20), nullable=False, default="text")
    required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<CustomField(id={self.id}, field_id='{self.field_id}', type='{self.field_type}')>"

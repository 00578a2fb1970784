"""
CaseDesk Backend — Custom Field Service (Business Logic)
==========================================================

What:  List, create and delete custom field definitions.
Why:   Keeps definition rules (required id/label, allowed types, optional
       uniqueness) out of the route handlers.
How:   Stateless methods receive an AsyncSession per call and return
       response models; store failures become DatabaseError.
Who:   Called by the custom field route handlers.

Definitions vs. values:
    A definition (`custom_fields` row) only describes a field. The values live
    in each case's `custom_fields` mapping and are never touched here:
    deleting a definition leaves stored case values as they are.

Duplicate `id` values are accepted unless ENFORCE_UNIQUE_CUSTOM_FIELD_IDS is on.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, settings
from app.exceptions import (
    CaseDeskError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from app.models.custom_field import FIELD_TYPES, CustomField
from app.schemas.custom_field import CustomFieldCreate, CustomFieldResponse
from app.services.case_service import parse_record_id

logger = logging.getLogger(__name__)


class CustomFieldService:
    """
    Business logic layer for custom field definitions.

    Responsibilities:
        - list_custom_fields(): every definition, oldest first
        - create_custom_field(): presence/type validation, optional uniqueness, insert
        - delete_custom_field(): removal by internal `_id` with not-found handling
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings

    @staticmethod
    def to_response(field: CustomField) -> CustomFieldResponse:
        return CustomFieldResponse(
            record_id=field.id,
            field_id=field.field_id,
            label=field.label,
            field_type=field.field_type,
            required=field.required,
        )

    @staticmethod
    def _validate(payload: CustomFieldCreate) -> None:
        """Blank `id`/`label` are reported together; then `type` membership."""
        missing = []
        if not payload.field_id or not payload.field_id.strip():
            missing.append("id")
        if not payload.label or not payload.label.strip():
            missing.append("label")
        if missing:
            raise ValidationError.missing(missing)

        if payload.field_type not in FIELD_TYPES:
            raise ValidationError(
                message=f"Validation error: '{payload.field_type}' is not a valid type",
                fields=["type"],
            )

    async def list_custom_fields(self, db: AsyncSession) -> List[CustomFieldResponse]:
        """All definitions in creation order."""
        try:
            result = await db.execute(
                select(CustomField).order_by(CustomField.created_at)
            )
            return [self.to_response(field) for field in result.scalars().all()]
        except Exception as e:
            logger.error("Database error listing custom fields: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Error fetching custom fields",
                context={"error_type": type(e).__name__},
            ) from e

    async def create_custom_field(
        self, db: AsyncSession, payload: CustomFieldCreate
    ) -> CustomFieldResponse:
        """
        Validate and insert a new definition.

        What:    `id` and `label` are stripped; `type` defaults to "text".
        Who:     Called by POST /api/cases/custom-fields.

        Raises:
            ValidationError: missing id/label, or type not in FIELD_TYPES
            ConflictError: duplicate id while ENFORCE_UNIQUE_CUSTOM_FIELD_IDS is on
            DatabaseError: insert failed
        """
        self._validate(payload)
        field_id = payload.field_id.strip()

        try:
            if self.config.enforce_unique_custom_field_ids:
                existing = await db.execute(
                    select(CustomField.id).where(CustomField.field_id == field_id)
                )
                if existing.scalar_one_or_none() is not None:
                    raise ConflictError(
                        message=f"Custom field '{field_id}' already exists",
                        context={"field_id": field_id},
                    )

            field = CustomField(
                id=uuid.uuid4(),
                field_id=field_id,
                label=payload.label.strip(),
                field_type=payload.field_type,
                required=payload.required,
                created_at=datetime.now(timezone.utc),
            )
            db.add(field)
            await db.commit()
        except CaseDeskError:
            raise
        except Exception as e:
            await db.rollback()
            logger.error("Error creating custom field: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Error creating custom field",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Custom field created: %s (id=%s)", field.id, field.field_id)
        return self.to_response(field)

    async def delete_custom_field(self, db: AsyncSession, record_id: str) -> None:
        """
        Delete one definition by its internal `_id`.

        Raises:
            NotFoundError: unknown or malformed identifier (→ 404)
            DatabaseError: delete failed (→ 500)
        """
        pk = parse_record_id(record_id)
        if pk is None:
            raise NotFoundError(resource="Custom field", resource_id=str(record_id))

        try:
            result = await db.execute(select(CustomField).where(CustomField.id == pk))
            field = result.scalar_one_or_none()
            if field is None:
                raise NotFoundError(resource="Custom field", resource_id=str(record_id))

            await db.delete(field)
            await db.commit()
        except CaseDeskError:
            raise
        except Exception as e:
            await db.rollback()
            logger.error("Error deleting custom field %s: %s", record_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Error deleting custom field",
                context={"record_id": str(record_id)},
            ) from e

        logger.info("Custom field deleted: %s", record_id)


custom_field_service = CustomFieldService()

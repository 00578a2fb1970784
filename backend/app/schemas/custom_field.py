"""
CaseDesk Backend — Custom Field Schemas
=========================================

Wire names differ from Python names: the definition's own `id` is
`field_id`, its `type` is `field_type`, and the internal primary key is `_id`.
"""

import uuid
from typing import Optional

from pydantic import Field

from app.schemas.common import CamelModel


class CustomFieldCreate(CamelModel):
    """Body of POST /api/cases/custom-fields."""

    field_id: Optional[str] = Field(default=None, alias="id")
    label: Optional[str] = None
    field_type: str = Field(default="text", alias="type")
    required: bool = False


class CustomFieldResponse(CamelModel):
    record_id: uuid.UUID = Field(alias="_id")
    field_id: str = Field(alias="id")
    label: str
    field_type: str = Field(alias="type")
    required: bool

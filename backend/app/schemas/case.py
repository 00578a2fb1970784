"""
CaseDesk Backend — Case Request/Response Schemas
==================================================

What:  Pydantic models defining the case API contract.
How:   FastAPI validates request bodies against these models and serializes
       responses by alias (camelCase, `_id` for the internal identifier).

Request models leave every field optional: presence and enum rules are checked
by CaseService so that a single 400 response can name every missing field. Types are still enforced here (e.g. customFields
must map strings to strings).
"""

import uuid
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from app.schemas.common import CamelModel


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CaseFields(CamelModel):
    """Every client-writable case field; all optional at the schema level."""

    case_number: Optional[str] = None
    subject: Optional[str] = None
    description: Optional[str] = None
    department: Optional[str] = None
    status: Optional[str] = None
    contact_name: Optional[str] = None
    business_name: Optional[str] = None
    coid: Optional[str] = None
    mid: Optional[str] = None
    custom_fields: Optional[Dict[str, str]] = None


class CaseCreate(CaseFields):
    """Body of POST /api/cases."""


class CaseUpdate(CaseFields):
    """
    Body of PUT /api/cases/{id}.

    Only fields present in the body are applied (model_dump(exclude_unset=True)).
    Sending `customFields` replaces the whole mapping.
    """


class CaseFilters(CamelModel):
    """Exact-match and search filters accepted by GET /api/cases."""

    search: Optional[str] = None
    business_name: Optional[str] = None
    department: Optional[str] = None
    coid: Optional[str] = None
    mid: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class CaseResponse(CamelModel):
    """Full representation of a case as returned by every case endpoint."""

    record_id: uuid.UUID = Field(alias="_id", description="Internal case identifier")
    case_number: str
    subject: str
    description: str
    department: str
    status: str
    contact_name: Optional[str] = None
    business_name: Optional[str] = None
    coid: Optional[str] = None
    mid: Optional[str] = None
    custom_fields: Dict[str, str] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime


class CaseListResponse(CamelModel):
    """
    What:  Page of cases plus pagination totals.

    total is counted independently of the page query; pages = ceil(total/limit).
    """
    cases: List[CaseResponse]
    total: int
    page: int
    pages: int

"""
CaseDesk Backend — Case Service (Business Logic)
==================================================

What:  Validation, query building and persistence for case records.
How:   Stateless service methods receive an AsyncSession for each call,
       translate request models into ORM operations, and convert results
       into response models.
Who:   Called by the case route handlers; calls the database layer.

Error Handling Strategy:
    Missing/blank/invalid input   → ValidationError (400)
    Unique constraint violation    → ConflictError (400)
    No row for the identifier      → NotFoundError (404)
    Anything else from the store   → DatabaseError (500, generic message)
    No raw SQLAlchemy exception leaves this module.

Search:
    A case matches when ANY whitespace-separated term matches.
    PostgreSQL: OR of to_tsvector('english', <document>) @@ plainto_tsquery('english', term)
    Other dialects: some term appears (case-insensitive) in some searchable column.

Pagination params:
    `page`/`limit` are read like parseInt(x) || default: leading digits count,
    anything else (or a non-positive number) falls back to the default.
"""

import logging
import math
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic.alias_generators import to_camel
from sqlalchemy import and_, desc, func, literal_column, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, settings
from app.exceptions import (
    CaseDeskError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from app.models.case import (
    CASE_STATUSES,
    DEPARTMENTS,
    SEARCHABLE_COLUMNS,
    Case,
)
from app.schemas.case import (
    CaseCreate,
    CaseFilters,
    CaseListResponse,
    CaseResponse,
    CaseUpdate,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("case_number", "subject", "description", "department")
CONTACT_FIELDS = ("contact_name", "business_name", "coid", "mid")
TRIMMED_FIELDS = ("case_number", "subject")
FILTER_FIELDS = ("business_name", "department", "coid", "mid")

# Fields with a fixed value set, checked on create and update
ENUM_FIELDS = {
    "department": DEPARTMENTS,
    "status": CASE_STATUSES,
}


def parse_record_id(raw: Any) -> Optional[uuid.UUID]:
    """Returns the UUID for a path identifier, or None when it is malformed."""
    try:
        return uuid.UUID(str(raw))
    except (ValueError, TypeError, AttributeError):
        return None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def positive_int(raw: Any, default: int) -> int:
    """
    Lenient integer parsing for query parameters.

    "3" → 3, "3abc" → 3, "abc"/""/None → default, "0"/"-2" → default.
    """
    if isinstance(raw, int) and not isinstance(raw, bool):
        value = raw
    else:
        match = _LEADING_INT.match(str(raw)) if raw is not None else None
        if match is None:
            return default
        value = int(match.group(1))
    return value if value > 0 else default


def search_document():
    """
    SQL expression concatenating every searchable column.

    Must stay identical to the expression of the GIN index created by the
    001 migration, otherwise PostgreSQL will not use the index. The '' and
    ' ' pieces are SQL literals so the rendered text has no bind parameters.
    """
    empty = literal_column("''")
    space = literal_column("' '")
    parts = [func.coalesce(getattr(Case, column), empty) for column in SEARCHABLE_COLUMNS]
    document = parts[0]
    for part in parts[1:]:
        document = document + space + part
    return document


def _session_dialect(db: AsyncSession) -> str:
    bind = getattr(db, "bind", None)
    name = getattr(getattr(bind, "dialect", None), "name", "")
    return name if isinstance(name, str) else ""


class CaseService:
    """
    Business logic layer for case operations.

    Responsibilities:
        - list_cases(): filtered, searched, paginated listing
        - get_case(): single case retrieval with not-found handling
        - create_case(): presence/enum validation and insert
        - update_case(): partial update with revalidation
        - delete_case(): removal of exactly one record
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings

    # ── Validation ────────────────────────────────────────────────────────

    @property
    def required_fields(self) -> tuple:
        if self.config.require_contact_fields:
            return REQUIRED_FIELDS + CONTACT_FIELDS
        return REQUIRED_FIELDS

    @staticmethod
    def _normalize(values: Dict[str, Any]) -> Dict[str, Any]:
        """Strips surrounding whitespace from trimmed fields."""
        for field in TRIMMED_FIELDS:
            if isinstance(values.get(field), str):
                values[field] = values[field].strip()
        return values

    @staticmethod
    def _check_enums(values: Dict[str, Any]) -> None:
        """Collects every enum violation into one ValidationError."""
        messages: List[str] = []
        fields: List[str] = []
        for field, allowed in ENUM_FIELDS.items():
            value = values.get(field)
            if value is not None and value not in allowed:
                messages.append(f"'{value}' is not a valid {field}")
                fields.append(to_camel(field))
        if messages:
            raise ValidationError(
                message=f"Validation error: {'. '.join(messages)}",
                fields=fields,
            )

    def _validate_create(self, values: Dict[str, Any]) -> None:
        missing = [
            to_camel(field) for field in self.required_fields
            if _is_blank(values.get(field))
        ]
        if missing:
            raise ValidationError.missing(missing)
        self._check_enums(values)

    def _validate_update(self, changes: Dict[str, Any]) -> None:
        # Required fields may be omitted from an update, but not blanked
        must_stay_filled = self.required_fields + ("status",)
        blanked = [
            to_camel(field) for field in must_stay_filled
            if field in changes and _is_blank(changes[field])
        ]
        if blanked:
            raise ValidationError.missing(blanked)
        self._check_enums(changes)

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def to_response(case: Case) -> CaseResponse:
        return CaseResponse(
            record_id=case.id,
            case_number=case.case_number,
            subject=case.subject,
            description=case.description,
            department=case.department,
            status=case.status,
            contact_name=case.contact_name,
            business_name=case.business_name,
            coid=case.coid,
            mid=case.mid,
            custom_fields=dict(case.custom_fields or {}),
            created_at=case.created_at,
            updated_at=case.updated_at,
        )

    def effective_limit(self, limit: int) -> int:
        """Applies MAX_PAGE_SIZE when configured."""
        cap = self.config.max_page_size
        if cap is not None and limit > cap:
            return cap
        return limit

    @staticmethod
    def build_conditions(filters: CaseFilters, dialect: str = "") -> list:
        """Translates listing filters into SQLAlchemy WHERE clauses (ANDed)."""
        conditions = []

        terms = (filters.search or "").split()
        if terms:
            if dialect == "postgresql":
                english = literal_column("'english'::regconfig")
                document = func.to_tsvector(english, search_document())
                conditions.append(
                    or_(*[
                        document.op("@@")(func.plainto_tsquery(english, term))
                        for term in terms
                    ])
                )
            else:
                conditions.append(
                    or_(*[
                        getattr(Case, column).icontains(term, autoescape=True)
                        for term in terms
                        for column in SEARCHABLE_COLUMNS
                    ])
                )

        for field in FILTER_FIELDS:
            value = getattr(filters, field)
            if value:
                conditions.append(getattr(Case, field) == value)

        return conditions

    @staticmethod
    async def _load(db: AsyncSession, case_id: str) -> Case:
        record_id = parse_record_id(case_id)
        if record_id is None:
            raise NotFoundError(resource="Case", resource_id=str(case_id))

        result = await db.execute(select(Case).where(Case.id == record_id))
        case = result.scalar_one_or_none()
        if case is None:
            raise NotFoundError(resource="Case", resource_id=str(case_id))
        return case

    # ── Operations ────────────────────────────────────────────────────────

    async def list_cases(
        self,
        db: AsyncSession,
        filters: Optional[CaseFilters] = None,
        page: Any = 1,
        limit: Any = None,
    ) -> CaseListResponse:
        """
        List cases newest first with optional search and exact-match filters.

        Query plan:
            SELECT ... WHERE <filters> ORDER BY created_at DESC
            OFFSET (page-1)*limit LIMIT limit
            SELECT count(*) ... WHERE <filters>

        The count runs as a second statement, so `total` may be stale relative
        to the returned page under concurrent writes.

        `page` and `limit` may be raw query strings; see positive_int().
        """
        filters = filters or CaseFilters()
        limit = self.effective_limit(positive_int(limit, self.config.default_page_size))
        page = positive_int(page, 1)

        try:
            conditions = self.build_conditions(filters, _session_dialect(db))

            query = select(Case)
            count_query = select(func.count()).select_from(Case)
            if conditions:
                query = query.where(and_(*conditions))
                count_query = count_query.where(and_(*conditions))

            query = (
                query.order_by(desc(Case.created_at))
                .offset((page - 1) * limit)
                .limit(limit)
            )

            result = await db.execute(query)
            cases = list(result.scalars().all())

            count_result = await db.execute(count_query)
            total = count_result.scalar() or 0

            return CaseListResponse(
                cases=[self.to_response(case) for case in cases],
                total=total,
                page=page,
                pages=math.ceil(total / limit),
            )

        except Exception as e:
            logger.error("Database error listing cases: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Error fetching cases",
                context={"error_type": type(e).__name__},
            ) from e

    async def get_case(self, db: AsyncSession, case_id: str) -> CaseResponse:
        """
        Retrieve a single case by its internal identifier.

        Raises:
            NotFoundError: unknown or malformed identifier (→ 404)
            DatabaseError: query execution failed (→ 500)
        """
        try:
            case = await self._load(db, case_id)
            return self.to_response(case)
        except CaseDeskError:
            raise
        except Exception as e:
            logger.error("Database error fetching case %s: %s", case_id, str(e))
            raise DatabaseError(
                message="Error fetching case",
                context={"case_id": str(case_id)},
            ) from e

    async def create_case(self, db: AsyncSession, payload: CaseCreate) -> CaseResponse:
        """
        Validate and insert a new case.

        Raises:
            ValidationError: missing/blank required fields (all listed) or enum violation
            ConflictError: caseNumber already exists
            DatabaseError: insert failed for any other reason
        """
        values = self._normalize(payload.model_dump(exclude_none=True))
        self._validate_create(values)

        now = datetime.now(timezone.utc)
        case = Case(
            id=uuid.uuid4(),
            case_number=values["case_number"],
            subject=values["subject"],
            description=values["description"],
            department=values["department"],
            status=values.get("status", "open"),
            contact_name=values.get("contact_name"),
            business_name=values.get("business_name"),
            coid=values.get("coid"),
            mid=values.get("mid"),
            custom_fields=dict(values.get("custom_fields") or {}),
            created_at=now,
            updated_at=now,
        )

        try:
            db.add(case)
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.warning("Duplicate case number rejected: %s", case.case_number)
            raise ConflictError(
                message="Case number already exists",
                context={"case_number": case.case_number},
            ) from e
        except Exception as e:
            await db.rollback()
            logger.error("Error creating case: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Error creating case",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Case created: %s (caseNumber=%s)", case.id, case.case_number)
        return self.to_response(case)

    async def update_case(
        self,
        db: AsyncSession,
        case_id: str,
        payload: CaseUpdate,
    ) -> CaseResponse:
        """
        Apply a partial update and return the post-update record.

        Only fields present in the request body are written. The merged
        values are revalidated (no blanked required field, enum membership).
        """
        changes = self._normalize(payload.model_dump(exclude_unset=True))

        try:
            case = await self._load(db, case_id)
            self._validate_update(changes)

            if "custom_fields" in changes:
                changes["custom_fields"] = dict(changes["custom_fields"] or {})
            for field, value in changes.items():
                setattr(case, field, value)
            case.updated_at = datetime.now(timezone.utc)

            await db.commit()
        except CaseDeskError:
            raise
        except IntegrityError as e:
            await db.rollback()
            raise ConflictError(
                message="Case number already exists",
                context={"case_id": str(case_id)},
            ) from e
        except Exception as e:
            await db.rollback()
            logger.error("Error updating case %s: %s", case_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Error updating case",
                context={"case_id": str(case_id)},
            ) from e

        logger.info("Case updated: %s (fields=%s)", case.id, sorted(changes))
        return self.to_response(case)

    async def delete_case(self, db: AsyncSession, case_id: str) -> None:
        """Remove exactly one case. Custom field definitions are unaffected."""
        try:
            case = await self._load(db, case_id)
            await db.delete(case)
            await db.commit()
        except CaseDeskError:
            raise
        except Exception as e:
            await db.rollback()
            logger.error("Error deleting case %s: %s", case_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Error deleting case",
                context={"case_id": str(case_id)},
            ) from e

        logger.info("Case deleted: %s", case_id)


# ── Singleton Instance ────────────────────────────────────────────────────
case_service = CaseService()

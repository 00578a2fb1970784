"""
CaseDesk Backend — Case Service Unit Tests
============================================

What:  Tests for CaseService validation, error mapping and pagination math.
How:   Uses mock DB sessions (no real DB).

What we test:
    ✅ Missing required fields are all reported in one error
    ✅ Enum violations are rejected
    ✅ Unique violations become ConflictError, other store errors DatabaseError
    ✅ Malformed and unknown ids raise NotFoundError
    ✅ Page count and limit policies
    ✅ Search clause per dialect
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, OperationalError

from app.config import Settings
from app.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from app.models.case import Case
from app.schemas.case import CaseCreate, CaseFilters, CaseUpdate
from app.services.case_service import CaseService, positive_int, search_document


def make_case(**overrides) -> Case:
    now = datetime.now(timezone.utc)
    values = dict(
        id=uuid.uuid4(),
        case_number="CS-1",
        subject="Refund not received",
        description="Customer refund is two weeks late.",
        department="Payments",
        status="open",
        custom_fields={},
        created_at=now,
        updated_at=now,
    )
    values.update(overrides)
    return Case(**values)


class TestCaseServiceCreate:
    """Tests for create_case validation and persistence errors."""

    def setup_method(self):
        self.service = CaseService(config=Settings())

    @pytest.mark.asyncio
    async def test_create_case_success(self, mock_db_session):
        payload = CaseCreate(
            case_number="  CS-9  ",
            subject=" Card declined ",
            description="Terminal declines every card.",
            department="Payments",
        )

        result = await self.service.create_case(mock_db_session, payload)

        assert result.case_number == "CS-9"
        assert result.subject == "Card declined"
        assert result.status == "open"
        assert result.custom_fields == {}
        mock_db_session.add.assert_called_once()
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_fields_all_listed(self, mock_db_session):
        payload = CaseCreate(case_number="CS-2", department="QBO")

        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_case(mock_db_session, payload)

        assert exc_info.value.message == "Missing required fields: subject, description"
        assert exc_info.value.fields == ["subject", "description"]
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_blank_field_counts_as_missing(self, mock_db_session):
        payload = CaseCreate(
            case_number="   ", subject="s", description="d", department="QBO"
        )

        with pytest.raises(ValidationError, match="caseNumber"):
            await self.service.create_case(mock_db_session, payload)

    @pytest.mark.asyncio
    async def test_invalid_department_rejected(self, mock_db_session):
        payload = CaseCreate(
            case_number="CS-3", subject="s", description="d", department="HR"
        )

        with pytest.raises(ValidationError, match="'HR' is not a valid department"):
            await self.service.create_case(mock_db_session, payload)

    @pytest.mark.asyncio
    async def test_invalid_status_rejected(self, mock_db_session):
        payload = CaseCreate(
            case_number="CS-3", subject="s", description="d",
            department="QBO", status="pending",
        )

        with pytest.raises(ValidationError, match="not a valid status"):
            await self.service.create_case(mock_db_session, payload)

    @pytest.mark.asyncio
    async def test_duplicate_case_number_is_conflict(self, mock_db_session):
        mock_db_session.commit = AsyncMock(
            side_effect=IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        )
        payload = CaseCreate(
            case_number="CS-1", subject="s", description="d", department="QBO"
        )

        with pytest.raises(ConflictError, match="Case number already exists"):
            await self.service.create_case(mock_db_session, payload)
        mock_db_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_store_failure_is_database_error(self, mock_db_session):
        mock_db_session.commit = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("connection reset"))
        )
        payload = CaseCreate(
            case_number="CS-1", subject="s", description="d", department="QBO"
        )

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.create_case(mock_db_session, payload)
        assert "connection reset" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_contact_fields_required_when_policy_enabled(self, mock_db_session):
        service = CaseService(config=Settings(require_contact_fields=True))
        payload = CaseCreate(
            case_number="CS-4", subject="s", description="d",
            department="QBO", business_name="Acme",
        )

        with pytest.raises(ValidationError) as exc_info:
            await service.create_case(mock_db_session, payload)

        assert exc_info.value.fields == ["contactName", "coid", "mid"]


class TestCaseServiceGet:
    """Tests for get_case retrieval."""

    def setup_method(self):
        self.service = CaseService(config=Settings())

    @pytest.mark.asyncio
    async def test_get_case_found(self, mock_db_session):
        case = make_case(custom_fields={"priority": "low"})
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = case
        mock_db_session.execute.return_value = mock_result

        result = await self.service.get_case(mock_db_session, str(case.id))

        assert result.record_id == case.id
        assert result.custom_fields == {"priority": "low"}

    @pytest.mark.asyncio
    async def test_get_case_not_found(self, mock_db_session):
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = mock_result

        with pytest.raises(NotFoundError, match="Case not found"):
            await self.service.get_case(mock_db_session, str(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_malformed_id_is_not_found(self, mock_db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_case(mock_db_session, "not-a-valid-id")
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_query_failure_is_database_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(side_effect=RuntimeError("driver exploded"))

        with pytest.raises(DatabaseError, match="Error fetching case"):
            await self.service.get_case(mock_db_session, str(uuid.uuid4()))


class TestCaseServiceUpdate:
    """Tests for update_case revalidation."""

    def setup_method(self):
        self.service = CaseService(config=Settings())

    def _returning(self, mock_db_session, case):
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = case
        mock_db_session.execute.return_value = mock_result

    @pytest.mark.asyncio
    async def test_update_only_submitted_fields(self, mock_db_session):
        case = make_case()
        self._returning(mock_db_session, case)

        result = await self.service.update_case(
            mock_db_session, str(case.id), CaseUpdate(status="closed")
        )

        assert result.status == "closed"
        assert result.subject == "Refund not received"
        assert result.department == "Payments"
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_cannot_blank_required_field(self, mock_db_session):
        case = make_case()
        self._returning(mock_db_session, case)

        with pytest.raises(ValidationError, match="subject"):
            await self.service.update_case(
                mock_db_session, str(case.id), CaseUpdate(subject="")
            )
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_rejects_invalid_department(self, mock_db_session):
        case = make_case()
        self._returning(mock_db_session, case)

        with pytest.raises(ValidationError, match="not a valid department"):
            await self.service.update_case(
                mock_db_session, str(case.id), CaseUpdate(department="Legal")
            )

    @pytest.mark.asyncio
    async def test_update_unknown_case(self, mock_db_session):
        self._returning(mock_db_session, None)

        with pytest.raises(NotFoundError):
            await self.service.update_case(
                mock_db_session, str(uuid.uuid4()), CaseUpdate(status="closed")
            )


class TestCaseServiceList:
    """Tests for list_cases pagination and policies."""

    def setup_method(self):
        self.service = CaseService(config=Settings())

    def _execute_returning(self, mock_db_session, cases, total):
        page_result = MagicMock()
        page_result.scalars.return_value.all.return_value = cases
        count_result = MagicMock()
        count_result.scalar.return_value = total
        mock_db_session.execute = AsyncMock(side_effect=[page_result, count_result])

    @pytest.mark.asyncio
    async def test_list_empty(self, mock_db_session):
        self._execute_returning(mock_db_session, [], 0)

        result = await self.service.list_cases(mock_db_session)

        assert result.cases == []
        assert result.total == 0
        assert result.page == 1
        assert result.pages == 0

    @pytest.mark.asyncio
    async def test_pages_rounds_up(self, mock_db_session):
        cases = [make_case(case_number=f"CS-{i}") for i in range(10)]
        self._execute_returning(mock_db_session, cases, 25)

        result = await self.service.list_cases(mock_db_session, page=2, limit=10)

        assert len(result.cases) == 10
        assert result.total == 25
        assert result.page == 2
        assert result.pages == 3

    @pytest.mark.asyncio
    async def test_list_failure_is_database_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(DatabaseError, match="Error fetching cases"):
            await self.service.list_cases(mock_db_session)

    def test_limit_uncapped_by_default(self):
        assert self.service.effective_limit(5000) == 5000

    def test_limit_clamped_when_configured(self):
        service = CaseService(config=Settings(max_page_size=100))
        assert service.effective_limit(5000) == 100
        assert service.effective_limit(20) == 20


class TestSearchConditions:
    """Tests for the filter/search clause builder."""

    def test_exact_filters_only(self):
        conditions = CaseService.build_conditions(
            CaseFilters(department="Payroll", coid="C-1")
        )
        assert len(conditions) == 2

    def test_no_filters(self):
        assert CaseService.build_conditions(CaseFilters()) == []

    def test_postgres_matches_any_term(self):
        conditions = CaseService.build_conditions(
            CaseFilters(search="late refund"), dialect="postgresql"
        )
        compiled = conditions[0].compile(dialect=postgresql.dialect())
        sql = str(compiled)

        assert len(conditions) == 1
        assert "to_tsvector" in sql
        # one @@ match per term, ORed together
        assert sql.count("@@") == 2
        assert sql.count("plainto_tsquery") == 2
        assert " OR " in sql
        assert sorted(compiled.params.values()) == ["late", "refund"]

    def test_other_dialects_match_any_term(self):
        conditions = CaseService.build_conditions(
            CaseFilters(search="late refund", business_name="Acme")
        )
        sql = str(conditions[0].compile(dialect=sqlite.dialect()))

        # one OR group for the search plus the exact filter
        assert len(conditions) == 2
        assert " OR " in sql
        assert "LIKE" in sql
        assert "cases.subject" in sql
        assert "cases.business_name" in sql


class TestSearchDocument:
    """The document expression must render exactly like the GIN index text."""

    def test_separators_are_sql_literals(self):
        compiled = search_document().compile(dialect=postgresql.dialect())
        sql = str(compiled)

        assert compiled.params == {}
        assert "coalesce(cases.case_number, '')" in sql
        assert "|| ' ' ||" in sql
        assert sql.count("coalesce(") == 6


class TestPositiveInt:
    """Lenient query parameter parsing used for page/limit."""

    def test_digits(self):
        assert positive_int("3", 1) == 3
        assert positive_int(7, 1) == 7

    def test_leading_digits_are_used(self):
        assert positive_int("2abc", 1) == 2

    def test_unparseable_falls_back(self):
        assert positive_int("abc", 1) == 1
        assert positive_int("", 10) == 10
        assert positive_int(None, 10) == 10

    def test_non_positive_falls_back(self):
        assert positive_int("0", 10) == 10
        assert positive_int("-2", 1) == 1

    @pytest.mark.asyncio
    async def test_list_cases_coerces_raw_values(self, mock_db_session):
        page_result = MagicMock()
        page_result.scalars.return_value.all.return_value = []
        count_result = MagicMock()
        count_result.scalar.return_value = 25
        mock_db_session.execute = AsyncMock(side_effect=[page_result, count_result])

        result = await CaseService(config=Settings()).list_cases(
            mock_db_session, page="abc", limit="0"
        )

        assert result.page == 1
        # limit fell back to the default of 10
        assert result.pages == 3

"""Tests for the activity service: validation, normalization and ownership."""

from datetime import date

import pytest

from app.exceptions import ActivityTypeNotFoundError, RecordNotFoundError, ValidationError
from services.activity_registry import REGISTRY, get_descriptor
from services.activity_service import ActivityService, activity_counts, parse_filters

RESEARCHER_A = "researcher-a"
RESEARCHER_B = "researcher-b"


def _supervision(**overrides) -> dict:
    data = {
        "student_name": "Student One",
        "degree_type": "PHD",
        "thesis_title": "Sparse models",
        "start_date": "2022-09-01",
        "status": "IN_PROGRESS",
        "supervision_type": "SOLE",
    }
    data.update(overrides)
    return data


def _research(**overrides) -> dict:
    data = {
        "title": "Graph methods",
        "submission_date": "2024-02-01",
        "status": "COMPLETED",
        "year": 2024,
        "publish_status": "PUBLISHED",
        "publish_type": "JOURNAL",
        "publisher": "Elsevier",
        "publish_month": 5,
    }
    data.update(overrides)
    return data


@pytest.fixture
def supervision(db_session) -> ActivityService:
    return ActivityService(db_session, REGISTRY["supervision"])


@pytest.fixture
def research(db_session) -> ActivityService:
    return ActivityService(db_session, REGISTRY["research"])


class TestRegistry:
    def test_every_type_registered(self):
        assert set(REGISTRY) == {
            "assignments",
            "certificates",
            "journals",
            "positions",
            "reviewing",
            "seminars",
            "supervision",
            "volunteering",
            "conferences",
            "workshops",
            "committees",
            "research",
        }

    def test_unknown_type(self):
        with pytest.raises(ActivityTypeNotFoundError):
            get_descriptor("courses")


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_and_get(self, supervision):
        record_id = await supervision.create(RESEARCHER_A, _supervision())
        record = await supervision.get(RESEARCHER_A, record_id)

        assert record["id"] == record_id
        assert record["start_date"] == date(2022, 9, 1)
        assert record["supervision_type"] == "SOLE"
        assert "researcher_id" not in record

    @pytest.mark.asyncio
    async def test_invalid_input_is_not_stored(self, supervision):
        with pytest.raises(ValidationError):
            await supervision.create(RESEARCHER_A, _supervision(status="COMPLETED"))
        assert await supervision.list(RESEARCHER_A) == []

    @pytest.mark.asyncio
    async def test_unpublished_research_drops_publication_fields(self, research):
        record_id = await research.create(
            RESEARCHER_A,
            _research(publish_status="DRAFT", scopus_quartile="Q2"),
        )
        record = await research.get(RESEARCHER_A, record_id)
        assert record["publish_status"] == "DRAFT"
        assert record["publisher"] is None
        assert record["publish_month"] is None
        assert record["scopus_quartile"] is None


class TestUpdate:
    @pytest.mark.asyncio
    async def test_partial_update_validates_merged_record(self, supervision):
        record_id = await supervision.create(RESEARCHER_A, _supervision())

        # completing without an end date breaks the merged record
        with pytest.raises(ValidationError) as exc_info:
            await supervision.update(RESEARCHER_A, record_id, {"status": "COMPLETED"})
        assert exc_info.value.details["field"] == "end_date"

        await supervision.update(
            RESEARCHER_A, record_id, {"status": "COMPLETED", "end_date": "2024-06-30"}
        )
        record = await supervision.get(RESEARCHER_A, record_id)
        assert record["status"] == "COMPLETED"
        assert record["end_date"] == date(2024, 6, 30)
        assert record["thesis_title"] == "Sparse models"

    @pytest.mark.asyncio
    async def test_update_normalizes_dependent_fields(self, supervision):
        record_id = await supervision.create(RESEARCHER_A, _supervision())

        await supervision.update(
            RESEARCHER_A,
            record_id,
            {"degree_type": "BACHELORS", "supervision_type": None},
        )
        record = await supervision.get(RESEARCHER_A, record_id)
        assert record["degree_type"] == "BACHELORS"
        assert record["supervision_type"] is None

    @pytest.mark.asyncio
    async def test_reopening_assignment_clears_stored_completion_date(self, db_session):
        assignments = ActivityService(db_session, REGISTRY["assignments"])
        record_id = await assignments.create(
            RESEARCHER_A,
            {
                "title": "Exam committee",
                "assignment_date": "2025-01-10",
                "status": "COMPLETED",
                "completion_date": "2025-02-01",
            },
        )

        await assignments.update(RESEARCHER_A, record_id, {"status": "IN_PROGRESS"})
        record = await assignments.get(RESEARCHER_A, record_id)
        assert record["status"] == "IN_PROGRESS"
        assert record["completion_date"] is None

    @pytest.mark.asyncio
    async def test_reopening_rejects_explicit_completion_date(self, db_session):
        assignments = ActivityService(db_session, REGISTRY["assignments"])
        record_id = await assignments.create(
            RESEARCHER_A,
            {
                "title": "Exam committee",
                "assignment_date": "2025-01-10",
                "status": "COMPLETED",
                "completion_date": "2025-02-01",
            },
        )

        with pytest.raises(ValidationError) as exc_info:
            await assignments.update(
                RESEARCHER_A,
                record_id,
                {"status": "IN_PROGRESS", "completion_date": "2025-02-01"},
            )
        assert exc_info.value.details["field"] == "completion_date"

    @pytest.mark.asyncio
    async def test_reopening_supervision_clears_stored_end_date(self, supervision):
        record_id = await supervision.create(
            RESEARCHER_A, _supervision(status="COMPLETED", end_date="2024-06-30")
        )

        await supervision.update(RESEARCHER_A, record_id, {"status": "IN_PROGRESS"})
        record = await supervision.get(RESEARCHER_A, record_id)
        assert record["status"] == "IN_PROGRESS"
        assert record["end_date"] is None

    @pytest.mark.asyncio
    async def test_degree_change_clears_stored_supervision_type(self, supervision):
        record_id = await supervision.create(RESEARCHER_A, _supervision())

        await supervision.update(RESEARCHER_A, record_id, {"degree_type": "BACHELORS"})
        record = await supervision.get(RESEARCHER_A, record_id)
        assert record["degree_type"] == "BACHELORS"
        assert record["supervision_type"] is None

    @pytest.mark.asyncio
    async def test_unpublishing_research_clears_stored_publication(self, research):
        record_id = await research.create(RESEARCHER_A, _research())

        await research.update(RESEARCHER_A, record_id, {"status": "IN_PROGRESS"})
        record = await research.get(RESEARCHER_A, record_id)
        assert record["publish_status"] is None
        assert record["publisher"] is None
        assert record["publish_month"] is None

    @pytest.mark.asyncio
    async def test_update_ignores_unknown_and_owner_fields(self, supervision):
        record_id = await supervision.create(RESEARCHER_A, _supervision())
        await supervision.update(
            RESEARCHER_A, record_id, {"researcher_id": RESEARCHER_B, "bogus": 1}
        )
        record = await supervision.get(RESEARCHER_A, record_id)
        assert record["student_name"] == "Student One"

    @pytest.mark.asyncio
    async def test_other_researcher_gets_not_found(self, supervision):
        record_id = await supervision.create(RESEARCHER_A, _supervision())

        with pytest.raises(RecordNotFoundError):
            await supervision.update(RESEARCHER_B, record_id, {"student_name": "Someone"})
        with pytest.raises(RecordNotFoundError):
            await supervision.delete(RESEARCHER_B, record_id)
        with pytest.raises(RecordNotFoundError):
            await supervision.get(RESEARCHER_B, record_id)

        record = await supervision.get(RESEARCHER_A, record_id)
        assert record["student_name"] == "Student One"


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete(self, supervision):
        record_id = await supervision.create(RESEARCHER_A, _supervision())
        await supervision.delete(RESEARCHER_A, record_id)

        with pytest.raises(RecordNotFoundError):
            await supervision.get(RESEARCHER_A, record_id)
        with pytest.raises(RecordNotFoundError):
            await supervision.delete(RESEARCHER_A, record_id)


class TestFilters:
    def test_parse_filters(self):
        descriptor = REGISTRY["journals"]
        filters = parse_filters(
            descriptor,
            {"search": "  nature ", "year": "2024", "role": "REVIEWER", "is_active": "false"},
        )
        assert filters.search == "nature"
        assert filters.year == 2024
        assert filters.values == {"role": "REVIEWER", "is_active": False}

    def test_all_sentinel_and_unsupported_params_ignored(self):
        descriptor = REGISTRY["assignments"]
        filters = parse_filters(
            descriptor, {"year": "ALL", "status": "ALL", "month": "3", "colour": "red"}
        )
        assert filters.year is None
        assert filters.month is None
        assert filters.values == {}

    def test_month_only_where_supported(self):
        filters = parse_filters(REGISTRY["certificates"], {"year": "2024", "month": "2"})
        assert filters.month == 2

    @pytest.mark.parametrize("params", [{"year": "20x4"}, {"year": "1800"}])
    def test_invalid_year(self, params):
        with pytest.raises(ValidationError):
            parse_filters(REGISTRY["assignments"], params)

    def test_invalid_boolean(self):
        with pytest.raises(ValidationError):
            parse_filters(REGISTRY["journals"], {"is_active": "maybe"})


class TestSummaries:
    @pytest.mark.asyncio
    async def test_stats(self, supervision):
        await supervision.create(RESEARCHER_A, _supervision())
        await supervision.create(
            RESEARCHER_A,
            _supervision(
                degree_type="MASTERS",
                start_date="2021-01-01",
                status="COMPLETED",
                end_date="2022-01-01",
            ),
        )
        await supervision.create(RESEARCHER_B, _supervision())

        stats = await supervision.stats(RESEARCHER_A)
        assert stats["total"] == 2
        assert stats["by"]["degree_type"] == {"PHD": 1, "MASTERS": 1}
        assert stats["by"]["status"] == {"IN_PROGRESS": 1, "COMPLETED": 1}
        assert stats["by_year"] == {"2022": 1, "2021": 1}
        assert stats["last_12_months"] == 0

    @pytest.mark.asyncio
    async def test_activity_counts(self, db_session, supervision, research):
        await supervision.create(RESEARCHER_A, _supervision())
        await research.create(RESEARCHER_A, _research())
        await research.create(RESEARCHER_A, _research(title="Second"))

        counts = await activity_counts(db_session, RESEARCHER_A)
        assert counts["supervision"] == 1
        assert counts["research"] == 2
        assert counts["assignments"] == 0
        assert len(counts) == len(REGISTRY)

"""Tests for the generic owner-scoped activity repository."""

import uuid
from datetime import date

import pytest

from services.activity_registry import REGISTRY
from services.activity_repository import ActivityFilters, ActivityRepository, parse_record_id

RESEARCHER_A = "researcher-a"
RESEARCHER_B = "researcher-b"


def _certificate(title: str, day: date, org: str = "IEEE", description: str | None = None) -> dict:
    return {
        "title": title,
        "issuing_organization": org,
        "date": day,
        "description": description,
    }


@pytest.fixture
def certificates(db_session) -> ActivityRepository:
    return ActivityRepository(db_session, REGISTRY["certificates"])


@pytest.fixture
def journals(db_session) -> ActivityRepository:
    return ActivityRepository(db_session, REGISTRY["journals"])


class TestOwnership:
    @pytest.mark.asyncio
    async def test_other_researcher_cannot_see_record(self, certificates):
        row = await certificates.create(RESEARCHER_A, _certificate("Award", date(2024, 3, 1)))

        assert await certificates.get(RESEARCHER_A, row.id) is not None
        assert await certificates.get(RESEARCHER_B, row.id) is None
        assert await certificates.list(RESEARCHER_B) == []

    @pytest.mark.asyncio
    async def test_other_researcher_cannot_update_or_delete(self, certificates):
        row = await certificates.create(RESEARCHER_A, _certificate("Award", date(2024, 3, 1)))

        assert await certificates.update(RESEARCHER_B, row.id, {"title": "Stolen"}) is False
        assert await certificates.delete(RESEARCHER_B, row.id) is False

        fetched = await certificates.get(RESEARCHER_A, row.id)
        assert fetched.title == "Award"

    @pytest.mark.asyncio
    async def test_owner_update_and_delete(self, certificates):
        row = await certificates.create(RESEARCHER_A, _certificate("Award", date(2024, 3, 1)))

        assert await certificates.update(RESEARCHER_A, str(row.id), {"title": "Renamed"}) is True
        assert (await certificates.get(RESEARCHER_A, row.id)).title == "Renamed"

        assert await certificates.delete(RESEARCHER_A, str(row.id)) is True
        assert await certificates.get(RESEARCHER_A, row.id) is None

    @pytest.mark.asyncio
    async def test_malformed_id_is_not_found(self, certificates):
        assert await certificates.get(RESEARCHER_A, "not-a-uuid") is None
        assert await certificates.update(RESEARCHER_A, "not-a-uuid", {"title": "x"}) is False
        assert await certificates.delete(RESEARCHER_A, "not-a-uuid") is False

    def test_parse_record_id(self):
        value = uuid.uuid4()
        assert parse_record_id(value) is value
        assert parse_record_id(str(value)) == value
        assert parse_record_id("123") is None

    @pytest.mark.asyncio
    async def test_count_is_owner_scoped(self, certificates):
        await certificates.create(RESEARCHER_A, _certificate("One", date(2024, 1, 1)))
        await certificates.create(RESEARCHER_A, _certificate("Two", date(2024, 2, 1)))
        await certificates.create(RESEARCHER_B, _certificate("Three", date(2024, 3, 1)))

        assert await certificates.count(RESEARCHER_A) == 2
        assert await certificates.count(RESEARCHER_B) == 1


class TestListing:
    @pytest.mark.asyncio
    async def test_newest_primary_date_first(self, certificates):
        await certificates.create(RESEARCHER_A, _certificate("Old", date(2022, 5, 1)))
        await certificates.create(RESEARCHER_A, _certificate("New", date(2024, 5, 1)))
        await certificates.create(RESEARCHER_A, _certificate("Mid", date(2023, 5, 1)))

        rows = await certificates.list(RESEARCHER_A)
        assert [r.title for r in rows] == ["New", "Mid", "Old"]

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_across_columns(self, certificates):
        await certificates.create(RESEARCHER_A, _certificate("Deep Learning", date(2024, 1, 1)))
        await certificates.create(
            RESEARCHER_A, _certificate("Teaching", date(2024, 2, 1), description="deep dive")
        )
        await certificates.create(RESEARCHER_A, _certificate("Other", date(2024, 3, 1), org="ACM"))

        rows = await certificates.list(RESEARCHER_A, ActivityFilters(search="DEEP"))
        assert {r.title for r in rows} == {"Deep Learning", "Teaching"}

        rows = await certificates.list(RESEARCHER_A, ActivityFilters(search="acm"))
        assert [r.title for r in rows] == ["Other"]

    @pytest.mark.asyncio
    async def test_search_escapes_wildcards(self, certificates):
        await certificates.create(RESEARCHER_A, _certificate("100% effort", date(2024, 1, 1)))
        await certificates.create(RESEARCHER_A, _certificate("Plain", date(2024, 2, 1)))

        rows = await certificates.list(RESEARCHER_A, ActivityFilters(search="%"))
        assert [r.title for r in rows] == ["100% effort"]

    @pytest.mark.asyncio
    async def test_year_and_month_filters(self, certificates):
        await certificates.create(RESEARCHER_A, _certificate("Dec", date(2023, 12, 31)))
        await certificates.create(RESEARCHER_A, _certificate("Jan", date(2024, 1, 1)))
        await certificates.create(RESEARCHER_A, _certificate("Feb", date(2024, 2, 15)))

        rows = await certificates.list(RESEARCHER_A, ActivityFilters(year=2024))
        assert [r.title for r in rows] == ["Feb", "Jan"]

        rows = await certificates.list(RESEARCHER_A, ActivityFilters(year=2024, month=1))
        assert [r.title for r in rows] == ["Jan"]

        rows = await certificates.list(RESEARCHER_A, ActivityFilters(year=2023, month=12))
        assert [r.title for r in rows] == ["Dec"]

    @pytest.mark.asyncio
    async def test_contains_filter(self, certificates):
        await certificates.create(
            RESEARCHER_A, _certificate("A", date(2024, 1, 1), org="Royal Society")
        )
        await certificates.create(RESEARCHER_A, _certificate("B", date(2024, 1, 2), org="IEEE"))

        rows = await certificates.list(
            RESEARCHER_A, ActivityFilters(values={"issuing_organization": "royal"})
        )
        assert [r.title for r in rows] == ["A"]

    @pytest.mark.asyncio
    async def test_boolean_and_enum_filters(self, journals):
        base = {
            "name": "Journal",
            "role": "REVIEWER",
            "type": "LOCAL",
            "start_date": date(2023, 1, 1),
        }
        await journals.create(RESEARCHER_A, {**base, "name": "Active", "is_active": True})
        await journals.create(
            RESEARCHER_A,
            {**base, "name": "Past", "is_active": False, "end_date": date(2023, 6, 1)},
        )
        await journals.create(
            RESEARCHER_A, {**base, "name": "Editor", "is_active": True, "role": "EDITOR_IN_CHIEF"}
        )

        rows = await journals.list(RESEARCHER_A, ActivityFilters(values={"is_active": False}))
        assert [r.name for r in rows] == ["Past"]

        rows = await journals.list(
            RESEARCHER_A, ActivityFilters(values={"is_active": True, "role": "REVIEWER"})
        )
        assert [r.name for r in rows] == ["Active"]

    @pytest.mark.asyncio
    async def test_listing_is_idempotent(self, certificates):
        for i in range(4):
            await certificates.create(RESEARCHER_A, _certificate(f"C{i}", date(2024, 1, 1)))

        filters = ActivityFilters(search="c", year=2024)
        first = [r.id for r in await certificates.list(RESEARCHER_A, filters)]
        second = [r.id for r in await certificates.list(RESEARCHER_A, filters)]
        assert first == second
        assert len(first) == 4

    @pytest.mark.asyncio
    async def test_list_between_and_count_by(self, certificates):
        await certificates.create(RESEARCHER_A, _certificate("A", date(2024, 1, 1), org="IEEE"))
        await certificates.create(RESEARCHER_A, _certificate("B", date(2024, 6, 1), org="IEEE"))
        await certificates.create(RESEARCHER_A, _certificate("C", date(2025, 1, 1), org="ACM"))

        rows = await certificates.list_between(RESEARCHER_A, date(2024, 1, 1), date(2024, 12, 31))
        assert [r.title for r in rows] == ["A", "B"]

        counts = await certificates.count_by(RESEARCHER_A, "issuing_organization")
        assert counts == {"IEEE": 2, "ACM": 1}

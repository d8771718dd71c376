"""Activity record service.

Runs validation and normalization in front of the repository, maps database
failures to ``PersistenceError`` and records mutation metrics. Updates use
PATCH semantics: the payload is merged over the stored record and the merged
result is validated as a whole, so cross-field rules hold after every write.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from app.logging_config import get_logger
from app.metrics import ACTIVITY_MUTATIONS
from services.activity_registry import REGISTRY, ActivityDescriptor
from services.activity_repository import ActivityFilters, ActivityRepository, record_to_dict
from services.activity_schemas import validate_activity
from services.date_buckets import MAX_YEAR, MIN_YEAR, add_months, today_local

logger = get_logger(__name__)

_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}


def _parse_int(name: str, raw: str, low: int, high: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {name}: {raw}", details={"field": name}) from None
    if not low <= value <= high:
        raise ValidationError(f"Invalid {name}: {raw}", details={"field": name})
    return value


def parse_filters(descriptor: ActivityDescriptor, params: Mapping[str, str]) -> ActivityFilters:
    """Build list filters from query parameters.

    Empty values and the ``ALL`` sentinel leave a filter unset. Parameters the
    activity type does not support are ignored.
    """
    filters = ActivityFilters()

    search = (params.get("search") or "").strip()
    if search:
        filters.search = search

    year = (params.get("year") or "").strip()
    if year and year.upper() != "ALL":
        filters.year = _parse_int("year", year, MIN_YEAR, MAX_YEAR)

    month = (params.get("month") or "").strip()
    if descriptor.supports_month and month and month.upper() != "ALL":
        filters.month = _parse_int("month", month, 1, 12)

    for name, spec in descriptor.filters.items():
        raw = (params.get(name) or "").strip()
        if not raw or raw.upper() == "ALL":
            continue
        if spec.kind == "bool":
            lowered = raw.lower()
            if lowered in _TRUE_VALUES:
                filters.values[name] = True
            elif lowered in _FALSE_VALUES:
                filters.values[name] = False
            else:
                raise ValidationError(f"Invalid {name}: {raw}", details={"field": name})
        else:
            filters.values[name] = raw

    return filters


class ActivityService:
    """Validated, owner-scoped operations on one activity type."""

    def __init__(self, session: AsyncSession, descriptor: ActivityDescriptor) -> None:
        self._descriptor = descriptor
        self._repo = ActivityRepository(session, descriptor)

    @property
    def descriptor(self) -> ActivityDescriptor:
        return self._descriptor

    def _record(self, operation: str, status: str) -> None:
        ACTIVITY_MUTATIONS.labels(
            activity_type=self._descriptor.slug,
            operation=operation,
            status=status,
        ).inc()

    def _failed(self, operation: str, verb: str) -> PersistenceError:
        self._record(operation, "error")
        logger.exception(
            "activity_persistence_failed",
            activity_type=self._descriptor.slug,
            operation=operation,
        )
        return PersistenceError(f"Failed to {verb} {self._descriptor.label}")

    async def create(self, researcher_id: str, payload: Mapping[str, Any]) -> str:
        """Validate and store a new record. Returns the new record id."""
        values = validate_activity(self._descriptor.schema, payload)
        values = self._descriptor.apply_normalization(values)
        try:
            row = await self._repo.create(researcher_id, values)
        except SQLAlchemyError as exc:
            raise self._failed("create", "add") from exc

        self._record("create", "success")
        logger.info(
            "activity_created",
            activity_type=self._descriptor.slug,
            record_id=str(row.id),
        )
        return str(row.id)

    async def get(self, researcher_id: str, record_id: str) -> dict[str, Any]:
        try:
            row = await self._repo.get(researcher_id, record_id)
        except SQLAlchemyError as exc:
            logger.exception("activity_read_failed", activity_type=self._descriptor.slug)
            raise PersistenceError(f"Failed to load {self._descriptor.label}") from exc
        if row is None:
            raise RecordNotFoundError()
        return record_to_dict(row)

    async def update(self, researcher_id: str, record_id: str, payload: Mapping[str, Any]) -> None:
        """Apply a partial update after validating the merged record."""
        existing = await self.get(researcher_id, record_id)

        fields = self._descriptor.schema.model_fields
        provided = {key: value for key, value in payload.items() if key in fields}
        stored = {key: existing.get(key) for key in fields}
        merged = {**stored, **provided}
        # stored fields the new state no longer allows are cleared, provided ones still validate
        for key, value in self._descriptor.apply_normalization(merged).items():
            if value is None and key not in provided:
                merged[key] = None
        values = validate_activity(self._descriptor.schema, merged)
        values = self._descriptor.apply_normalization(values)

        changes = {
            key: value
            for key, value in values.items()
            if key in provided or value != stored.get(key)
        }
        if not changes:
            return

        try:
            updated = await self._repo.update(researcher_id, record_id, changes)
        except SQLAlchemyError as exc:
            raise self._failed("update", "update") from exc
        if not updated:
            raise RecordNotFoundError()

        self._record("update", "success")
        logger.info(
            "activity_updated",
            activity_type=self._descriptor.slug,
            record_id=record_id,
            fields=sorted(changes),
        )

    async def delete(self, researcher_id: str, record_id: str) -> None:
        try:
            deleted = await self._repo.delete(researcher_id, record_id)
        except SQLAlchemyError as exc:
            raise self._failed("delete", "delete") from exc
        if not deleted:
            raise RecordNotFoundError()

        self._record("delete", "success")
        logger.info(
            "activity_deleted",
            activity_type=self._descriptor.slug,
            record_id=record_id,
        )

    async def list(
        self, researcher_id: str, filters: ActivityFilters | None = None
    ) -> list[dict[str, Any]]:
        try:
            rows = await self._repo.list(researcher_id, filters)
        except SQLAlchemyError as exc:
            logger.exception("activity_list_failed", activity_type=self._descriptor.slug)
            raise PersistenceError(f"Failed to load {self._descriptor.label} records") from exc
        return [record_to_dict(row) for row in rows]

    async def stats(self, researcher_id: str) -> dict[str, Any]:
        """KPI card data: totals, recent count, and counts per category and year."""
        try:
            dates = await self._repo.primary_dates(researcher_id)
            breakdown = {
                name: await self._repo.count_by(researcher_id, name)
                for name in self._descriptor.breakdown_fields
            }
        except SQLAlchemyError as exc:
            logger.exception("activity_stats_failed", activity_type=self._descriptor.slug)
            raise PersistenceError(f"Failed to load {self._descriptor.label} statistics") from exc

        since = add_months(today_local(), -12)
        by_year = Counter(day.year for day in dates)
        return {
            "total": len(dates),
            "last_12_months": sum(1 for day in dates if day > since),
            "by": breakdown,
            "by_year": {str(year): by_year[year] for year in sorted(by_year, reverse=True)},
        }


async def activity_counts(session: AsyncSession, researcher_id: str) -> dict[str, int]:
    """Record count per activity type for the researcher."""
    counts: dict[str, int] = {}
    try:
        for slug, descriptor in REGISTRY.items():
            counts[slug] = await ActivityRepository(session, descriptor).count(researcher_id)
    except SQLAlchemyError as exc:
        logger.exception("activity_counts_failed")
        raise PersistenceError("Failed to load activity counts") from exc
    return counts

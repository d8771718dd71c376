"""Owner-scoped persistence for activity records.

One repository class serves every activity type; the descriptor supplies the
model, the primary date column and the searchable columns. Every query is
filtered by ``researcher_id``, so a record owned by someone else behaves
exactly like a missing one.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from sqlalchemy import Select, delete, extract, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.activity_registry import ActivityDescriptor


@dataclass
class ActivityFilters:
    """Parsed list filters. Unset values do not constrain the query."""

    search: str | None = None
    year: int | None = None
    month: int | None = None
    values: dict[str, Any] = field(default_factory=dict)


def parse_record_id(record_id: str | uuid.UUID) -> uuid.UUID | None:
    """Return the UUID for ``record_id``, or None when it is malformed."""
    if isinstance(record_id, uuid.UUID):
        return record_id
    try:
        return uuid.UUID(str(record_id))
    except ValueError:
        return None


def record_to_dict(row: Any) -> dict[str, Any]:
    """Column values of a row, without the owner column."""
    data = {c.key: getattr(row, c.key) for c in row.__table__.columns}
    data.pop("researcher_id", None)
    data["id"] = str(data["id"])
    return data


class ActivityRepository:
    """CRUD and list queries for one activity type."""

    def __init__(self, session: AsyncSession, descriptor: ActivityDescriptor) -> None:
        self._session = session
        self._descriptor = descriptor
        self._model = descriptor.model

    @property
    def primary_date(self) -> Any:
        return getattr(self._model, self._descriptor.primary_date)

    def _owned(self, researcher_id: str) -> Select[Any]:
        return select(self._model).where(self._model.researcher_id == researcher_id)

    async def create(self, researcher_id: str, values: dict[str, Any]) -> Any:
        row = self._model(researcher_id=researcher_id, **values)
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, researcher_id: str, record_id: str | uuid.UUID) -> Any | None:
        parsed = parse_record_id(record_id)
        if parsed is None:
            return None
        stmt = self._owned(researcher_id).where(self._model.id == parsed)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(
        self,
        researcher_id: str,
        record_id: str | uuid.UUID,
        values: dict[str, Any],
    ) -> bool:
        """Apply ``values`` to an owned record. Returns False if none matched."""
        row = await self.get(researcher_id, record_id)
        if row is None:
            return False
        for key, value in values.items():
            setattr(row, key, value)
        await self._session.flush()
        return True

    async def delete(self, researcher_id: str, record_id: str | uuid.UUID) -> bool:
        parsed = parse_record_id(record_id)
        if parsed is None:
            return False
        stmt = delete(self._model).where(
            self._model.id == parsed,
            self._model.researcher_id == researcher_id,
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def list(self, researcher_id: str, filters: ActivityFilters | None = None) -> list[Any]:
        """Owned records matching ``filters``, newest primary date first.

        Ties on the primary date fall back to creation time, then id, so the
        order is stable across calls.
        """
        filters = filters or ActivityFilters()
        stmt = self._owned(researcher_id)

        if filters.search:
            columns = [getattr(self._model, name) for name in self._descriptor.search_columns]
            stmt = stmt.where(
                or_(*(column.icontains(filters.search, autoescape=True) for column in columns))
            )

        if filters.year is not None:
            if filters.month is not None:
                start = date(filters.year, filters.month, 1)
                end = date(filters.year + (filters.month == 12), filters.month % 12 + 1, 1)
            else:
                start = date(filters.year, 1, 1)
                end = date(filters.year + 1, 1, 1)
            stmt = stmt.where(self.primary_date >= start, self.primary_date < end)
        elif filters.month is not None:
            stmt = stmt.where(extract("month", self.primary_date) == filters.month)

        for name, value in filters.values.items():
            spec = self._descriptor.filters[name]
            column = getattr(self._model, spec.column)
            if spec.kind == "contains":
                stmt = stmt.where(column.icontains(value, autoescape=True))
            else:
                stmt = stmt.where(column == value)

        stmt = stmt.order_by(
            self.primary_date.desc(),
            self._model.created_at.desc(),
            self._model.id,
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_between(
        self,
        researcher_id: str,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Any]:
        """Owned records whose primary date is in ``[start, end]``."""
        stmt = self._owned(researcher_id)
        if start is not None:
            stmt = stmt.where(self.primary_date >= start)
        if end is not None:
            stmt = stmt.where(self.primary_date <= end)
        result = await self._session.execute(stmt.order_by(self.primary_date))
        return list(result.scalars().all())

    async def count(self, researcher_id: str) -> int:
        stmt = select(func.count()).select_from(self._model).where(
            self._model.researcher_id == researcher_id
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def primary_dates(self, researcher_id: str) -> list[date]:
        stmt = select(self.primary_date).where(self._model.researcher_id == researcher_id)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def count_by(self, researcher_id: str, column: str) -> dict[str, int]:
        """Record counts grouped by ``column`` value."""
        target = getattr(self._model, column)
        stmt = (
            select(target, func.count())
            .where(self._model.researcher_id == researcher_id)
            .group_by(target)
        )
        result = await self._session.execute(stmt)
        return {_group_key(value): int(total) for value, total in result.all()}


def _group_key(value: Any) -> str:
    if value is None:
        return "NONE"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)

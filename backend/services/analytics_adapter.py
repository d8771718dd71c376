"""Load activity records as unified analytics events.

Research, conferences, workshops and committees are read for one researcher
and window and reduced to ``UnifiedEvent`` values. A research item counts on
its publication month when published, otherwise on its submission date.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import Committee, Conference, Research, Workshop
from services.activity_registry import REGISTRY
from services.activity_repository import ActivityRepository
from services.activity_schemas import (
    ConferenceParticipation,
    ConferenceScope,
    PublishStatus,
    PublishType,
)
from services.analytics_models import EventCategory, EventScope, UnifiedEvent

PARTICIPATION_COMMITTEE = "committee_member"


def research_event_date(row: Research) -> date:
    """Date a research item counts on."""
    if row.publish_status == PublishStatus.PUBLISHED.value and row.year:
        return date(row.year, row.publish_month or 1, 1)
    return row.submission_date


def _research_scope(row: Research) -> EventScope:
    if row.scopus_quartile:
        return EventScope.INTERNATIONAL
    if row.publish_type == PublishType.CONFERENCE.value:
        return EventScope.REGIONAL
    return EventScope.LOCAL


def _conference_participation(row: Conference) -> str:
    if row.is_committee_member:
        return PARTICIPATION_COMMITTEE
    if row.participation_type == ConferenceParticipation.RESEARCHER.value:
        return ConferenceParticipation.RESEARCHER.value.lower()
    return ConferenceParticipation.ATTENDEE.value.lower()


async def _load_research(
    session: AsyncSession, researcher_id: str, start: date, end: date
) -> list[Research]:
    # Published items may count on a date outside the submission window, so
    # fetch both candidates and filter on the effective date afterwards.
    stmt = select(Research).where(
        Research.researcher_id == researcher_id,
        or_(
            and_(Research.submission_date >= start, Research.submission_date <= end),
            and_(
                Research.publish_status == PublishStatus.PUBLISHED.value,
                Research.year >= start.year,
                Research.year <= end.year,
            ),
        ),
    )
    result = await session.execute(stmt)
    return [row for row in result.scalars().all() if start <= research_event_date(row) <= end]


async def load_events(
    session: AsyncSession, researcher_id: str, start: date, end: date
) -> list[UnifiedEvent]:
    """All analytics events of the researcher dated within ``[start, end]``."""
    events: list[UnifiedEvent] = []

    for row in await _load_research(session, researcher_id, start, end):
        events.append(
            UnifiedEvent(
                day=research_event_date(row),
                category=EventCategory.RESEARCH,
                venue=row.publisher,
                scope=_research_scope(row),
                published=row.publish_status == PublishStatus.PUBLISHED.value,
            )
        )

    conferences: list[Conference] = await ActivityRepository(
        session, REGISTRY["conferences"]
    ).list_between(researcher_id, start, end)
    for row in conferences:
        events.append(
            UnifiedEvent(
                day=row.date,
                category=EventCategory.CONFERENCE,
                venue=row.sponsor,
                scope=(
                    EventScope.INTERNATIONAL
                    if row.scope == ConferenceScope.GLOBAL.value
                    else EventScope.LOCAL
                ),
                participation=_conference_participation(row),
            )
        )

    workshops: list[Workshop] = await ActivityRepository(
        session, REGISTRY["workshops"]
    ).list_between(researcher_id, start, end)
    for row in workshops:
        events.append(
            UnifiedEvent(day=row.date, category=EventCategory.WORKSHOP, venue=row.beneficiary)
        )

    committees: list[Committee] = await ActivityRepository(
        session, REGISTRY["committees"]
    ).list_between(researcher_id, start, end)
    for row in committees:
        events.append(
            UnifiedEvent(
                day=row.assignment_date,
                category=EventCategory.COMMITTEE,
                venue=row.title,
            )
        )

    return events

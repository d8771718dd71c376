"""Analytics payload assembly.

Resolves the requested window, loads unified events for it (and for the
comparison window and trailing heatmap window) and runs the pure aggregation
steps. Reads run one after another on the request's session.
"""

from __future__ import annotations

import time
from datetime import date

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.exceptions import PersistenceError, ValidationError
from app.logging_config import get_logger
from app.metrics import ANALYTICS_BUILD_DURATION, ANALYTICS_EVENTS_LOADED
from services.analytics_adapter import load_events
from services.analytics_aggregation import (
    build_comparison,
    build_conferences,
    build_heatmap,
    build_insights,
    build_kpis,
    build_performance,
    build_publications,
    build_timeline,
)
from services.analytics_models import AnalyticsFilters, AnalyticsPayload
from services.date_buckets import (
    Granularity,
    MAX_YEAR,
    MIN_YEAR,
    add_months,
    build_buckets,
    month_start,
    months_in_window,
    today_local,
)

logger = get_logger(__name__)


def resolve_filters(
    start: date | None = None,
    end: date | None = None,
    granularity: Granularity = Granularity.MONTH,
    compare: bool = False,
    compare_start: date | None = None,
    compare_end: date | None = None,
) -> AnalyticsFilters:
    """Fill defaults and check the primary window.

    The window defaults to January 1 of the current year through today. An
    inverted primary window, or any date outside the supported years, is
    rejected; an incomplete or inverted compare window just turns comparison
    off.
    """
    today = today_local()
    start = start or date(today.year, 1, 1)
    end = end or today
    bounds = {"from": start, "to": end}
    if compare:
        bounds.update(compare_from=compare_start, compare_to=compare_end)
    for field, day in bounds.items():
        if day is not None and not MIN_YEAR <= day.year <= MAX_YEAR:
            raise ValidationError(
                f"Dates must fall between {MIN_YEAR} and {MAX_YEAR}",
                details={"field": field},
            )
    if start > end:
        raise ValidationError(
            "The start date must be on or before the end date",
            details={"field": "from"},
        )

    if not compare or compare_start is None or compare_end is None or compare_start > compare_end:
        compare_start = compare_end = None

    return AnalyticsFilters(
        start=start,
        end=end,
        granularity=granularity,
        compare_start=compare_start,
        compare_end=compare_end,
    )


async def get_analytics_payload(
    session: AsyncSession,
    researcher_id: str,
    filters: AnalyticsFilters,
) -> AnalyticsPayload:
    """Build the full analytics payload for one researcher."""
    settings = get_settings()
    started = time.monotonic()

    try:
        events = await load_events(session, researcher_id, filters.start, filters.end)

        today = today_local()
        heatmap_start = month_start(add_months(today, -(settings.analytics_heatmap_months - 1)))
        heatmap_events = await load_events(session, researcher_id, heatmap_start, today)

        compare_events = None
        if filters.has_comparison:
            compare_events = await load_events(
                session, researcher_id, filters.compare_start, filters.compare_end
            )
    except SQLAlchemyError as exc:
        logger.exception("analytics_load_failed")
        raise PersistenceError("Failed to load analytics") from exc

    ANALYTICS_EVENTS_LOADED.observe(len(events))

    buckets = build_buckets(filters.start, filters.end, filters.granularity)
    timeline = build_timeline(events, buckets, filters.granularity)
    kpis = build_kpis(timeline, months_in_window(filters.start, filters.end))
    publications = build_publications(events, top_n=settings.analytics_top_venues)
    performance = build_performance(events, filters.start, filters.end)

    compare = None
    if compare_events is not None:
        compare_buckets = build_buckets(
            filters.compare_start, filters.compare_end, filters.granularity
        )
        compare = build_comparison(
            timeline, build_timeline(compare_events, compare_buckets, filters.granularity)
        )

    payload = AnalyticsPayload(
        timeline=timeline,
        kpis=kpis,
        heatmap=build_heatmap(heatmap_events, today, months=settings.analytics_heatmap_months),
        publications=publications,
        conferences=build_conferences(events),
        performance=performance,
        compare=compare,
        insights=build_insights(
            events,
            kpis,
            publications,
            performance,
            filters.end,
            recent_months=settings.analytics_recent_research_months,
        ),
    )

    duration = time.monotonic() - started
    ANALYTICS_BUILD_DURATION.labels(granularity=filters.granularity.value).observe(duration)
    logger.info(
        "analytics_payload_built",
        granularity=filters.granularity.value,
        events=len(events),
        buckets=len(timeline),
        compare=compare is not None,
        duration_ms=round(duration * 1000),
    )
    return payload

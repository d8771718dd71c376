"""Pure aggregation functions for the analytics payload.

Everything here works on already-loaded ``UnifiedEvent`` lists and bucket
sequences; no I/O. Empty input always yields zero-filled series and empty
breakdown lists, never an error.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import date

from services.analytics_adapter import PARTICIPATION_COMMITTEE
from services.analytics_models import (
    Comparison,
    ComparisonDelta,
    Conferences,
    EventCategory,
    EventScope,
    HeatmapCell,
    Insights,
    Kpis,
    NamedCount,
    Performance,
    Publications,
    TimelinePoint,
    UnifiedEvent,
    YearAverage,
    YearCount,
)
from services.date_buckets import (
    DateBucket,
    Granularity,
    add_months,
    bucket_index,
    bucket_key,
    build_buckets,
    month_start,
)

UNSPECIFIED_VENUE = "Unspecified"
OTHER_VENUES = "Other"

SCOPE_LABELS = {
    EventScope.INTERNATIONAL: "International",
    EventScope.REGIONAL: "Regional",
    EventScope.LOCAL: "Local",
}

PARTICIPATION_LABELS = {
    PARTICIPATION_COMMITTEE: "Committee member",
    "researcher": "Researcher",
    "attendee": "Attendee",
}

CATEGORY_LABELS = {
    EventCategory.RESEARCH: "Research",
    EventCategory.CONFERENCE: "Conferences",
    EventCategory.WORKSHOP: "Workshops",
    EventCategory.COMMITTEE: "Committees",
}

RECOMMENDATIONS = [
    "Increase conference participation over the coming period.",
    "Turn one ongoing activity into a published paper.",
    "Add a workshop or committee role in every period.",
]


def safe_percent_change(current: int, previous: int) -> int | None:
    """Whole-number percent change from ``previous`` to ``current``.

    Returns 0 when both are zero and None when growing from zero, since no
    finite percentage describes that change.
    """
    if previous == 0:
        return 0 if current == 0 else None
    return round((current - previous) / previous * 100)


# --- Timeline & KPIs ---


def build_timeline(
    events: Iterable[UnifiedEvent],
    buckets: list[DateBucket],
    granularity: Granularity,
) -> list[TimelinePoint]:
    """Count events per bucket. Every bucket appears, including empty ones."""
    points = [TimelinePoint(key=bucket.key, label=bucket.label) for bucket in buckets]
    index = bucket_index(buckets)

    for event in events:
        position = index.get(bucket_key(event.day, granularity))
        if position is None:
            continue
        point = points[position]
        point.total += 1
        setattr(point, event.category.value, getattr(point, event.category.value) + 1)
        if event.category == EventCategory.RESEARCH and event.published:
            point.research_published += 1

    for point in points:
        point.activities_core = point.research + point.conference + point.workshop
    return points


def build_kpis(timeline: list[TimelinePoint], months: int) -> Kpis:
    """Totals, monthly rate, best period and last-bucket growth."""
    total = sum(point.total for point in timeline)

    best_label = "-"
    if timeline:
        best = timeline[0]
        for point in timeline[1:]:
            if point.total > best.total:
                best = point
        best_label = best.label

    growth: int | None = 0
    if len(timeline) >= 2:
        growth = safe_percent_change(timeline[-1].total, timeline[-2].total)

    return Kpis(
        total=total,
        research=sum(point.research for point in timeline),
        research_published=sum(point.research_published for point in timeline),
        conference=sum(point.conference for point in timeline),
        workshop=sum(point.workshop for point in timeline),
        committee=sum(point.committee for point in timeline),
        monthly_rate=round(total / max(1, months), 1),
        best_period_label=best_label,
        growth_pct=growth,
    )


def build_comparison(current: list[TimelinePoint], previous: list[TimelinePoint]) -> Comparison:
    def total_of(points: list[TimelinePoint], name: str) -> int:
        return sum(getattr(point, name) for point in points)

    delta = ComparisonDelta(
        **{
            name: safe_percent_change(total_of(current, name), total_of(previous, name))
            for name in ("total", "research", "conference", "workshop", "committee")
        }
    )
    return Comparison(delta=delta, current=current, previous=previous)


def build_heatmap(events: Iterable[UnifiedEvent], today: date, months: int = 24) -> list[HeatmapCell]:
    """Monthly totals for the trailing ``months`` months ending with ``today``."""
    start = month_start(add_months(today, -(months - 1)))
    buckets = build_buckets(start, today, Granularity.MONTH)
    index = bucket_index(buckets)
    cells = [HeatmapCell(key=bucket.key, label=bucket.label) for bucket in buckets]
    for event in events:
        position = index.get(bucket_key(event.day, Granularity.MONTH))
        if position is not None:
            cells[position].value += 1
    return cells


# --- Breakdowns ---


def _shares(counter: Counter[str]) -> list[NamedCount]:
    return [NamedCount(name=name, value=value) for name, value in counter.items()]


def _yearly(counter: Counter[int]) -> list[YearCount]:
    return [YearCount(year=year, count=counter[year]) for year in sorted(counter)]


def build_publications(events: Iterable[UnifiedEvent], top_n: int = 8) -> Publications:
    """Venue ranking, scope shares and yearly counts of research events."""
    venues: Counter[str] = Counter()
    scopes: Counter[str] = Counter()
    years: Counter[int] = Counter()

    for event in events:
        if event.category != EventCategory.RESEARCH:
            continue
        venues[event.venue or UNSPECIFIED_VENUE] += 1
        if event.scope is not None:
            scopes[SCOPE_LABELS[event.scope]] += 1
        years[event.day.year] += 1

    # most_common keeps first-encountered order among equal counts
    ranked = venues.most_common()
    top_venues = [NamedCount(name=name, value=value) for name, value in ranked[:top_n]]
    rest = sum(value for _, value in ranked[top_n:])
    if rest:
        top_venues.append(NamedCount(name=OTHER_VENUES, value=rest))

    yearly = _yearly(years)
    average = round(sum(row.count for row in yearly) / len(yearly), 1) if yearly else 0.0
    peak = max((row.count for row in yearly), default=0)

    return Publications(
        top_venues=top_venues,
        scope_shares=_shares(scopes),
        yearly=yearly,
        average_per_year=average,
        peak_years=[row.year for row in yearly if row.count == peak] if yearly else [],
    )


def build_conferences(events: Iterable[UnifiedEvent]) -> Conferences:
    years: Counter[int] = Counter()
    scopes: Counter[str] = Counter()
    participation: Counter[str] = Counter()

    for event in events:
        if event.category != EventCategory.CONFERENCE:
            continue
        years[event.day.year] += 1
        scopes[SCOPE_LABELS[event.scope or EventScope.LOCAL]] += 1
        participation[PARTICIPATION_LABELS.get(event.participation or "attendee", "Attendee")] += 1

    return Conferences(
        yearly=_yearly(years),
        scope_shares=_shares(scopes),
        participation_shares=_shares(participation),
    )


def build_performance(events: list[UnifiedEvent], start: date, end: date) -> Performance:
    """Per-year totals for every year of the window, with best and worst year."""
    years_count = max(0, end.year - start.year + 1)
    counts: Counter[int] = Counter(event.day.year for event in events)
    total = len(events)
    average = round(total / years_count, 1) if years_count else 0.0

    yearly = [
        YearAverage(year=year, count=counts[year], average=average)
        for year in range(start.year, end.year + 1)
    ]

    best: YearCount | None = None
    worst: YearCount | None = None
    for row in yearly:
        if best is None or row.count > best.count:
            best = YearCount(year=row.year, count=row.count)
        if worst is None or row.count < worst.count:
            worst = YearCount(year=row.year, count=row.count)

    return Performance(
        yearly=yearly,
        total_activities=total,
        years_count=years_count,
        average_per_year=average,
        best_year=best,
        worst_year=worst,
    )


# --- Insights ---


def _growth_text(change: int | None, current_count: int) -> str:
    if change is None:
        return f"New activity this year: {current_count} records after none last year."
    if change > 0:
        return f"Your scientific activity rose {change}% compared with last year."
    if change < 0:
        return f"Your scientific activity fell {abs(change)}% compared with last year."
    return "Your scientific activity is steady compared with last year."


def _dominant_text(kpis: Kpis) -> str:
    if kpis.total == 0:
        return "No activity recorded in this period."
    counts = {
        EventCategory.RESEARCH: kpis.research,
        EventCategory.CONFERENCE: kpis.conference,
        EventCategory.WORKSHOP: kpis.workshop,
        EventCategory.COMMITTEE: kpis.committee,
    }
    category = max(counts, key=lambda c: counts[c])
    return (
        f"{CATEGORY_LABELS[category]} lead your activity with "
        f"{counts[category]} of {kpis.total} records."
    )


def build_insights(
    events: list[UnifiedEvent],
    kpis: Kpis,
    publications: Publications,
    performance: Performance,
    end: date,
    recent_months: int = 6,
) -> Insights:
    """Template sentences summarizing the computed aggregates."""
    current_year = end.year
    current_count = sum(1 for event in events if event.day.year == current_year)
    previous_count = sum(1 for event in events if event.day.year == current_year - 1)
    change = safe_percent_change(current_count, previous_count)

    warnings: list[str] = []
    if change is not None and change < 0:
        warnings.append(f"Activity dropped {abs(change)}% compared with last year.")
    recent_from = add_months(end, -recent_months)
    has_recent_research = any(
        event.category == EventCategory.RESEARCH and event.day >= recent_from for event in events
    )
    if not has_recent_research:
        warnings.append(f"No research recorded in the last {recent_months} months.")

    best = performance.best_year
    if best is not None and best.count > 0:
        highlight = f"Best scientific year: {best.year} with {best.count} activities."
    else:
        highlight = "Best scientific year: -"

    venue_text = None
    if publications.top_venues and publications.top_venues[0].name != OTHER_VENUES:
        top = publications.top_venues[0]
        venue_text = f"Top publication venue: {top.name} ({top.value})."

    return Insights(
        growth_text=_growth_text(change, current_count),
        dominant_text=_dominant_text(kpis),
        warnings=warnings,
        highlight_text=highlight,
        venue_text=venue_text,
        recommendations=list(RECOMMENDATIONS),
    )

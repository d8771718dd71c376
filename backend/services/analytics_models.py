"""Analytics payload models.

Pydantic models for the aggregated analytics response plus the unified event
record that every activity category is converted into before counting.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from pydantic import BaseModel, Field

from services.date_buckets import Granularity


class EventCategory(str, Enum):
    """Activity categories counted by analytics."""

    RESEARCH = "research"
    CONFERENCE = "conference"
    WORKSHOP = "workshop"
    COMMITTEE = "committee"


class EventScope(str, Enum):
    LOCAL = "local"
    REGIONAL = "regional"
    INTERNATIONAL = "international"


@dataclass(frozen=True)
class UnifiedEvent:
    """One activity reduced to the fields analytics needs."""

    day: date
    category: EventCategory
    venue: str | None = None
    scope: EventScope | None = None
    published: bool = False
    participation: str | None = None


class AnalyticsFilters(BaseModel):
    """Resolved analytics window. Compare bounds are None when disabled."""

    start: date
    end: date
    granularity: Granularity = Granularity.MONTH
    compare_start: date | None = None
    compare_end: date | None = None

    @property
    def has_comparison(self) -> bool:
        return (
            self.compare_start is not None
            and self.compare_end is not None
            and self.compare_start <= self.compare_end
        )


class TimelinePoint(BaseModel):
    key: str
    label: str
    total: int = 0
    research: int = 0
    research_published: int = 0
    conference: int = 0
    workshop: int = 0
    committee: int = 0
    activities_core: int = 0


class Kpis(BaseModel):
    total: int = 0
    research: int = 0
    research_published: int = 0
    conference: int = 0
    workshop: int = 0
    committee: int = 0
    monthly_rate: float = 0.0
    best_period_label: str = "-"
    growth_pct: int | None = Field(
        default=0,
        description="Change between the last two buckets; null when growing from zero",
    )


class HeatmapCell(BaseModel):
    key: str
    label: str
    value: int = 0


class NamedCount(BaseModel):
    name: str
    value: int


class YearCount(BaseModel):
    year: int
    count: int


class YearAverage(BaseModel):
    year: int
    count: int
    average: float


class Publications(BaseModel):
    top_venues: list[NamedCount] = Field(default_factory=list)
    scope_shares: list[NamedCount] = Field(default_factory=list)
    yearly: list[YearCount] = Field(default_factory=list)
    average_per_year: float = 0.0
    peak_years: list[int] = Field(default_factory=list)


class Conferences(BaseModel):
    yearly: list[YearCount] = Field(default_factory=list)
    scope_shares: list[NamedCount] = Field(default_factory=list)
    participation_shares: list[NamedCount] = Field(default_factory=list)


class Performance(BaseModel):
    yearly: list[YearAverage] = Field(default_factory=list)
    total_activities: int = 0
    years_count: int = 0
    average_per_year: float = 0.0
    best_year: YearCount | None = None
    worst_year: YearCount | None = None


class ComparisonDelta(BaseModel):
    """Percent change per category; null means new activity from zero."""

    total: int | None = 0
    research: int | None = 0
    conference: int | None = 0
    workshop: int | None = 0
    committee: int | None = 0


class Comparison(BaseModel):
    delta: ComparisonDelta
    current: list[TimelinePoint]
    previous: list[TimelinePoint]


class Insights(BaseModel):
    growth_text: str
    dominant_text: str
    warnings: list[str] = Field(default_factory=list)
    highlight_text: str
    venue_text: str | None = None
    recommendations: list[str] = Field(default_factory=list)


class AnalyticsPayload(BaseModel):
    timeline: list[TimelinePoint]
    kpis: Kpis
    heatmap: list[HeatmapCell]
    publications: Publications
    conferences: Conferences
    performance: Performance
    compare: Comparison | None = None
    insights: Insights

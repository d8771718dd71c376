"""Activity type registry.

Each activity type is described once here: its model, validation schema,
primary date column, searchable columns, list filters and the field
normalization applied after validation. The generic repository and service
work from these descriptors instead of per-type copies.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

from app.exceptions import ActivityTypeNotFoundError
from db.models import (
    Assignment,
    Base,
    Certificate,
    Committee,
    Conference,
    Journal,
    Position,
    Research,
    Reviewing,
    Seminar,
    Supervision,
    Volunteering,
    Workshop,
)
from services.activity_schemas import (
    GRADUATE_DEGREES,
    ActivitySchema,
    AssignmentSchema,
    CertificateSchema,
    CommitteeSchema,
    CompletionStatus,
    ConferenceSchema,
    JournalSchema,
    PositionSchema,
    PublishStatus,
    ResearchSchema,
    ReviewingSchema,
    SeminarSchema,
    SupervisionSchema,
    VolunteeringSchema,
    WorkshopSchema,
)

FilterKind = Literal["eq", "contains", "bool"]
Normalizer = Callable[[dict[str, Any]], dict[str, Any]]


@dataclass(frozen=True)
class FilterSpec:
    """A list filter: ``eq`` for exact match, ``contains`` for substring."""

    column: str
    kind: FilterKind = "eq"


@dataclass(frozen=True)
class ActivityDescriptor:
    slug: str
    label: str
    model: type[Base]
    schema: type[ActivitySchema]
    primary_date: str
    search_columns: tuple[str, ...]
    filters: dict[str, FilterSpec] = field(default_factory=dict)
    supports_month: bool = False
    breakdown_fields: tuple[str, ...] = ()
    normalize: Normalizer | None = None

    def apply_normalization(self, values: dict[str, Any]) -> dict[str, Any]:
        """Null out fields that do not apply to the record's state."""
        if self.normalize is None:
            return values
        return self.normalize(dict(values))


# --- Normalizers ---


def _normalize_assignment(values: dict[str, Any]) -> dict[str, Any]:
    if values.get("status") != CompletionStatus.COMPLETED.value:
        values["completion_date"] = None
    return values


def _normalize_journal(values: dict[str, Any]) -> dict[str, Any]:
    if values.get("is_active"):
        values["end_date"] = None
    if not values.get("impact_factor"):
        values["impact_factor"] = None
    return values


def _normalize_supervision(values: dict[str, Any]) -> dict[str, Any]:
    if values.get("status") != CompletionStatus.COMPLETED.value:
        values["end_date"] = None
    if values.get("degree_type") not in GRADUATE_DEGREES:
        values["supervision_type"] = None
    return values


def _normalize_volunteering(values: dict[str, Any]) -> dict[str, Any]:
    if values.get("is_ongoing"):
        values["end_date"] = None
    return values


def _normalize_research(values: dict[str, Any]) -> dict[str, Any]:
    if values.get("status") != CompletionStatus.COMPLETED.value:
        values["publish_status"] = None
    if values.get("publish_status") != PublishStatus.PUBLISHED.value:
        for key in ("publish_type", "publisher", "publish_month", "scopus_quartile"):
            values[key] = None
    return values


# --- Registry ---


REGISTRY: dict[str, ActivityDescriptor] = {
    d.slug: d
    for d in (
        ActivityDescriptor(
            slug="assignments",
            label="assignment",
            model=Assignment,
            schema=AssignmentSchema,
            primary_date="assignment_date",
            search_columns=("title", "description"),
            filters={"status": FilterSpec("status")},
            breakdown_fields=("status",),
            normalize=_normalize_assignment,
        ),
        ActivityDescriptor(
            slug="certificates",
            label="certificate",
            model=Certificate,
            schema=CertificateSchema,
            primary_date="date",
            search_columns=("title", "issuing_organization", "description"),
            filters={"issuing_organization": FilterSpec("issuing_organization", "contains")},
            supports_month=True,
        ),
        ActivityDescriptor(
            slug="journals",
            label="journal",
            model=Journal,
            schema=JournalSchema,
            primary_date="start_date",
            search_columns=("name", "description"),
            filters={
                "role": FilterSpec("role"),
                "type": FilterSpec("type"),
                "is_active": FilterSpec("is_active", "bool"),
            },
            breakdown_fields=("role", "type", "is_active"),
            normalize=_normalize_journal,
        ),
        ActivityDescriptor(
            slug="positions",
            label="position",
            model=Position,
            schema=PositionSchema,
            primary_date="position_date",
            search_columns=("title", "organization", "description"),
            filters={"organization": FilterSpec("organization", "contains")},
        ),
        ActivityDescriptor(
            slug="reviewing",
            label="reviewing",
            model=Reviewing,
            schema=ReviewingSchema,
            primary_date="date",
            search_columns=("title", "description"),
            filters={"type": FilterSpec("type"), "status": FilterSpec("status")},
            breakdown_fields=("type", "status"),
        ),
        ActivityDescriptor(
            slug="seminars",
            label="seminar",
            model=Seminar,
            schema=SeminarSchema,
            primary_date="date",
            search_columns=("title", "beneficiary", "location", "description"),
            filters={
                "beneficiary": FilterSpec("beneficiary", "contains"),
                "participation_type": FilterSpec("participation_type"),
            },
            breakdown_fields=("participation_type",),
        ),
        ActivityDescriptor(
            slug="supervision",
            label="supervision",
            model=Supervision,
            schema=SupervisionSchema,
            primary_date="start_date",
            search_columns=("student_name", "thesis_title", "description"),
            filters={
                "degree_type": FilterSpec("degree_type"),
                "status": FilterSpec("status"),
                "supervision_type": FilterSpec("supervision_type"),
            },
            breakdown_fields=("degree_type", "status"),
            normalize=_normalize_supervision,
        ),
        ActivityDescriptor(
            slug="volunteering",
            label="volunteering",
            model=Volunteering,
            schema=VolunteeringSchema,
            primary_date="start_date",
            search_columns=("title", "organization_name", "location", "description"),
            filters={"type": FilterSpec("type"), "role": FilterSpec("role")},
            breakdown_fields=("type", "role", "is_ongoing"),
            normalize=_normalize_volunteering,
        ),
        ActivityDescriptor(
            slug="conferences",
            label="conference",
            model=Conference,
            schema=ConferenceSchema,
            primary_date="date",
            search_columns=("title", "sponsor", "location"),
            filters={
                "scope": FilterSpec("scope"),
                "participation_type": FilterSpec("participation_type"),
            },
            breakdown_fields=("scope", "participation_type"),
        ),
        ActivityDescriptor(
            slug="workshops",
            label="workshop",
            model=Workshop,
            schema=WorkshopSchema,
            primary_date="date",
            search_columns=("title", "beneficiary", "location", "description"),
            filters={
                "beneficiary": FilterSpec("beneficiary", "contains"),
                "participation_type": FilterSpec("participation_type"),
            },
            breakdown_fields=("participation_type",),
        ),
        ActivityDescriptor(
            slug="committees",
            label="committee",
            model=Committee,
            schema=CommitteeSchema,
            primary_date="assignment_date",
            search_columns=("title", "description"),
            filters={"role": FilterSpec("role")},
            breakdown_fields=("role",),
        ),
        ActivityDescriptor(
            slug="research",
            label="research",
            model=Research,
            schema=ResearchSchema,
            primary_date="submission_date",
            search_columns=("title", "publisher", "description"),
            filters={
                "status": FilterSpec("status"),
                "publish_status": FilterSpec("publish_status"),
            },
            breakdown_fields=("status", "publish_status"),
            normalize=_normalize_research,
        ),
    )
}


def get_descriptor(slug: str) -> ActivityDescriptor:
    """Look up an activity type by its URL slug."""
    try:
        return REGISTRY[slug]
    except KeyError:
        raise ActivityTypeNotFoundError(slug) from None

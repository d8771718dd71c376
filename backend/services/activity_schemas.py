"""Validation schemas for researcher activity records.

Every activity type is validated here and nowhere else. A schema checks the
shape of the input (lengths, enum membership, numeric bounds) and the
cross-field business rules in the same ``model_validate`` call, and the
service layer runs it before any write, for creates and for updates alike.

Dates accept ISO strings, dates and datetimes; datetimes are converted to the
portal time zone first. No primary or end date may fall after today.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any
from zoneinfo import ZoneInfo

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from app.config import get_settings
from app.exceptions import ValidationError
from services.date_buckets import today_local


class RuleViolation(ValueError):
    """A cross-field rule failure attributed to one field."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(message)


# --- Field types ---


def _coerce_date(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(ZoneInfo(get_settings().timezone))
        return value.date()
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if len(text) > 10:
            try:
                return _coerce_date(datetime.fromisoformat(text))
            except ValueError:
                return text
        return text
    return value


def _not_future(value: date | None) -> date | None:
    if value is not None and value > today_local():
        raise PydanticCustomError("date_in_future", "Date cannot be in the future")
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


PastDate = Annotated[date, BeforeValidator(_coerce_date), AfterValidator(_not_future)]
OptionalPastDate = Annotated[
    date | None, BeforeValidator(_coerce_date), AfterValidator(_not_future)
]
ShortText = Annotated[str, Field(min_length=1, max_length=300)]
Text = Annotated[str, Field(min_length=2, max_length=300)]
Title = Annotated[str, Field(min_length=2, max_length=500)]
OptionalText = Annotated[str | None, BeforeValidator(_blank_to_none)]


# --- Enumerations ---


class CompletionStatus(str, Enum):
    COMPLETED = "COMPLETED"
    IN_PROGRESS = "IN_PROGRESS"


class JournalRole(str, Enum):
    EDITOR_IN_CHIEF = "EDITOR_IN_CHIEF"
    ASSOCIATE_EDITOR = "ASSOCIATE_EDITOR"
    EDITORIAL_BOARD = "EDITORIAL_BOARD"
    REVIEWER = "REVIEWER"


class JournalType(str, Enum):
    LOCAL = "LOCAL"
    INTERNATIONAL = "INTERNATIONAL"
    ARABIC = "ARABIC"
    ENGLISH = "ENGLISH"


class ReviewingType(str, Enum):
    RESEARCHES = "RESEARCHES"
    SCIENTIFIC_ARTICLES = "SCIENTIFIC_ARTICLES"
    THESES = "THESES"
    PATENTS = "PATENTS"
    SCIENTIFIC_CONSULTATIONS = "SCIENTIFIC_CONSULTATIONS"


class ReviewingStatus(str, Enum):
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class ParticipationType(str, Enum):
    """Seminar and workshop participation."""

    PRESENTER = "PRESENTER"
    PARTICIPANT = "PARTICIPANT"


class DegreeType(str, Enum):
    PHD = "PHD"
    MASTERS = "MASTERS"
    BACHELORS = "BACHELORS"
    HIGHER_DIPLOMA = "HIGHER_DIPLOMA"


class SupervisionType(str, Enum):
    SOLE = "SOLE"
    JOINT = "JOINT"


class VolunteeringType(str, Enum):
    HELPING_POOR_NEEDY = "HELPING_POOR_NEEDY"
    ENVIRONMENTAL_PROTECTION = "ENVIRONMENTAL_PROTECTION"
    EMERGENCY_SUPPORT = "EMERGENCY_SUPPORT"
    CULTURAL_EDUCATIONAL_ACTIVITIES = "CULTURAL_EDUCATIONAL_ACTIVITIES"
    HELPING_ELDERLY = "HELPING_ELDERLY"
    SPORTS_ACTIVITIES = "SPORTS_ACTIVITIES"
    SOCIAL_ACTIVITIES = "SOCIAL_ACTIVITIES"
    HOSPITALS_ORPHANAGES = "HOSPITALS_ORPHANAGES"
    EDUCATION_FIELD = "EDUCATION_FIELD"
    COMMUNITY_DEVELOPMENT = "COMMUNITY_DEVELOPMENT"
    HUMAN_RIGHTS = "HUMAN_RIGHTS"
    ARTS_CULTURE = "ARTS_CULTURE"
    TECHNOLOGY_COMMUNICATIONS = "TECHNOLOGY_COMMUNICATIONS"
    LAW_FIELD = "LAW_FIELD"
    HEALTH_FIELD = "HEALTH_FIELD"
    FIRST_AID = "FIRST_AID"
    ANIMAL_WELFARE = "ANIMAL_WELFARE"


class VolunteeringRole(str, Enum):
    COORDINATOR = "COORDINATOR"
    LEADER = "LEADER"
    PARTICIPANT = "PARTICIPANT"
    MEMBER = "MEMBER"
    VOLUNTEER = "VOLUNTEER"


class DurationUnit(str, Enum):
    YEAR = "YEAR"
    MONTH = "MONTH"
    DAY = "DAY"


class ConferenceScope(str, Enum):
    GLOBAL = "GLOBAL"
    LOCAL = "LOCAL"


class ConferenceParticipation(str, Enum):
    ATTENDEE = "ATTENDEE"
    RESEARCHER = "RESEARCHER"


class CommitteeRole(str, Enum):
    MEMBER = "MEMBER"
    CHAIRPERSON = "CHAIRPERSON"


class PublishStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


class PublishType(str, Enum):
    JOURNAL = "JOURNAL"
    CONFERENCE = "CONFERENCE"
    BOOK_CHAPTER = "BOOK_CHAPTER"
    REPORT = "REPORT"
    OTHER = "OTHER"


class ScopusQuartile(str, Enum):
    Q1 = "Q1"
    Q2 = "Q2"
    Q3 = "Q3"
    Q4 = "Q4"


GRADUATE_DEGREES = {DegreeType.PHD.value, DegreeType.MASTERS.value}


# --- Rule helpers ---


def _check_end_state(
    finished: bool,
    end: date | None,
    field: str,
    *,
    required: str,
    forbidden: str | None = None,
) -> None:
    if finished and end is None:
        raise RuleViolation(field, required)
    if not finished and end is not None and forbidden:
        raise RuleViolation(field, forbidden)


def _check_order(start: date | None, end: date | None, field: str, message: str) -> None:
    if start is not None and end is not None and end < start:
        raise RuleViolation(field, message)


# --- Schemas ---


class ActivitySchema(BaseModel):
    """Base schema: enum values stored as plain strings, text trimmed."""

    model_config = ConfigDict(
        use_enum_values=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class AssignmentSchema(ActivitySchema):
    title: Title
    assignment_date: PastDate
    status: CompletionStatus
    completion_date: OptionalPastDate = None
    description: OptionalText = None

    @model_validator(mode="after")
    def _completion_rules(self) -> AssignmentSchema:
        _check_end_state(
            self.status == CompletionStatus.COMPLETED,
            self.completion_date,
            "completion_date",
            required="A completed assignment requires a completion date",
            forbidden="An assignment in progress cannot have a completion date",
        )
        _check_order(
            self.assignment_date,
            self.completion_date,
            "completion_date",
            "Completion date must be on or after the assignment date",
        )
        return self


class CertificateSchema(ActivitySchema):
    title: Title
    issuing_organization: Text
    date: PastDate
    description: OptionalText = None


class JournalSchema(ActivitySchema):
    name: Text
    role: JournalRole
    type: JournalType
    start_date: PastDate
    is_active: bool
    end_date: OptionalPastDate = None
    impact_factor: float | None = Field(default=None, gt=0)
    description: OptionalText = None

    @field_validator("impact_factor", mode="before")
    @classmethod
    def _blank_impact_factor(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @model_validator(mode="after")
    def _membership_rules(self) -> JournalSchema:
        _check_end_state(
            not self.is_active,
            self.end_date,
            "end_date",
            required="An inactive journal membership requires an end date",
        )
        _check_order(
            self.start_date,
            self.end_date,
            "end_date",
            "End date must be on or after the start date",
        )
        return self


class PositionSchema(ActivitySchema):
    title: Text
    position_date: PastDate
    duration_years: int = Field(default=0, ge=0)
    duration_months: int = Field(default=0, ge=0, le=11)
    duration_days: int = Field(default=0, ge=0, le=31)
    organization: Text
    description: OptionalText = None

    @model_validator(mode="after")
    def _duration_rules(self) -> PositionSchema:
        if not (self.duration_years or self.duration_months or self.duration_days):
            raise RuleViolation(
                "duration_years",
                "Position duration must be at least one day, month or year",
            )
        return self


class ReviewingSchema(ActivitySchema):
    title: Title
    type: ReviewingType
    date: PastDate
    status: ReviewingStatus
    description: OptionalText = None


class SeminarSchema(ActivitySchema):
    title: Title
    date: PastDate
    beneficiary: Text
    location: Text
    participation_type: ParticipationType
    description: OptionalText = None


class WorkshopSchema(SeminarSchema):
    pass


class SupervisionSchema(ActivitySchema):
    student_name: Annotated[str, Field(min_length=2, max_length=200)]
    degree_type: DegreeType
    thesis_title: Title
    start_date: PastDate
    end_date: OptionalPastDate = None
    status: CompletionStatus
    supervision_type: SupervisionType | None = None
    description: OptionalText = None

    @model_validator(mode="after")
    def _supervision_rules(self) -> SupervisionSchema:
        _check_end_state(
            self.status == CompletionStatus.COMPLETED,
            self.end_date,
            "end_date",
            required="A completed supervision requires an end date",
            forbidden="A supervision in progress cannot have an end date",
        )
        _check_order(
            self.start_date,
            self.end_date,
            "end_date",
            "End date must be on or after the start date",
        )
        graduate = self.degree_type in GRADUATE_DEGREES
        if graduate and self.supervision_type is None:
            raise RuleViolation(
                "supervision_type",
                "Supervision type is required for PhD and Masters degrees",
            )
        if not graduate and self.supervision_type is not None:
            raise RuleViolation(
                "supervision_type",
                "Supervision type only applies to PhD and Masters degrees",
            )
        return self


class VolunteeringSchema(ActivitySchema):
    title: Title
    type: VolunteeringType
    role: VolunteeringRole
    organization_name: Text
    start_date: PastDate
    end_date: OptionalPastDate = None
    is_ongoing: bool
    duration_years: int = Field(default=0, ge=0)
    duration_months: int = Field(default=0, ge=0)
    duration_days: int = Field(default=0, ge=0)
    duration_unit: DurationUnit
    location: OptionalText = None
    beneficiaries: OptionalText = None
    certificates: OptionalText = None
    description: OptionalText = None

    @model_validator(mode="after")
    def _volunteering_rules(self) -> VolunteeringSchema:
        _check_end_state(
            not self.is_ongoing,
            self.end_date,
            "end_date",
            required="A finished volunteering activity requires an end date",
            forbidden="An ongoing volunteering activity cannot have an end date",
        )
        _check_order(
            self.start_date,
            self.end_date,
            "end_date",
            "End date must be on or after the start date",
        )
        no_duration = not (self.duration_years or self.duration_months or self.duration_days)
        if not self.is_ongoing and no_duration:
            raise RuleViolation(
                "duration_years",
                "A finished volunteering activity needs a duration of at least one day, month or year",
            )
        return self


class ConferenceSchema(ActivitySchema):
    title: ShortText
    sponsor: ShortText
    date: PastDate
    location: ShortText
    scope: ConferenceScope
    is_committee_member: bool = False
    participation_type: ConferenceParticipation


class CommitteeSchema(ActivitySchema):
    title: Title
    assignment_date: PastDate
    role: CommitteeRole
    description: OptionalText = None


class ResearchSchema(ActivitySchema):
    title: Annotated[str, Field(min_length=1, max_length=500)]
    submission_date: PastDate
    status: CompletionStatus
    year: int = Field(ge=1900, le=2100)
    publish_status: PublishStatus | None = None
    publish_type: PublishType | None = None
    publisher: OptionalText = None
    publish_month: int | None = Field(default=None, ge=1, le=12)
    scopus_quartile: ScopusQuartile | None = None
    description: OptionalText = None

    @model_validator(mode="after")
    def _publication_rules(self) -> ResearchSchema:
        if self.status != CompletionStatus.COMPLETED:
            if self.publish_status is not None:
                raise RuleViolation(
                    "publish_status",
                    "Publish status is only allowed for completed research",
                )
            return self
        if self.publish_status != PublishStatus.PUBLISHED:
            return self
        if self.publish_type is None:
            raise RuleViolation("publish_type", "Publish type is required for published research")
        if not self.publisher:
            raise RuleViolation("publisher", "Publisher is required for published research")
        if date(self.year, self.publish_month or 1, 1) > today_local():
            raise RuleViolation("year", "Publication date cannot be in the future")
        return self


# --- Entry point ---


def first_error(exc: PydanticValidationError) -> tuple[str, str | None]:
    """Return the first failing field's message and the field name."""
    for err in exc.errors():
        ctx_error = (err.get("ctx") or {}).get("error")
        if isinstance(ctx_error, RuleViolation):
            return ctx_error.message, ctx_error.field
        field = str(err["loc"][0]) if err["loc"] else None
        if field is None:
            return err["msg"], None
        label = field.replace("_", " ").capitalize()
        return f"{label}: {err['msg']}", field
    return "Invalid input", None


def validate_activity(schema: type[ActivitySchema], data: Mapping[str, Any]) -> dict[str, Any]:
    """Validate raw input against ``schema``.

    Returns:
        The validated values as plain Python types (enum values as strings).

    Raises:
        ValidationError: first failing field, with the field name in details.
    """
    try:
        model = schema.model_validate(dict(data))
    except PydanticValidationError as exc:
        message, field = first_error(exc)
        raise ValidationError(message, details={"field": field} if field else None) from exc
    return model.model_dump()

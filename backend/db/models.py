"""Database models for researcher activity records.

Every table is owned by a researcher through ``researcher_id``; all reads and
writes go through owner-scoped repository calls. Categorical columns hold the
enum value strings validated in ``services.activity_schemas``.
"""

from __future__ import annotations

import uuid
import datetime as dt

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class ActivityMixin:
    """Columns shared by every activity table."""

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    researcher_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, researcher={self.researcher_id})>"


class Assignment(ActivityMixin, Base):
    """Administrative assignment given to a researcher."""

    __tablename__ = "assignments"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    assignment_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)  # COMPLETED, IN_PROGRESS
    completion_date: Mapped[dt.date | None] = mapped_column(Date)
    description: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (Index("ix_assignments_owner_date", "researcher_id", "assignment_date"),)


class Certificate(ActivityMixin, Base):
    """Certificate or award received."""

    __tablename__ = "certificates"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    issuing_organization: Mapped[str] = mapped_column(String(300), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (Index("ix_certificates_owner_date", "researcher_id", "date"),)


class Journal(ActivityMixin, Base):
    """Editorial role held in a journal."""

    __tablename__ = "journals"

    name: Mapped[str] = mapped_column(String(300), nullable=False)
    role: Mapped[str] = mapped_column(String(30), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    end_date: Mapped[dt.date | None] = mapped_column(Date)
    impact_factor: Mapped[float | None] = mapped_column(Float)
    description: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (Index("ix_journals_owner_date", "researcher_id", "start_date"),)


class Position(ActivityMixin, Base):
    """Position held in an organization."""

    __tablename__ = "positions"

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    position_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    duration_years: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    duration_months: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    organization: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (Index("ix_positions_owner_date", "researcher_id", "position_date"),)


class Reviewing(ActivityMixin, Base):
    """Scientific reviewing task."""

    __tablename__ = "reviewing"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[str] = mapped_column(String(40), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (Index("ix_reviewing_owner_date", "researcher_id", "date"),)


class Seminar(ActivityMixin, Base):
    """Seminar given or attended."""

    __tablename__ = "seminars"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    beneficiary: Mapped[str] = mapped_column(String(300), nullable=False)
    location: Mapped[str] = mapped_column(String(300), nullable=False)
    participation_type: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (Index("ix_seminars_owner_date", "researcher_id", "date"),)


class Supervision(ActivityMixin, Base):
    """Student thesis or project supervision."""

    __tablename__ = "supervisions"

    student_name: Mapped[str] = mapped_column(String(200), nullable=False)
    degree_type: Mapped[str] = mapped_column(String(20), nullable=False)
    thesis_title: Mapped[str] = mapped_column(String(500), nullable=False)
    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[dt.date | None] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    supervision_type: Mapped[str | None] = mapped_column(String(10))  # PHD/MASTERS only
    description: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (Index("ix_supervisions_owner_date", "researcher_id", "start_date"),)


class Volunteering(ActivityMixin, Base):
    """Volunteer work."""

    __tablename__ = "volunteering"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[str] = mapped_column(String(40), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    organization_name: Mapped[str] = mapped_column(String(300), nullable=False)
    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[dt.date | None] = mapped_column(Date)
    is_ongoing: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    duration_years: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    duration_months: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    duration_unit: Mapped[str] = mapped_column(String(10), nullable=False)
    location: Mapped[str | None] = mapped_column(String(300))
    beneficiaries: Mapped[str | None] = mapped_column(String(300))
    certificates: Mapped[str | None] = mapped_column(String(300))
    description: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (Index("ix_volunteering_owner_date", "researcher_id", "start_date"),)


class Conference(ActivityMixin, Base):
    """Conference participation."""

    __tablename__ = "conferences"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    sponsor: Mapped[str] = mapped_column(String(300), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    location: Mapped[str] = mapped_column(String(300), nullable=False)
    scope: Mapped[str] = mapped_column(String(10), nullable=False)  # GLOBAL, LOCAL
    is_committee_member: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    participation_type: Mapped[str] = mapped_column(String(20), nullable=False)

    __table_args__ = (Index("ix_conferences_owner_date", "researcher_id", "date"),)


class Workshop(ActivityMixin, Base):
    """Workshop given or attended."""

    __tablename__ = "workshops"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    beneficiary: Mapped[str] = mapped_column(String(300), nullable=False)
    location: Mapped[str] = mapped_column(String(300), nullable=False)
    participation_type: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (Index("ix_workshops_owner_date", "researcher_id", "date"),)


class Committee(ActivityMixin, Base):
    """Committee membership."""

    __tablename__ = "committees"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    assignment_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)  # MEMBER, CHAIRPERSON
    description: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (Index("ix_committees_owner_date", "researcher_id", "assignment_date"),)


class Research(ActivityMixin, Base):
    """Research work and its publication details."""

    __tablename__ = "research"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    submission_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    publish_status: Mapped[str | None] = mapped_column(String(20))  # DRAFT, PUBLISHED
    publish_type: Mapped[str | None] = mapped_column(String(20))
    publisher: Mapped[str | None] = mapped_column(String(300))
    publish_month: Mapped[int | None] = mapped_column(Integer)
    scopus_quartile: Mapped[str | None] = mapped_column(String(2))
    description: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (Index("ix_research_owner_date", "researcher_id", "submission_date"),)

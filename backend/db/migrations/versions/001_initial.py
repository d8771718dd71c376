"""001 create activity tables

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# table name -> primary date column
TABLES: dict[str, str] = {
    "assignments": "assignment_date",
    "certificates": "date",
    "journals": "start_date",
    "positions": "position_date",
    "reviewing": "date",
    "seminars": "date",
    "supervisions": "start_date",
    "volunteering": "start_date",
    "conferences": "date",
    "workshops": "date",
    "committees": "assignment_date",
    "research": "submission_date",
}


def _owned_table(name: str, *columns: sa.Column) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("researcher_id", sa.String(64), nullable=False, index=True),
        *columns,
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index(f"ix_{name}_owner_date", name, ["researcher_id", TABLES[name]])


def upgrade() -> None:
    _owned_table(
        "assignments",
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("assignment_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("completion_date", sa.Date()),
        sa.Column("description", sa.Text()),
    )

    _owned_table(
        "certificates",
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("issuing_organization", sa.String(300), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text()),
    )

    _owned_table(
        "journals",
        sa.Column("name", sa.String(300), nullable=False),
        sa.Column("role", sa.String(30), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("end_date", sa.Date()),
        sa.Column("impact_factor", sa.Float()),
        sa.Column("description", sa.Text()),
    )

    _owned_table(
        "positions",
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("position_date", sa.Date(), nullable=False),
        sa.Column("duration_years", sa.Integer(), server_default="0", nullable=False),
        sa.Column("duration_months", sa.Integer(), server_default="0", nullable=False),
        sa.Column("duration_days", sa.Integer(), server_default="0", nullable=False),
        sa.Column("organization", sa.String(300), nullable=False),
        sa.Column("description", sa.Text()),
    )

    _owned_table(
        "reviewing",
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("type", sa.String(40), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("description", sa.Text()),
    )

    for name in ("seminars", "workshops"):
        _owned_table(
            name,
            sa.Column("title", sa.String(500), nullable=False),
            sa.Column("date", sa.Date(), nullable=False),
            sa.Column("beneficiary", sa.String(300), nullable=False),
            sa.Column("location", sa.String(300), nullable=False),
            sa.Column("participation_type", sa.String(20), nullable=False),
            sa.Column("description", sa.Text()),
        )

    _owned_table(
        "supervisions",
        sa.Column("student_name", sa.String(200), nullable=False),
        sa.Column("degree_type", sa.String(20), nullable=False),
        sa.Column("thesis_title", sa.String(500), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date()),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("supervision_type", sa.String(10)),
        sa.Column("description", sa.Text()),
    )

    _owned_table(
        "volunteering",
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("type", sa.String(40), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("organization_name", sa.String(300), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date()),
        sa.Column("is_ongoing", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("duration_years", sa.Integer(), server_default="0", nullable=False),
        sa.Column("duration_months", sa.Integer(), server_default="0", nullable=False),
        sa.Column("duration_days", sa.Integer(), server_default="0", nullable=False),
        sa.Column("duration_unit", sa.String(10), nullable=False),
        sa.Column("location", sa.String(300)),
        sa.Column("beneficiaries", sa.String(300)),
        sa.Column("certificates", sa.String(300)),
        sa.Column("description", sa.Text()),
    )

    _owned_table(
        "conferences",
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("sponsor", sa.String(300), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("location", sa.String(300), nullable=False),
        sa.Column("scope", sa.String(10), nullable=False),
        sa.Column("is_committee_member", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("participation_type", sa.String(20), nullable=False),
    )

    _owned_table(
        "committees",
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("assignment_date", sa.Date(), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("description", sa.Text()),
    )

    _owned_table(
        "research",
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("submission_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("publish_status", sa.String(20)),
        sa.Column("publish_type", sa.String(20)),
        sa.Column("publisher", sa.String(300)),
        sa.Column("publish_month", sa.Integer()),
        sa.Column("scopus_quartile", sa.String(2)),
        sa.Column("description", sa.Text()),
    )


def downgrade() -> None:
    for name in reversed(list(TABLES)):
        op.drop_index(f"ix_{name}_owner_date", table_name=name)
        op.drop_table(name)

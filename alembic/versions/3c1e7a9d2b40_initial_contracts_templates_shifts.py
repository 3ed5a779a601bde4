"""Initial: locations, contracts, shift templates, shifts, outbox

Revision ID: 3c1e7a9d2b40
Revises:
Create Date: 2026-10-19 09:12:44.103318
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1e7a9d2b40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CONTRACT_STATUS = ("draft", "pending_approval", "schedule_shifts", "active", "expired", "terminated")
CONTRACT_TYPE = ("service_contract", "working_contract", "manager_working_contract", "extended_working_contract")
DOCUMENT_CLASSIFICATION = ("normal", "near_expired", "expired_document")
SHIFT_STATUS = ("draft", "scheduled", "in_progress", "completed", "cancelled")

DAY_COLUMNS = (
    "applies_monday", "applies_tuesday", "applies_wednesday", "applies_thursday",
    "applies_friday", "applies_saturday", "applies_sunday",
)


def _day_flags() -> list[sa.Column]:
    return [sa.Column(name, sa.Boolean(), nullable=False, server_default=sa.false()) for name in DAY_COLUMNS]


def upgrade() -> None:
    op.create_table(
        "locations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("latitude", sa.Numeric(10, 7), nullable=True),
        sa.Column("longitude", sa.Numeric(10, 7), nullable=True),
        sa.Column("geofence_radius_m", sa.Integer(), nullable=False, server_default=sa.text("100")),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code", name="uq_location_code"),
    )

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "contracts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("contract_number", sa.String(length=64), nullable=False),
        sa.Column("contract_title", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("contract_type", sa.Enum(*CONTRACT_TYPE, name="contract_type"), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", sa.Enum(*CONTRACT_STATUS, name="contract_status"), nullable=False, server_default="draft"),
        sa.Column("auto_generate_shifts", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("generate_shifts_advance_days", sa.Integer(), nullable=False, server_default=sa.text("30")),
        sa.Column("work_on_public_holidays", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("work_on_customer_closed_days", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by", sa.Integer(), nullable=True),
        sa.Column("activated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("activated_by", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("contract_number", name="uq_contract_number"),
    )
    op.create_index(op.f("ix_contracts_customer_id"), "contracts", ["customer_id"], unique=False)

    op.create_table(
        "contract_locations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("contract_id", sa.Integer(), nullable=False),
        sa.Column("location_id", sa.Integer(), nullable=False),
        sa.Column("guards_required", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("coverage_type", sa.String(length=40), nullable=False, server_default="24x7"),
        sa.Column("service_start_date", sa.Date(), nullable=True),
        sa.Column("service_end_date", sa.Date(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["contract_id"], ["contracts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_contract_locations_contract_id"), "contract_locations", ["contract_id"], unique=False)
    op.create_index(op.f("ix_contract_locations_location_id"), "contract_locations", ["location_id"], unique=False)

    op.create_table(
        "contract_shift_schedules",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("contract_id", sa.Integer(), nullable=False),
        sa.Column("location_id", sa.Integer(), nullable=True),
        sa.Column("schedule_name", sa.String(length=255), nullable=False),
        sa.Column("schedule_type", sa.String(length=40), nullable=False, server_default="regular"),
        sa.Column("shift_start_time", sa.Time(), nullable=False),
        sa.Column("shift_end_time", sa.Time(), nullable=False),
        sa.Column("crosses_midnight", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("duration_hours", sa.Numeric(6, 2), nullable=False),
        sa.Column("break_minutes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("guards_per_shift", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("recurrence_type", sa.String(length=20), nullable=False, server_default="weekly"),
        *_day_flags(),
        sa.Column("applies_on_public_holidays", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("applies_on_weekends", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("skip_when_location_closed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("requires_armed_guard", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("requires_supervisor", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("min_experience_months", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("effective_from", sa.Date(), nullable=False),
        sa.Column("effective_to", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["contract_id"], ["contracts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_contract_shift_schedules_contract_id"), "contract_shift_schedules", ["contract_id"], unique=False)
    op.create_index(
        "ix_contract_schedules_contract_active", "contract_shift_schedules", ["contract_id", "is_active"], unique=False
    )

    op.create_table(
        "contract_documents",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("contract_id", sa.Integer(), nullable=False),
        sa.Column("document_name", sa.String(length=255), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "classification",
            sa.Enum(*DOCUMENT_CLASSIFICATION, name="document_classification"),
            nullable=False,
            server_default="normal",
        ),
        sa.Column("document_email", sa.String(length=255), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["contract_id"], ["contracts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_contract_documents_contract_id"), "contract_documents", ["contract_id"], unique=False)
    op.create_index("ix_contract_documents_sweep", "contract_documents", ["classification", "end_date"], unique=False)

    op.create_table(
        "shift_templates",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("contract_id", sa.Integer(), nullable=True),
        sa.Column("manager_id", sa.Integer(), nullable=True),
        sa.Column("template_code", sa.String(length=120), nullable=False),
        sa.Column("template_name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("duration_hours", sa.Numeric(6, 2), nullable=False),
        sa.Column("break_minutes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_night_shift", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_overnight", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("crosses_midnight", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_day_flags(),
        sa.Column("min_guards_required", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("max_guards_allowed", sa.Integer(), nullable=True),
        sa.Column("optimal_guards", sa.Integer(), nullable=True),
        sa.Column("location_id", sa.Integer(), nullable=True),
        sa.Column("location_name", sa.String(length=255), nullable=True),
        sa.Column("location_address", sa.String(length=500), nullable=True),
        sa.Column("location_latitude", sa.Numeric(10, 7), nullable=True),
        sa.Column("location_longitude", sa.Numeric(10, 7), nullable=True),
        sa.Column("effective_from", sa.Date(), nullable=True),
        sa.Column("effective_to", sa.Date(), nullable=True),
        sa.Column("status", sa.String(length=40), nullable=False, server_default="await_create_shift"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["contract_id"], ["contracts.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_shift_templates_contract_id"), "shift_templates", ["contract_id"], unique=False)
    op.create_index(op.f("ix_shift_templates_location_id"), "shift_templates", ["location_id"], unique=False)
    op.create_index(
        "uq_shift_templates_code_live", "shift_templates", ["template_code"], unique=True,
        sqlite_where=sa.text("is_deleted = 0"),
        postgresql_where=sa.text("is_deleted = false"),
    )

    op.create_table(
        "shifts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("location_id", sa.Integer(), nullable=False),
        sa.Column("contract_id", sa.Integer(), nullable=True),
        sa.Column("shift_template_id", sa.Integer(), nullable=True),
        sa.Column("shift_date", sa.Date(), nullable=False),
        sa.Column("start_at", sa.DateTime(timezone=False), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=False), nullable=False),
        sa.Column("total_duration_minutes", sa.Integer(), nullable=False),
        sa.Column("work_duration_minutes", sa.Integer(), nullable=False),
        sa.Column("work_duration_hours", sa.Numeric(6, 2), nullable=False),
        sa.Column("break_minutes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_night_shift", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("required_guards", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("assigned_guards_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.Enum(*SHIFT_STATUS, name="shift_status"), nullable=False, server_default="draft"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["contract_id"], ["contracts.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["shift_template_id"], ["shift_templates.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_shifts_location_id"), "shifts", ["location_id"], unique=False)
    op.create_index(op.f("ix_shifts_contract_id"), "shifts", ["contract_id"], unique=False)
    op.create_index("ix_shifts_location_start", "shifts", ["location_id", "start_at"], unique=False)
    op.create_index("ix_shifts_location_end", "shifts", ["location_id", "end_at"], unique=False)

    op.create_table(
        "outbox_messages",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_type", sa.String(length=100), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_outbox_pending", "outbox_messages", ["published_at", "id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_outbox_pending", table_name="outbox_messages")
    op.drop_table("outbox_messages")

    for idx in ("ix_shifts_location_end", "ix_shifts_location_start", op.f("ix_shifts_contract_id"), op.f("ix_shifts_location_id")):
        op.drop_index(idx, table_name="shifts")
    op.drop_table("shifts")

    for idx in ("uq_shift_templates_code_live", op.f("ix_shift_templates_location_id"), op.f("ix_shift_templates_contract_id")):
        op.drop_index(idx, table_name="shift_templates")
    op.drop_table("shift_templates")

    op.drop_index("ix_contract_documents_sweep", table_name="contract_documents")
    op.drop_index(op.f("ix_contract_documents_contract_id"), table_name="contract_documents")
    op.drop_table("contract_documents")

    op.drop_index("ix_contract_schedules_contract_active", table_name="contract_shift_schedules")
    op.drop_index(op.f("ix_contract_shift_schedules_contract_id"), table_name="contract_shift_schedules")
    op.drop_table("contract_shift_schedules")

    op.drop_index(op.f("ix_contract_locations_location_id"), table_name="contract_locations")
    op.drop_index(op.f("ix_contract_locations_contract_id"), table_name="contract_locations")
    op.drop_table("contract_locations")

    op.drop_index(op.f("ix_contracts_customer_id"), table_name="contracts")
    op.drop_table("contracts")
    op.drop_table("customers")
    op.drop_table("locations")

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for enum_name in ("shift_status", "document_classification", "contract_status", "contract_type"):
            sa.Enum(name=enum_name).drop(bind, checkfirst=True)

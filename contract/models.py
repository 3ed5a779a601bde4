from __future__ import annotations
from typing import TYPE_CHECKING
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from sqlalchemy import (
    Boolean, Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, Time,
    Enum as SAEnum, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from core.database import Base

if TYPE_CHECKING:
    from location.models import Location


class ContractStatus(str, Enum):
    draft = "draft"
    pending_approval = "pending_approval"
    schedule_shifts = "schedule_shifts"
    active = "active"
    expired = "expired"
    terminated = "terminated"


class ContractType(str, Enum):
    service_contract = "service_contract"
    working_contract = "working_contract"
    manager_working_contract = "manager_working_contract"
    extended_working_contract = "extended_working_contract"


class DocumentClassification(str, Enum):
    normal = "normal"
    near_expired = "near_expired"
    expired_document = "expired_document"


class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(primary_key=True)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Contract(Base):
    __tablename__ = "contracts"

    id: Mapped[int] = mapped_column(primary_key=True)
    contract_number: Mapped[str] = mapped_column(String(64), nullable=False)
    contract_title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    contract_type: Mapped[ContractType] = mapped_column(
        SAEnum(ContractType, name="contract_type"), nullable=False, default=ContractType.service_contract
    )
    customer_id: Mapped[int | None] = mapped_column(
        ForeignKey("customers.id", ondelete="SET NULL"), index=True, nullable=True
    )

    start_date: Mapped[date] = mapped_column(Date(), nullable=False)
    end_date:   Mapped[date] = mapped_column(Date(), nullable=False)

    status: Mapped[ContractStatus] = mapped_column(
        SAEnum(ContractStatus, name="contract_status"), nullable=False, default=ContractStatus.draft
    )

    auto_generate_shifts: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    generate_shifts_advance_days: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    work_on_public_holidays: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    work_on_customer_closed_days: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    approved_at:  Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_by:  Mapped[int | None] = mapped_column(Integer, nullable=True)
    activated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    activated_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text(), nullable=True)

    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    updated_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    customer: Mapped["Customer | None"] = relationship("Customer")
    locations: Mapped[list["ContractLocation"]] = relationship(
        "ContractLocation", back_populates="contract", order_by="ContractLocation.id"
    )
    shift_schedules: Mapped[list["ContractShiftSchedule"]] = relationship(
        "ContractShiftSchedule", back_populates="contract", order_by="ContractShiftSchedule.id"
    )
    documents: Mapped[list["ContractDocument"]] = relationship("ContractDocument", back_populates="contract")

    __table_args__ = (
        UniqueConstraint("contract_number", name="uq_contract_number"),
    )


class ContractLocation(Base):
    __tablename__ = "contract_locations"

    id: Mapped[int] = mapped_column(primary_key=True)
    contract_id: Mapped[int] = mapped_column(ForeignKey("contracts.id", ondelete="CASCADE"), index=True)
    location_id: Mapped[int] = mapped_column(ForeignKey("locations.id", ondelete="CASCADE"), index=True)

    guards_required: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    coverage_type: Mapped[str] = mapped_column(String(40), nullable=False, default="24x7")
    service_start_date: Mapped[date | None] = mapped_column(Date(), nullable=True)
    service_end_date:   Mapped[date | None] = mapped_column(Date(), nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    contract: Mapped["Contract"] = relationship("Contract", back_populates="locations")
    location: Mapped["Location"] = relationship("Location", lazy="joined")


class ContractShiftSchedule(Base):
    __tablename__ = "contract_shift_schedules"

    id: Mapped[int] = mapped_column(primary_key=True)
    contract_id: Mapped[int] = mapped_column(ForeignKey("contracts.id", ondelete="CASCADE"), index=True)
    location_id: Mapped[int | None] = mapped_column(
        ForeignKey("locations.id", ondelete="SET NULL"), nullable=True
    )

    schedule_name: Mapped[str] = mapped_column(String(255), nullable=False)
    schedule_type: Mapped[str] = mapped_column(String(40), nullable=False, default="regular")

    shift_start_time: Mapped[time] = mapped_column(Time, nullable=False)
    shift_end_time:   Mapped[time] = mapped_column(Time, nullable=False)
    crosses_midnight: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    duration_hours: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    break_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    guards_per_shift: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    recurrence_type: Mapped[str] = mapped_column(String(20), nullable=False, default="weekly")
    applies_monday:    Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_tuesday:   Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_wednesday: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_thursday:  Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_friday:    Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_saturday:  Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_sunday:    Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    applies_on_public_holidays: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    applies_on_weekends: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    skip_when_location_closed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    requires_armed_guard: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    requires_supervisor:  Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    min_experience_months: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    effective_from: Mapped[date] = mapped_column(Date(), nullable=False)
    effective_to:   Mapped[date | None] = mapped_column(Date(), nullable=True)

    is_active:  Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    contract: Mapped["Contract"] = relationship("Contract", back_populates="shift_schedules")


class ContractDocument(Base):
    __tablename__ = "contract_documents"

    id: Mapped[int] = mapped_column(primary_key=True)
    contract_id: Mapped[int] = mapped_column(ForeignKey("contracts.id", ondelete="CASCADE"), index=True)
    document_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # UTC instant; sqlite hands it back naive
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    classification: Mapped[DocumentClassification] = mapped_column(
        SAEnum(DocumentClassification, name="document_classification"),
        nullable=False, default=DocumentClassification.normal,
    )
    document_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    contract: Mapped["Contract"] = relationship("Contract", back_populates="documents")

# sweep scans by classification + end date
Index("ix_contract_documents_sweep", ContractDocument.classification, ContractDocument.end_date)
Index("ix_contract_schedules_contract_active", ContractShiftSchedule.contract_id, ContractShiftSchedule.is_active)

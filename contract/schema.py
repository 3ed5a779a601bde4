from __future__ import annotations
from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .models import ContractStatus, ContractType, DocumentClassification


# ---------- DB → API (read) ----------
class ContractSchema(BaseModel):
    id: int
    contract_number: str
    contract_title: str
    contract_type: ContractType
    customer_id: Optional[int] = None
    start_date: date
    end_date: date
    status: ContractStatus
    auto_generate_shifts: bool
    generate_shifts_advance_days: int
    approved_at: Optional[datetime] = None
    approved_by: Optional[int] = None
    activated_at: Optional[datetime] = None
    activated_by: Optional[int] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ---------- Create (seeding the contract side) ----------
class ContractCreate(BaseModel):
    contract_number: str = Field(..., min_length=1, max_length=64)
    contract_title: str = ""
    contract_type: ContractType = ContractType.service_contract
    customer_id: Optional[int] = None
    start_date: date
    end_date: date
    auto_generate_shifts: bool = True
    generate_shifts_advance_days: int = Field(30, ge=0)
    work_on_public_holidays: bool = True
    work_on_customer_closed_days: bool = True
    notes: Optional[str] = None
    created_by: Optional[int] = None


class ContractLocationCreate(BaseModel):
    location_id: int
    guards_required: int = Field(1, ge=1)
    coverage_type: str = "24x7"
    service_start_date: Optional[date] = None
    service_end_date: Optional[date] = None


class ContractShiftScheduleCreate(BaseModel):
    schedule_name: str = Field(..., min_length=1, max_length=255)
    schedule_type: str = "regular"
    location_id: Optional[int] = None
    shift_start_time: time
    shift_end_time: time
    crosses_midnight: bool = False
    duration_hours: Decimal
    break_minutes: int = 0
    guards_per_shift: int = 1
    recurrence_type: str = "weekly"
    applies_monday: bool = False
    applies_tuesday: bool = False
    applies_wednesday: bool = False
    applies_thursday: bool = False
    applies_friday: bool = False
    applies_saturday: bool = False
    applies_sunday: bool = False
    applies_on_public_holidays: bool = True
    applies_on_weekends: bool = True
    skip_when_location_closed: bool = False
    requires_armed_guard: bool = False
    requires_supervisor: bool = False
    min_experience_months: int = 0
    effective_from: date
    effective_to: Optional[date] = None


# ---------- Activation ----------
class ActivationRequest(BaseModel):
    activated_by: Optional[int] = None
    manager_id: Optional[int] = None
    notes: Optional[str] = Field(None, max_length=2000)

    model_config = ConfigDict(extra="forbid")


class ActivationInfo(BaseModel):
    contract_id: int
    contract_number: str
    status: ContractStatus
    activated_at: datetime
    activated_by: Optional[int] = None
    locations_count: int
    schedules_count: int


class ActivationResult(BaseModel):
    success: bool
    message: str
    activation_info: Optional[ActivationInfo] = None
    event_published: bool = False


# ---------- Expiration ----------
class ContractExpirationDetail(BaseModel):
    document_id: int
    document_name: str
    contract_id: int
    contract_number: str
    contract_type: ContractType
    end_date: datetime
    days_remaining: int
    email: Optional[str] = None
    action: Literal["near_expired", "expired"]


class SweepResult(BaseModel):
    success: bool = True
    near_expired_count: int = 0
    expired_count: int = 0
    # deactivations triggered by this run (events staged in the outbox), not deliveries
    managers_deactivated: int = 0
    guards_deactivated: int = 0
    customers_deactivated: int = 0
    # outcome of the relay pass at the end of the run, across all pending messages
    events_published: int = 0
    events_pending: int = 0
    near_expired: List[ContractExpirationDetail] = Field(default_factory=list)
    expired: List[ContractExpirationDetail] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


ExpiryState = Literal["expired", "expired_today", "near_expired", "expiring_soon", "active"]


class ContractExpiryStatus(BaseModel):
    contract_id: int
    contract_number: str
    end_date: date
    days_remaining: int
    status: ExpiryState
    classification: Optional[DocumentClassification] = None


class SweepRequest(BaseModel):
    now: Optional[datetime] = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def tz_aware(self):
        if self.now is not None and (self.now.tzinfo is None or self.now.tzinfo.utcoffset(self.now) is None):
            raise ValueError("now must be timezone-aware (e.g., 2025-10-16T09:00:00Z)")
        return self

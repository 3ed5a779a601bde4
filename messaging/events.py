from __future__ import annotations
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import ClassVar, List, Optional
from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------- Contract activation snapshot ----------

class ContractLocationDto(BaseModel):
    location_id: int
    name: str
    address: str = ""
    code: str = ""
    guards_required: int = 1
    coverage_type: str = ""
    service_start: Optional[date] = None
    service_end: Optional[date] = None
    lat: Optional[Decimal] = None
    lon: Optional[Decimal] = None
    geofence_radius_m: int = 100


class ContractShiftScheduleDto(BaseModel):
    """A schedule definition as it leaves the contracts side. Immutable input to reconciliation."""
    schedule_id: Optional[int] = None
    name: str
    type: str = "regular"
    location_id: Optional[int] = None
    start_time: time
    end_time: time
    crosses_midnight: bool = False
    duration_hours: Decimal
    break_minutes: int = 0
    guards_per_shift: int
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
    skip_when_closed: bool = False
    requires_armed_guard: bool = False
    requires_supervisor: bool = False
    min_experience_months: int = 0
    effective_from: date
    effective_to: Optional[date] = None

    model_config = ConfigDict(frozen=True)

    @property
    def day_flags(self) -> tuple[bool, bool, bool, bool, bool, bool, bool]:
        # Monday first, same order as date.weekday()
        return (
            self.applies_monday, self.applies_tuesday, self.applies_wednesday,
            self.applies_thursday, self.applies_friday, self.applies_saturday,
            self.applies_sunday,
        )


class ContractActivatedEvent(BaseModel):
    event_type: ClassVar[str] = "contract.activated"

    contract_id: int
    contract_number: str
    contract_title: str = ""
    customer_id: Optional[int] = None
    customer_name: str = "N/A"
    manager_id: Optional[int] = None
    start_date: date
    end_date: date
    auto_generate_shifts: bool = True
    generate_shifts_advance_days: int = 30
    work_on_public_holidays: bool = True
    work_on_customer_closed_days: bool = True
    locations: List[ContractLocationDto] = Field(default_factory=list)
    shift_schedules: List[ContractShiftScheduleDto] = Field(default_factory=list)
    activated_at: datetime
    activated_by: Optional[int] = None


# ---------- Expiration cascade ----------

class DeactivateUserEvent(BaseModel):
    event_type: ClassVar[str] = "user.deactivate"

    email: str
    user_type: str  # manager | guard | customer
    reason: str = "Contract expired"
    deactivated_at: datetime = Field(default_factory=_utcnow)


class DeactivateManagerEvent(BaseModel):
    event_type: ClassVar[str] = "manager.deactivate"

    principal_id: Optional[int] = None  # consumer resolves by email when missing
    email: str
    reason: str = "Contract expired"
    deactivated_at: datetime = Field(default_factory=_utcnow)


class DeactivateGuardEvent(BaseModel):
    event_type: ClassVar[str] = "guard.deactivate"

    principal_id: Optional[int] = None
    email: str
    reason: str = "Contract expired"
    deactivated_at: datetime = Field(default_factory=_utcnow)

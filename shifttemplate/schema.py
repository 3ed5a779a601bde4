from __future__ import annotations
from datetime import date, time
from decimal import Decimal
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from messaging.events import ContractLocationDto, ContractShiftScheduleDto


class TimeValidationResult(BaseModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    crosses_midnight: bool = False
    actual_duration_hours: Decimal = Decimal("0")
    declared_duration_hours: Decimal = Decimal("0")
    duration_matches: bool = False
    is_night_shift: bool = False


# ---------- DB → API (read) ----------
class ShiftTemplateSchema(BaseModel):
    id: int
    contract_id: Optional[int] = None
    template_code: str
    template_name: str
    start_time: time
    end_time: time
    duration_hours: Decimal
    break_minutes: int
    is_night_shift: bool
    is_overnight: bool
    crosses_midnight: bool
    applies_monday: bool
    applies_tuesday: bool
    applies_wednesday: bool
    applies_thursday: bool
    applies_friday: bool
    applies_saturday: bool
    applies_sunday: bool
    min_guards_required: int
    max_guards_allowed: Optional[int] = None
    optimal_guards: Optional[int] = None
    location_id: Optional[int] = None
    location_name: Optional[str] = None
    effective_from: Optional[date] = None
    effective_to: Optional[date] = None
    status: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


# ---------- Import (reconciliation) ----------
class ImportTemplatesCommand(BaseModel):
    contract_id: int
    contract_number: str
    locations: List[ContractLocationDto] = Field(default_factory=list)
    shift_schedules: List[ContractShiftScheduleDto] = Field(default_factory=list)
    manager_id: Optional[int] = None
    imported_by: Optional[int] = None

    model_config = ConfigDict(extra="forbid")


class TemplateImportDetail(BaseModel):
    template_id: Optional[int] = None
    template_code: str
    template_name: str
    action: Literal["Created", "Updated", "Skipped"]
    reason: Optional[str] = None
    time_validation: TimeValidationResult


class ImportTemplatesResult(BaseModel):
    success: bool
    created_count: int = 0
    updated_count: int = 0
    skipped_count: int = 0
    created_ids: List[int] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    # schedules that failed on the store rather than on their own data
    transient_errors: List[str] = Field(default_factory=list)
    details: List[TemplateImportDetail] = Field(default_factory=list)

from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from .models import ShiftStatus

class ShiftSchema(BaseModel):
    id: int
    location_id: int
    contract_id: Optional[int] = None
    shift_template_id: Optional[int] = None
    shift_date: date
    start_at: datetime
    end_at: datetime
    total_duration_minutes: int
    work_duration_minutes: int
    work_duration_hours: Decimal
    break_minutes: int
    is_night_shift: bool
    required_guards: int
    assigned_guards_count: int
    status: ShiftStatus
    description: Optional[str] = None
    version: int

    model_config = ConfigDict(from_attributes=True)

class ShiftCreatePayload(BaseModel):
    location_id: int
    contract_id: Optional[int] = None
    shift_template_id: Optional[int] = None
    shift_date: date
    start_time: time = Field(..., description="Site-local wall clock")
    end_time: time = Field(..., description="At or before start_time means the next day")
    break_minutes: int = Field(0, ge=0)
    required_guards: int = Field(1, ge=1)
    description: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

# Internal DTO the service uses
class ShiftCreate(ShiftCreatePayload):
    created_by: Optional[int] = None

class ShiftUpdate(BaseModel):
    shift_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    break_minutes: Optional[int] = Field(None, ge=0)
    required_guards: Optional[int] = Field(None, ge=1)
    status: Optional[ShiftStatus] = None
    description: Optional[str] = None
    # optimistic concurrency: the version the caller last read
    expected_version: Optional[int] = None

    model_config = ConfigDict(extra="forbid")

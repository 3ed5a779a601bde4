# shift/service.py
from __future__ import annotations
import logging
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from core.errors import ConflictError, NotFoundError, ValidationError
from location.models import Location
from shifttemplate.validation import is_night_shift
from .models import Shift, ShiftStatus
from .overlap import ensure_no_overlaps, shift_window
from .schemas import ShiftCreate, ShiftUpdate

log = logging.getLogger(__name__)

TIME_FIELDS = ("shift_date", "start_time", "end_time", "break_minutes")

def get_shift(db: Session, shift_id: int) -> Shift | None:
    row = db.get(Shift, shift_id)
    if row is None or row.is_deleted:
        return None
    return row

def get_shifts(
    db: Session,
    *,
    location_id: Optional[int] = None,
    contract_id: Optional[int] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    status: Optional[ShiftStatus] = None,
) -> list[Shift]:
    stmt = select(Shift).where(Shift.is_deleted.is_(False))
    if location_id is not None:
        stmt = stmt.where(Shift.location_id == location_id)
    if contract_id is not None:
        stmt = stmt.where(Shift.contract_id == contract_id)
    if start is not None:
        stmt = stmt.where(Shift.end_at > start)    # overlaps window
    if end is not None:
        stmt = stmt.where(Shift.start_at < end)    # overlaps window
    if status is not None:
        stmt = stmt.where(Shift.status == status)
    stmt = stmt.order_by(Shift.start_at, Shift.id)
    return list(db.scalars(stmt))

def _apply_window(row: Shift, shift_date: date, start_time: time, end_time: time, break_minutes: int) -> None:
    start_at, end_at = shift_window(shift_date, start_time, end_time)
    total = int((end_at - start_at) / timedelta(minutes=1))
    if break_minutes > total:
        raise ValidationError(f"Break time {break_minutes} minutes exceeds shift duration {total} minutes")
    work = total - break_minutes

    row.shift_date = shift_date
    row.start_at = start_at
    row.end_at = end_at
    row.break_minutes = break_minutes
    row.total_duration_minutes = total
    row.work_duration_minutes = work
    row.work_duration_hours = (Decimal(work) / Decimal(60)).quantize(Decimal("0.01"))
    row.is_night_shift = is_night_shift(start_time, end_time)

def create_shift(db: Session, dto: ShiftCreate) -> Shift:
    loc = db.get(Location, dto.location_id)
    if loc is None or loc.is_deleted:
        raise NotFoundError("Location not found")

    ensure_no_overlaps(db, dto.location_id, dto.shift_date, dto.start_time, dto.end_time)

    row = Shift(
        location_id=dto.location_id,
        contract_id=dto.contract_id,
        shift_template_id=dto.shift_template_id,
        required_guards=dto.required_guards,
        assigned_guards_count=0,
        status=ShiftStatus.draft,
        description=dto.description,
        is_deleted=False,
        created_at=datetime.now(timezone.utc),
        created_by=dto.created_by,
    )
    _apply_window(row, dto.shift_date, dto.start_time, dto.end_time, dto.break_minutes)

    db.add(row)
    db.commit()
    db.refresh(row)
    return row

def update_shift(db: Session, shift_id: int, patch: ShiftUpdate, *, updated_by: Optional[int] = None) -> Shift:
    """
    Partial update. Time changes are re-checked for overlaps with the shift
    itself excluded. A stale ``expected_version`` or a concurrent write -> 409.
    """
    row = get_shift(db, shift_id)
    if not row:
        raise NotFoundError("Shift not found")

    if patch.expected_version is not None and patch.expected_version != row.version:
        raise ConflictError(
            f"Shift {shift_id} has changed (version {row.version}, expected {patch.expected_version})"
        )

    data = patch.model_dump(exclude_unset=True, exclude={"expected_version"})

    if any(k in data for k in TIME_FIELDS):
        shift_date = data.get("shift_date") or row.shift_date
        start_time = data.get("start_time") or row.start_at.time()
        end_time = data.get("end_time") or row.end_at.time()
        break_minutes = data.get("break_minutes")
        if break_minutes is None:
            break_minutes = row.break_minutes
        ensure_no_overlaps(db, row.location_id, shift_date, start_time, end_time, exclude_shift_id=row.id)
        _apply_window(row, shift_date, start_time, end_time, break_minutes)

    for k in ("required_guards", "status", "description"):
        if k in data and (data[k] is not None or k == "description"):
            setattr(row, k, data[k])

    row.updated_at = datetime.now(timezone.utc)
    row.updated_by = updated_by

    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        log.info("Concurrent update rejected for shift %s", shift_id)
        raise ConflictError(f"Shift {shift_id} was modified by another request")
    db.refresh(row)
    return row

def delete_shift(db: Session, shift_id: int, *, deleted_by: Optional[int] = None) -> None:
    row = get_shift(db, shift_id)
    if row:
        row.is_deleted = True
        row.updated_at = datetime.now(timezone.utc)
        row.updated_by = deleted_by
        db.commit()

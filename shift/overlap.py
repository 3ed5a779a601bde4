from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.errors import ConflictError
from .models import Shift, ShiftStatus


@dataclass(frozen=True)
class ConflictingShift:
    shift_id: int
    shift_date: date
    start_at: datetime
    end_at: datetime
    status: ShiftStatus


def shift_window(shift_date: date, start_time: time, end_time: time) -> tuple[datetime, datetime]:
    """``[start, end)`` on ``shift_date``; an end at or before the start means the next day."""
    start = datetime.combine(shift_date, start_time)
    end = datetime.combine(shift_date, end_time)
    if end <= start:
        end += timedelta(days=1)
    return start, end

def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    # half-open: touching ends do not overlap
    return a_start < b_end and b_start < a_end

def find_overlaps(
    db: Session,
    location_id: int,
    shift_date: date,
    start_time: time,
    end_time: time,
    exclude_shift_id: Optional[int] = None,
) -> list[ConflictingShift]:
    start, end = shift_window(shift_date, start_time, end_time)

    # an overnight shift from the previous day ends inside this window, so
    # filter on the interval rather than on shift_date
    stmt = select(Shift).where(
        Shift.location_id == location_id,
        Shift.is_deleted.is_(False),
        Shift.start_at < end,
        Shift.end_at > start,
    )
    if exclude_shift_id is not None:
        stmt = stmt.where(Shift.id != exclude_shift_id)
    stmt = stmt.order_by(Shift.start_at, Shift.id)

    return [
        ConflictingShift(s.id, s.shift_date, s.start_at, s.end_at, s.status)
        for s in db.scalars(stmt).unique()
        if intervals_overlap(start, end, s.start_at, s.end_at)
    ]

def ensure_no_overlaps(
    db: Session,
    location_id: int,
    shift_date: date,
    start_time: time,
    end_time: time,
    exclude_shift_id: Optional[int] = None,
) -> None:
    conflicts = find_overlaps(db, location_id, shift_date, start_time, end_time, exclude_shift_id)
    if conflicts:
        ids = [c.shift_id for c in conflicts]
        raise ConflictError({
            "message": f"Shift overlaps {len(conflicts)} existing shift(s) at this location: "
                       + ", ".join(str(i) for i in ids),
            "conflicting_shift_ids": ids,
        })

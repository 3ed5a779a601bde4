"""
Shift time validation and classification.

Pure functions: no database, no clock. Hard errors make a window invalid,
warnings are advisory and are surfaced to the caller unchanged.
"""
from __future__ import annotations
from datetime import date, time, timedelta
from decimal import Decimal
from typing import Optional, Sequence, Union

from .schema import TimeValidationResult

TimeOfDay = Union[time, timedelta]

DAY = timedelta(days=1)
NIGHT_START = timedelta(hours=22)
NIGHT_END = timedelta(hours=6)

DURATION_TOLERANCE_HOURS = Decimal("0.1")
MIN_DURATION_HOURS = Decimal("1.0")
MAX_DURATION_HOURS = Decimal("24.0")
LONG_SHIFT_HOURS = Decimal("12.0")
BREAK_REQUIRED_HOURS = Decimal("6.0")
MAX_REASONABLE_GUARDS = 50


def as_offset(value: TimeOfDay) -> timedelta:
    """Offset from midnight. ``timedelta`` passes through untouched so out-of-range input stays visible."""
    if isinstance(value, timedelta):
        return value
    return timedelta(hours=value.hour, minutes=value.minute, seconds=value.second, microseconds=value.microsecond)

def _hours(delta: timedelta) -> Decimal:
    return Decimal(delta // timedelta(microseconds=1)) / Decimal(3_600_000_000)

def _fmt(delta: timedelta) -> str:
    total = int(delta.total_seconds())
    sign = "-" if total < 0 else ""
    total = abs(total)
    return f"{sign}{total // 3600:02d}:{total % 3600 // 60:02d}:{total % 60:02d}"

def in_day_range(value: TimeOfDay) -> bool:
    offset = as_offset(value)
    return timedelta(0) <= offset < DAY


def crosses_midnight(start: TimeOfDay, end: TimeOfDay) -> bool:
    return as_offset(end) <= as_offset(start)

def actual_duration_hours(start: TimeOfDay, end: TimeOfDay) -> Decimal:
    s, e = as_offset(start), as_offset(end)
    if e <= s:
        return _hours(DAY - s) + _hours(e)
    return _hours(e - s)

def is_night_shift(start: TimeOfDay, end: TimeOfDay, crosses: Optional[bool] = None) -> bool:
    s, e = as_offset(start), as_offset(end)
    if crosses is None:
        crosses = e <= s
    if crosses:
        return s >= NIGHT_START or e <= NIGHT_END
    # same-day window counts only when it sits entirely inside 00:00-06:00
    return s >= timedelta(0) and e <= NIGHT_END


def validate_window(
    start_time: TimeOfDay,
    end_time: TimeOfDay,
    declared_duration_hours: Decimal | float | int,
    break_minutes: int,
    day_flags: Sequence[bool],
    guards_per_shift: int,
    effective_from: date,
    effective_to: Optional[date] = None,
    declared_crosses_midnight: Optional[bool] = None,
) -> TimeValidationResult:
    errors: list[str] = []
    warnings: list[str] = []
    declared = Decimal(str(declared_duration_hours))

    s, e = as_offset(start_time), as_offset(end_time)
    if not in_day_range(s):
        errors.append(f"Invalid start time {_fmt(s)}. Must be between 00:00:00 and 23:59:59")
    if not in_day_range(e):
        errors.append(f"Invalid end time {_fmt(e)}. Must be between 00:00:00 and 23:59:59")
    if errors:
        return TimeValidationResult(
            is_valid=False,
            errors=errors,
            warnings=warnings,
            declared_duration_hours=declared,
        )

    crosses = crosses_midnight(s, e)
    actual = actual_duration_hours(s, e)

    diff = abs(actual - declared)
    duration_matches = diff <= DURATION_TOLERANCE_HOURS
    if not duration_matches:
        errors.append(
            f"Duration mismatch: declared {declared}h but calculated {actual:.2f}h "
            f"from {_fmt(s)} to {_fmt(e)}. Difference: {diff:.2f}h"
        )

    if declared_crosses_midnight is not None and declared_crosses_midnight != crosses:
        warnings.append(
            f"Crosses-midnight flag mismatch: declared {declared_crosses_midnight} "
            f"but calculated {crosses}. Using calculated value."
        )

    if actual < MIN_DURATION_HOURS:
        errors.append(f"Shift duration too short: {actual:.2f}h. Minimum is 1 hour.")
    if actual > MAX_DURATION_HOURS:
        errors.append(f"Shift duration too long: {actual:.2f}h. Maximum is 24 hours.")
    if actual > LONG_SHIFT_HOURS:
        warnings.append(
            f"Shift duration {actual:.2f}h exceeds recommended 12h per shift. "
            f"Ensure compliance with labor laws."
        )

    shift_minutes = int(actual * 60)
    if break_minutes < 0:
        errors.append(f"Invalid break minutes: {break_minutes}. Cannot be negative.")
    elif break_minutes > shift_minutes:
        errors.append(f"Break time {break_minutes} minutes exceeds shift duration {shift_minutes} minutes.")

    if actual >= BREAK_REQUIRED_HOURS and break_minutes == 0:
        warnings.append(f"Shift duration {actual:.2f}h has no break time. A break is required for shifts of 6h or more.")

    night = is_night_shift(s, e, crosses)

    if not any(day_flags):
        errors.append("No days of week selected. Template must apply to at least one day.")

    if guards_per_shift <= 0:
        errors.append(f"Invalid guards per shift: {guards_per_shift}. Must be at least 1.")
    elif guards_per_shift > MAX_REASONABLE_GUARDS:
        warnings.append(f"Guards per shift {guards_per_shift} seems unusually high. Please verify.")

    if effective_to is not None and effective_to < effective_from:
        errors.append(f"Effective to {effective_to.isoformat()} is before effective from {effective_from.isoformat()}")

    return TimeValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        crosses_midnight=crosses,
        actual_duration_hours=actual,
        declared_duration_hours=declared,
        duration_matches=duration_matches,
        is_night_shift=night,
    )


def validate_schedule(schedule) -> TimeValidationResult:
    """Validate a ``ContractShiftScheduleDto`` (or anything shaped like one)."""
    return validate_window(
        schedule.start_time,
        schedule.end_time,
        schedule.duration_hours,
        schedule.break_minutes,
        schedule.day_flags,
        schedule.guards_per_shift,
        schedule.effective_from,
        schedule.effective_to,
        declared_crosses_midnight=schedule.crosses_midnight,
    )

from __future__ import annotations
import logging
from datetime import datetime, time, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from messaging.events import ContractLocationDto, ContractShiftScheduleDto
from .models import ShiftTemplate
from .schema import (
    ImportTemplatesCommand,
    ImportTemplatesResult,
    TemplateImportDetail,
    TimeValidationResult,
)
from .validation import validate_schedule

log = logging.getLogger(__name__)

# ---------- Queries ----------

def get_template(db: Session, template_id: int) -> ShiftTemplate | None:
    row = db.get(ShiftTemplate, template_id)
    if row is None or row.is_deleted:
        return None
    return row

def get_template_by_code(db: Session, code: str) -> ShiftTemplate | None:
    stmt = select(ShiftTemplate).where(
        ShiftTemplate.template_code == code,
        ShiftTemplate.is_deleted.is_(False),
    )
    return db.scalars(stmt).first()

def get_templates(
    db: Session,
    *,
    contract_id: Optional[int] = None,
    location_id: Optional[int] = None,
    include_inactive: bool = False,
) -> list[ShiftTemplate]:
    stmt = select(ShiftTemplate).where(ShiftTemplate.is_deleted.is_(False))
    if contract_id is not None:
        stmt = stmt.where(ShiftTemplate.contract_id == contract_id)
    if location_id is not None:
        stmt = stmt.where(ShiftTemplate.location_id == location_id)
    if not include_inactive:
        stmt = stmt.where(ShiftTemplate.is_active.is_(True))
    stmt = stmt.order_by(ShiftTemplate.start_time, ShiftTemplate.id)
    return list(db.scalars(stmt))


# ---------- Template code ----------

def template_code(name: str, start: time, end: time) -> str:
    """``Morning shift!`` 08:00-17:00 -> ``MORNINGSHIFT-0800-1700``."""
    # isalnum keeps Unicode letters: "Ca Sáng" -> "CASÁNG"
    safe = "".join(c for c in name or "" if c.isalnum() or c in "-_").upper() or "SCHEDULE"
    return f"{safe}-{start.strftime('%H%M')}-{end.strftime('%H%M')}"


# ---------- Import (one schedule = one unit of work) ----------

def _apply_schedule(
    row: ShiftTemplate,
    schedule: ContractShiftScheduleDto,
    cmd: ImportTemplatesCommand,
    validation: TimeValidationResult,
) -> None:
    row.contract_id = cmd.contract_id
    row.start_time = schedule.start_time
    row.end_time = schedule.end_time
    row.duration_hours = validation.actual_duration_hours
    row.break_minutes = schedule.break_minutes
    row.is_night_shift = validation.is_night_shift
    row.is_overnight = validation.crosses_midnight
    row.crosses_midnight = validation.crosses_midnight
    (
        row.applies_monday, row.applies_tuesday, row.applies_wednesday,
        row.applies_thursday, row.applies_friday, row.applies_saturday,
        row.applies_sunday,
    ) = schedule.day_flags
    row.min_guards_required = schedule.guards_per_shift
    row.max_guards_allowed = schedule.guards_per_shift
    row.optimal_guards = schedule.guards_per_shift
    row.effective_from = schedule.effective_from
    row.effective_to = schedule.effective_to
    # re-imported templates go back to the shift-generation queue
    row.status = "await_create_shift"
    row.is_active = True

def _apply_location(row: ShiftTemplate, location: Optional[ContractLocationDto]) -> None:
    if location is None:
        return
    row.location_id = location.location_id
    row.location_name = location.name
    row.location_address = location.address
    row.location_latitude = location.lat
    row.location_longitude = location.lon

def _create(
    db: Session,
    code: str,
    schedule: ContractShiftScheduleDto,
    cmd: ImportTemplatesCommand,
    validation: TimeValidationResult,
) -> ShiftTemplate:
    row = ShiftTemplate(
        template_code=code,
        template_name=schedule.name,
        description=f"Imported from contract {cmd.contract_number}",
        manager_id=cmd.manager_id,
        created_at=datetime.now(timezone.utc),
        created_by=cmd.imported_by,
        is_deleted=False,
    )
    _apply_schedule(row, schedule, cmd, validation)
    location = next((loc for loc in cmd.locations if loc.location_id == schedule.location_id), None)
    _apply_location(row, location)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row

def _update(
    db: Session,
    row: ShiftTemplate,
    schedule: ContractShiftScheduleDto,
    cmd: ImportTemplatesCommand,
    validation: TimeValidationResult,
) -> ShiftTemplate:
    _apply_schedule(row, schedule, cmd, validation)
    row.updated_at = datetime.now(timezone.utc)
    row.updated_by = cmd.imported_by
    db.commit()
    db.refresh(row)
    return row

def import_schedule(db: Session, cmd: ImportTemplatesCommand, schedule: ContractShiftScheduleDto) -> TemplateImportDetail:
    validation = validate_schedule(schedule)
    code = template_code(schedule.name, schedule.start_time, schedule.end_time)

    if not validation.is_valid:
        log.error("Time validation failed for schedule %s: %s", schedule.name, "; ".join(validation.errors))
        return TemplateImportDetail(
            template_code=code,
            template_name=schedule.name,
            action="Skipped",
            reason="Time validation failed: " + "; ".join(validation.errors),
            time_validation=validation,
        )
    if validation.warnings:
        log.warning("Time warnings for schedule %s: %s", schedule.name, "; ".join(validation.warnings))

    existing = get_template_by_code(db, code)
    if existing is None:
        try:
            row = _create(db, code, schedule, cmd, validation)
            action = "Created"
        except IntegrityError:
            # lost a race with a concurrent import of the same code
            db.rollback()
            existing = get_template_by_code(db, code)
            if existing is None:
                raise
            row = _update(db, existing, schedule, cmd, validation)
            action = "Updated"
    else:
        row = _update(db, existing, schedule, cmd, validation)
        action = "Updated"

    log.info(
        "%s template %s: %s | %s-%s | guards=%d | %sh",
        action, row.template_code, row.template_name, row.start_time, row.end_time,
        row.min_guards_required, row.duration_hours,
    )
    return TemplateImportDetail(
        template_id=row.id,
        template_code=row.template_code,
        template_name=row.template_name,
        action=action,
        reason="New template from contract" if action == "Created" else "Existing template updated",
        time_validation=validation,
    )

def import_templates(db: Session, cmd: ImportTemplatesCommand) -> ImportTemplatesResult:
    """
    Best-effort batch: every schedule commits on its own, a bad schedule is
    recorded and skipped. Items committed before a failure stay committed.
    Store failures are also listed in ``transient_errors`` so an event
    consumer can ask for redelivery.
    """
    log.info("Importing %d shift templates from contract %s", len(cmd.shift_schedules), cmd.contract_number)

    created_ids: list[int] = []
    errors: list[str] = []
    transient: list[str] = []
    details: list[TemplateImportDetail] = []
    created = updated = skipped = 0

    for schedule in cmd.shift_schedules:
        try:
            detail = import_schedule(db, cmd, schedule)
        except Exception as exc:
            db.rollback()
            log.exception("Failed to import schedule %s from contract %s", schedule.name, cmd.contract_number)
            errors.append(f"Schedule '{schedule.name}': {exc}")
            if isinstance(exc, SQLAlchemyError) and not isinstance(exc, IntegrityError):
                transient.append(schedule.name)
            skipped += 1
            continue

        details.append(detail)
        if detail.action == "Created":
            created += 1
            created_ids.append(detail.template_id)
        elif detail.action == "Updated":
            updated += 1
        else:
            errors.extend(detail.time_validation.errors)
            skipped += 1

    log.info(
        "Import completed for contract %s: created=%d updated=%d skipped=%d errors=%d",
        cmd.contract_number, created, updated, skipped, len(errors),
    )
    return ImportTemplatesResult(
        success=not errors or created > 0,
        created_count=created,
        updated_count=updated,
        skipped_count=skipped,
        created_ids=created_ids,
        errors=errors,
        transient_errors=transient,
        details=details,
    )

from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import ConflictError, NotFoundError, TransientInfrastructureError, ValidationError
from location.models import Location
from messaging import outbox
from messaging.bus import EventBus
from messaging.events import ContractActivatedEvent, ContractLocationDto, ContractShiftScheduleDto
from .models import Contract, ContractLocation, ContractShiftSchedule, ContractStatus, Customer
from .schema import (
    ActivationInfo,
    ActivationResult,
    ContractCreate,
    ContractLocationCreate,
    ContractShiftScheduleCreate,
)
from . import lifecycle

log = logging.getLogger(__name__)

# ---------- Queries ----------

def get_contract(db: Session, contract_id: int) -> Contract | None:
    row = db.get(Contract, contract_id)
    if row is None or row.is_deleted:
        return None
    return row

def get_contract_by_number(db: Session, contract_number: str) -> Contract | None:
    stmt = select(Contract).where(Contract.contract_number == contract_number, Contract.is_deleted.is_(False))
    return db.scalars(stmt).first()

def get_contract_locations(db: Session, contract_id: int) -> list[ContractLocation]:
    stmt = (
        select(ContractLocation)
        .join(Location, Location.id == ContractLocation.location_id)
        .where(
            ContractLocation.contract_id == contract_id,
            ContractLocation.is_deleted.is_(False),
            Location.is_deleted.is_(False),
        )
        .order_by(ContractLocation.id)
    )
    return list(db.scalars(stmt).unique())

def get_active_schedules(db: Session, contract_id: int) -> list[ContractShiftSchedule]:
    stmt = (
        select(ContractShiftSchedule)
        .where(
            ContractShiftSchedule.contract_id == contract_id,
            ContractShiftSchedule.is_active.is_(True),
            ContractShiftSchedule.is_deleted.is_(False),
        )
        .order_by(ContractShiftSchedule.id)
    )
    return list(db.scalars(stmt))


# ---------- Create ----------

def create_contract(db: Session, dto: ContractCreate) -> Contract:
    if dto.start_date > dto.end_date:
        raise ValidationError("start_date must be on or before end_date")
    if dto.customer_id is not None:
        customer = db.get(Customer, dto.customer_id)
        if customer is None or customer.is_deleted:
            raise NotFoundError("Customer not found")
    if get_contract_by_number(db, dto.contract_number):
        raise ConflictError(f"Contract {dto.contract_number} already exists")

    row = Contract(
        **dto.model_dump(),
        status=ContractStatus.draft,
        created_at=datetime.now(timezone.utc),
        is_deleted=False,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row

def add_contract_location(db: Session, contract_id: int, dto: ContractLocationCreate) -> ContractLocation:
    if not get_contract(db, contract_id):
        raise NotFoundError("Contract not found")
    loc = db.get(Location, dto.location_id)
    if loc is None or loc.is_deleted:
        raise NotFoundError("Location not found")

    row = ContractLocation(contract_id=contract_id, **dto.model_dump(), is_deleted=False)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row

def add_shift_schedule(db: Session, contract_id: int, dto: ContractShiftScheduleCreate) -> ContractShiftSchedule:
    if not get_contract(db, contract_id):
        raise NotFoundError("Contract not found")
    if dto.effective_to is not None and dto.effective_to < dto.effective_from:
        raise ValidationError("effective_to must be on or after effective_from")

    row = ContractShiftSchedule(contract_id=contract_id, **dto.model_dump(), is_active=True, is_deleted=False)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


# ---------- Activation ----------

def _location_dto(cl: ContractLocation) -> ContractLocationDto:
    loc = cl.location
    return ContractLocationDto(
        location_id=cl.location_id,
        name=loc.name,
        address=loc.address or "",
        code=loc.code,
        guards_required=cl.guards_required,
        coverage_type=cl.coverage_type,
        service_start=cl.service_start_date,
        service_end=cl.service_end_date,
        lat=loc.latitude,
        lon=loc.longitude,
        geofence_radius_m=loc.geofence_radius_m,
    )

def _schedule_dto(s: ContractShiftSchedule) -> ContractShiftScheduleDto:
    return ContractShiftScheduleDto(
        schedule_id=s.id,
        name=s.schedule_name,
        type=s.schedule_type,
        location_id=s.location_id,
        start_time=s.shift_start_time,
        end_time=s.shift_end_time,
        crosses_midnight=s.crosses_midnight,
        duration_hours=s.duration_hours,
        break_minutes=s.break_minutes,
        guards_per_shift=s.guards_per_shift,
        recurrence_type=s.recurrence_type,
        applies_monday=s.applies_monday,
        applies_tuesday=s.applies_tuesday,
        applies_wednesday=s.applies_wednesday,
        applies_thursday=s.applies_thursday,
        applies_friday=s.applies_friday,
        applies_saturday=s.applies_saturday,
        applies_sunday=s.applies_sunday,
        applies_on_public_holidays=s.applies_on_public_holidays,
        applies_on_weekends=s.applies_on_weekends,
        skip_when_closed=s.skip_when_location_closed,
        requires_armed_guard=s.requires_armed_guard,
        requires_supervisor=s.requires_supervisor,
        min_experience_months=s.min_experience_months,
        effective_from=s.effective_from,
        effective_to=s.effective_to,
    )

def build_activated_event(
    contract: Contract,
    customer: Optional[Customer],
    locations: list[ContractLocation],
    schedules: list[ContractShiftSchedule],
    *,
    manager_id: Optional[int] = None,
) -> ContractActivatedEvent:
    """Full snapshot: consumers never call back into the contract tables."""
    return ContractActivatedEvent(
        contract_id=contract.id,
        contract_number=contract.contract_number,
        contract_title=contract.contract_title,
        customer_id=contract.customer_id,
        customer_name=customer.company_name if customer else "N/A",
        manager_id=manager_id,
        start_date=contract.start_date,
        end_date=contract.end_date,
        auto_generate_shifts=contract.auto_generate_shifts,
        generate_shifts_advance_days=contract.generate_shifts_advance_days,
        work_on_public_holidays=contract.work_on_public_holidays,
        work_on_customer_closed_days=contract.work_on_customer_closed_days,
        locations=[_location_dto(cl) for cl in locations],
        shift_schedules=[_schedule_dto(s) for s in schedules],
        activated_at=contract.activated_at,
        activated_by=contract.activated_by,
    )

def activate_contract(
    db: Session,
    contract_id: int,
    *,
    activated_by: Optional[int] = None,
    manager_id: Optional[int] = None,
    notes: Optional[str] = None,
    bus: Optional[EventBus] = None,
) -> ActivationResult:
    """
    Move a contract to ``schedule_shifts`` and stage a ContractActivatedEvent.

    The status change and the outbox row commit together; delivery is tried
    right after commit and otherwise left to the next relay run.
    - 404 if the contract is missing or soft-deleted
    - 409 if it is already active, expired or terminated
    - 422 with every failed precondition
    - 503 if the store fails (nothing is committed)
    """
    try:
        stmt = select(Contract).where(Contract.id == contract_id).with_for_update()
        contract = db.scalars(stmt).first()
        if contract is None or contract.is_deleted:
            raise NotFoundError(f"Contract {contract_id} not found")

        rejection = lifecycle.check_can_activate(contract.contract_number, contract.status)
        if rejection:
            raise ConflictError(rejection)

        customer = db.get(Customer, contract.customer_id) if contract.customer_id else None
        locations = get_contract_locations(db, contract_id)
        schedules = get_active_schedules(db, contract_id)

        errors = lifecycle.validate_activation(contract, locations, schedules)
        if errors:
            raise ValidationError(errors)

        now = datetime.now(timezone.utc)
        contract.status = ContractStatus.schedule_shifts
        contract.activated_at = now
        contract.activated_by = activated_by
        if contract.approved_at is None:
            contract.approved_at = now
            contract.approved_by = activated_by
        if notes:
            contract.notes = notes
        contract.updated_at = now
        contract.updated_by = activated_by

        event = build_activated_event(contract, customer, locations, schedules, manager_id=manager_id)
        msg = outbox.enqueue(db, event)
        db.commit()
    except HTTPException:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        log.exception("Failed to activate contract %s", contract_id)
        raise TransientInfrastructureError("Failed to activate contract", cause=exc) from exc

    log.info(
        "Contract %s activated by %s: %d locations, %d schedules",
        contract.contract_number, activated_by, len(locations), len(schedules),
    )

    try:
        published = outbox.deliver(db, msg, bus)
    except SQLAlchemyError:
        db.rollback()
        log.exception("Could not record delivery of outbox message %s; left pending", msg.id)
        published = False

    return ActivationResult(
        success=True,
        message=f"Contract {contract.contract_number} activated successfully",
        activation_info=ActivationInfo(
            contract_id=contract.id,
            contract_number=contract.contract_number,
            status=contract.status,
            activated_at=now,
            activated_by=activated_by,
            locations_count=len(locations),
            schedules_count=len(schedules),
        ),
        event_published=published,
    )

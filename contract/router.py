from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from core.database import get_db
from authz.deps import get_current_actor, require_manager
from .schema import (
    ActivationRequest,
    ActivationResult,
    ContractCreate,
    ContractExpiryStatus,
    ContractLocationCreate,
    ContractSchema,
    ContractShiftScheduleCreate,
    SweepRequest,
    SweepResult,
)
from . import service, expiration

contract_router = APIRouter(prefix="/contracts", tags=["Contracts"])


@contract_router.post("", response_model=ContractSchema, status_code=status.HTTP_201_CREATED)
def create_contract(payload: ContractCreate, db: Session = Depends(get_db), manager_id: int = Depends(require_manager)):
    if payload.created_by is None:
        payload = payload.model_copy(update={"created_by": manager_id})
    return service.create_contract(db, payload)


@contract_router.post("/{contract_id}/locations", status_code=status.HTTP_201_CREATED)
def add_location(
    contract_id: int,
    payload: ContractLocationCreate,
    db: Session = Depends(get_db),
    manager_id: int = Depends(require_manager),
):
    row = service.add_contract_location(db, contract_id, payload)
    return {"id": row.id, "contract_id": row.contract_id, "location_id": row.location_id}


@contract_router.post("/{contract_id}/shift-schedules", status_code=status.HTTP_201_CREATED)
def add_shift_schedule(
    contract_id: int,
    payload: ContractShiftScheduleCreate,
    db: Session = Depends(get_db),
    manager_id: int = Depends(require_manager),
):
    row = service.add_shift_schedule(db, contract_id, payload)
    return {"id": row.id, "contract_id": row.contract_id, "schedule_name": row.schedule_name}


@contract_router.post("/check-expired", response_model=SweepResult)
def check_expired(
    payload: Optional[SweepRequest] = Body(None),
    db: Session = Depends(get_db),
    manager_id: int = Depends(require_manager),
):
    return expiration.run_sweep(db, now=payload.now if payload else None)


@contract_router.get("/{contract_id}", response_model=ContractSchema)
def get_contract(contract_id: int, db: Session = Depends(get_db), actor = Depends(get_current_actor)):
    obj = service.get_contract(db, contract_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Contract not found")
    return obj


@contract_router.get("/{contract_id}/expiry", response_model=ContractExpiryStatus)
def get_contract_expiry(contract_id: int, db: Session = Depends(get_db), actor = Depends(get_current_actor)):
    return expiration.check_contract_expiry(db, contract_id)


@contract_router.post("/{contract_id}/activate", response_model=ActivationResult)
def activate_contract(
    contract_id: int,
    payload: Optional[ActivationRequest] = Body(None),
    db: Session = Depends(get_db),
    manager_id: int = Depends(require_manager),
):
    payload = payload or ActivationRequest()
    return service.activate_contract(
        db,
        contract_id,
        activated_by=payload.activated_by or manager_id,
        manager_id=payload.manager_id,
        notes=payload.notes,
    )

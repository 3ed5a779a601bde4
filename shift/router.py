from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, status, HTTPException
from sqlalchemy.orm import Session
from core.database import get_db
from authz.deps import get_current_actor, require_manager
from .models import ShiftStatus
from .schemas import ShiftSchema, ShiftCreatePayload, ShiftCreate, ShiftUpdate
from shift import service

shift_router = APIRouter(prefix="/shifts", tags=["Shifts"])

@shift_router.get("", response_model=list[ShiftSchema])
def list_shifts(
    location_id: Optional[int] = Query(None, description="Filter by location"),
    contract_id: Optional[int] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    status: Optional[ShiftStatus] = None,
    db: Session = Depends(get_db),
    actor = Depends(get_current_actor),
):
    return service.get_shifts(
        db,
        location_id=location_id,
        contract_id=contract_id,
        start=start,
        end=end,
        status=status,
    )

@shift_router.get("/{shift_id}", response_model=ShiftSchema)
def get_shift(shift_id: int, db: Session = Depends(get_db), actor = Depends(get_current_actor)):
    obj = service.get_shift(db, shift_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Shift not found")
    return obj

@shift_router.post("", response_model=ShiftSchema, status_code=status.HTTP_201_CREATED)
def create_shift(payload: ShiftCreatePayload, db: Session = Depends(get_db), manager_id: int = Depends(require_manager)):
    internal = ShiftCreate(created_by=manager_id, **payload.model_dump())
    return service.create_shift(db, internal)

@shift_router.patch("/{shift_id}", response_model=ShiftSchema)
def patch_shift(shift_id: int, payload: ShiftUpdate, db: Session = Depends(get_db), manager_id: int = Depends(require_manager)):
    return service.update_shift(db, shift_id, payload, updated_by=manager_id)

@shift_router.delete("/{shift_id}")
def delete_shift(shift_id: int, db: Session = Depends(get_db), manager_id: int = Depends(require_manager)):
    if not service.get_shift(db, shift_id):
        raise HTTPException(status_code=404, detail="Shift not found")
    service.delete_shift(db, shift_id, deleted_by=manager_id)
    return {"message": "Shift deleted"}

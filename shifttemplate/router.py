from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from core.database import get_db
from authz.deps import get_current_actor, require_manager
from .schema import ShiftTemplateSchema, ImportTemplatesCommand, ImportTemplatesResult
from . import service

shifttemplate_router = APIRouter(prefix="/shift-templates", tags=["Shift Templates"])


@shifttemplate_router.get("", response_model=list[ShiftTemplateSchema])
def list_templates(
    contract_id: Optional[int] = Query(None, description="Filter by contract"),
    location_id: Optional[int] = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    actor = Depends(get_current_actor),
):
    return service.get_templates(
        db,
        contract_id=contract_id,
        location_id=location_id,
        include_inactive=include_inactive,
    )


@shifttemplate_router.get("/by-code/{code}", response_model=ShiftTemplateSchema)
def get_template_by_code(code: str, db: Session = Depends(get_db), actor = Depends(get_current_actor)):
    obj = service.get_template_by_code(db, code)
    if not obj:
        raise HTTPException(status_code=404, detail="Shift template not found")
    return obj


# Manual re-import; the normal path is the contract-activated event
@shifttemplate_router.post("/import", response_model=ImportTemplatesResult)
def import_templates(
    payload: ImportTemplatesCommand,
    db: Session = Depends(get_db),
    manager_id: int = Depends(require_manager),
):
    if payload.imported_by is None:
        payload = payload.model_copy(update={"imported_by": manager_id})
    return service.import_templates(db, payload)

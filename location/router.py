from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import get_db
from authz.deps import get_current_actor, require_manager
from .schemas import LocationSchema, LocationCreatePayload, LocationUpdate
from . import service

location_router = APIRouter(prefix="/locations", tags=["Locations"])

# List all locations
@location_router.get("", response_model=list[LocationSchema])
def list_locations(db: Session = Depends(get_db), actor=Depends(get_current_actor)):
    return service.get_locations(db)

# Get location by id
@location_router.get("/{location_id}", response_model=LocationSchema)
def location_detail(location_id: int, db: Session = Depends(get_db), actor=Depends(get_current_actor)):
    obj = service.get_location(db, location_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Location not found")
    return obj

# Create location
@location_router.post("", response_model=LocationSchema, status_code=status.HTTP_201_CREATED)
def location_post(payload: LocationCreatePayload, db: Session = Depends(get_db), _mgr=Depends(require_manager)):
    try:
        return service.create_location(db, payload)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Location code already exists")

# Update location
@location_router.patch("/{location_id}", response_model=LocationSchema)
def location_patch(location_id: int, payload: LocationUpdate, db: Session = Depends(get_db), _mgr=Depends(require_manager)):
    obj = service.update_location(db, location_id, payload)
    if not obj:
        raise HTTPException(status_code=404, detail="Location not found")
    return obj

# Delete location
@location_router.delete("/{location_id}")
def location_delete(location_id: int, db: Session = Depends(get_db), _mgr=Depends(require_manager)):
    if not service.get_location(db, location_id):
        raise HTTPException(status_code=404, detail="Location not found")
    service.delete_location(db, location_id)
    return {"message": "Location deleted"}

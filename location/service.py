from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy import select
from .models import Location
from .schemas import LocationCreatePayload, LocationUpdate

def get_locations(db: Session) -> List[Location]:
    stmt = select(Location).where(Location.is_deleted.is_(False)).order_by(Location.name.asc())
    return list(db.scalars(stmt))

def get_location(db: Session, location_id: int) -> Optional[Location]:
    loc = db.get(Location, location_id)
    if loc is None or loc.is_deleted:
        return None
    return loc

def create_location(db: Session, loc: LocationCreatePayload) -> Location:
    db_loc = Location(**loc.model_dump())
    db.add(db_loc)
    db.commit()
    db.refresh(db_loc)
    return db_loc

def update_location(db: Session, location_id: int, patch: LocationUpdate) -> Optional[Location]:
    db_loc = get_location(db, location_id)
    if not db_loc:
        return None
    data = patch.model_dump(exclude_unset=True)
    for k, v in data.items():
        setattr(db_loc, k, v)
    db.commit(); db.refresh(db_loc)
    return db_loc

# Soft delete: contracts and templates keep pointing at the row
def delete_location(db: Session, location_id: int) -> None:
    db_loc = get_location(db, location_id)
    if db_loc:
        db_loc.is_deleted = True
        db.commit()
    return

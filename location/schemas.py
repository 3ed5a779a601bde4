from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

class LocationSchema(BaseModel):
    id: int
    name: str
    code: str
    address: Optional[str] = None
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    geofence_radius_m: int = 100
    model_config = ConfigDict(from_attributes=True)

# PUBLIC payload, what clients send
class LocationCreatePayload(BaseModel):
    name: str
    code: str
    address: Optional[str] = None
    latitude: Optional[Decimal] = Field(None, ge=-90, le=90)
    longitude: Optional[Decimal] = Field(None, ge=-180, le=180)
    geofence_radius_m: int = Field(100, ge=1)
    model_config = ConfigDict(extra="forbid")

class LocationUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[Decimal] = Field(None, ge=-90, le=90)
    longitude: Optional[Decimal] = Field(None, ge=-180, le=180)
    geofence_radius_m: Optional[int] = Field(None, ge=1)

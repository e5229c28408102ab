from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

class VehicleStatus(str, Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    INACTIVE = "inactive"

class TransportationCreate(BaseModel):
    bus_number: str = Field(..., min_length=1, max_length=50)
    name: Optional[str] = Field(None, max_length=100)
    capacity: int = Field(..., ge=1)
    route: Optional[str] = None
    status: VehicleStatus = VehicleStatus.ACTIVE
    driver_id: Optional[int] = None
    student_ids: List[int] = []
    accompaniment_ids: List[int] = []

class TransportationUpdate(BaseModel):
    bus_number: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, max_length=100)
    capacity: Optional[int] = Field(None, ge=1)
    route: Optional[str] = None
    status: Optional[VehicleStatus] = None
    driver_id: Optional[int] = None
    accompaniment_ids: Optional[List[int]] = None

class TransportationResponse(BaseModel):
    id: int
    school_id: int
    bus_number: str
    name: Optional[str] = None
    capacity: int
    route: Optional[str] = None
    status: str
    driver_id: Optional[int] = None
    student_ids: List[int] = []
    accompaniment_ids: List[int] = []

    class Config:
        from_attributes = True

from datetime import date
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field
from .common import PrincipalCreate

# Guards

class GuardCreate(PrincipalCreate):
    shift: Optional[str] = Field(None, max_length=50)

class GuardUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=20)
    shift: Optional[str] = Field(None, max_length=50)

class GuardResponse(BaseModel):
    id: int
    school_id: int
    name: str
    email: str
    phone: Optional[str] = None
    shift: Optional[str] = None

    class Config:
        from_attributes = True

# Drivers and accompaniments may exist before they get a password

class DriverCreate(PrincipalCreate):
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    license_number: str = Field(..., min_length=1, max_length=50)
    license_expiry: Optional[date] = None
    vehicle_ids: List[int] = []

class DriverUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=20)
    license_number: Optional[str] = Field(None, min_length=1, max_length=50)
    license_expiry: Optional[date] = None
    vehicle_ids: Optional[List[int]] = None

class DriverResponse(BaseModel):
    id: int
    school_id: int
    name: str
    email: str
    phone: Optional[str] = None
    license_number: str
    license_expiry: Optional[date] = None
    vehicle_ids: List[int] = []

    class Config:
        from_attributes = True

class VehicleLink(BaseModel):
    vehicle_id: int

class AccompanimentCreate(PrincipalCreate):
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    transportation_ids: List[int] = []

class AccompanimentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=20)
    transportation_ids: Optional[List[int]] = None

class AccompanimentResponse(BaseModel):
    id: int
    school_id: int
    name: str
    email: str
    phone: Optional[str] = None
    transportation_ids: List[int] = []

    class Config:
        from_attributes = True

class AccompanimentLink(BaseModel):
    accompaniment_id: int

from pydantic import BaseModel, EmailStr, Field
from datetime import date
from typing import List, Optional
from enum import Enum
from .common import PrincipalCreate

class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"

class StudentCreate(PrincipalCreate):
    """Schema for registering a student in the caller's school"""
    pupil_code: Optional[str] = Field(None, max_length=50)
    gender: Optional[Gender] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    class_id: Optional[int] = None
    parent_id: Optional[int] = None
    transportation_id: Optional[int] = None

class StudentUpdate(BaseModel):
    """
    Partial update. Sending a reference as null detaches the student from it,
    leaving it out keeps the current link.
    """
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=20)
    pupil_code: Optional[str] = Field(None, max_length=50)
    gender: Optional[Gender] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    class_id: Optional[int] = None
    parent_id: Optional[int] = None
    transportation_id: Optional[int] = None

class StudentResponse(BaseModel):
    id: int
    school_id: int
    name: str
    email: str
    phone: Optional[str] = None
    pupil_code: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    class_id: Optional[int] = None
    parent_id: Optional[int] = None
    transportation_id: Optional[int] = None
    activity_ids: List[int] = []

    class Config:
        from_attributes = True

class StudentLink(BaseModel):
    student_id: int

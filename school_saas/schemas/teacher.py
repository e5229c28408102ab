from pydantic import BaseModel, EmailStr, Field
from datetime import date
from typing import List, Optional
from .common import PrincipalCreate
from .student import Gender

class TeacherCreate(PrincipalCreate):
    """Schema for registering a new teacher"""
    gender: Optional[Gender] = None
    specialization: Optional[str] = Field(None, max_length=255)
    date_of_joining: Optional[date] = None
    address: Optional[str] = None
    subject_ids: List[int] = []
    class_ids: List[int] = []

class TeacherUpdate(BaseModel):
    """Schema for updating an existing teacher; id lists replace the current links"""
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=20)
    gender: Optional[Gender] = None
    specialization: Optional[str] = Field(None, max_length=255)
    date_of_joining: Optional[date] = None
    address: Optional[str] = None
    subject_ids: Optional[List[int]] = None
    class_ids: Optional[List[int]] = None

class TeacherResponse(BaseModel):
    id: int
    school_id: int
    name: str
    email: str
    phone: Optional[str] = None
    gender: Optional[str] = None
    specialization: Optional[str] = None
    date_of_joining: Optional[date] = None
    address: Optional[str] = None
    subject_ids: List[int] = []
    class_ids: List[int] = []

    class Config:
        from_attributes = True

class TeacherLink(BaseModel):
    teacher_id: int

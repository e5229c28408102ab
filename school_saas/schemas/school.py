from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field
from .common import PrincipalCreate

class SchoolCreate(PrincipalCreate):
    """Schema for registering a new school"""
    address: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = Field(None, max_length=255)

class SchoolResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

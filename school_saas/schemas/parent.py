from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field
from .common import PrincipalCreate

class ParentCreate(PrincipalCreate):
    address: Optional[str] = None
    occupation: Optional[str] = Field(None, max_length=255)
    children_ids: List[int] = []

class ParentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    occupation: Optional[str] = Field(None, max_length=255)
    children_ids: Optional[List[int]] = None

class ParentResponse(BaseModel):
    id: int
    school_id: int
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    occupation: Optional[str] = None
    children_ids: List[int] = []

    class Config:
        from_attributes = True

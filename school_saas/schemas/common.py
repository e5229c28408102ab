import re
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def validate_time(value: Optional[str]) -> Optional[str]:
    """HH:MM, 24-hour clock"""
    if value is None:
        return value
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must use the HH:MM format")
    return value


class MessageResponse(BaseModel):
    message: str

class ErrorResponse(BaseModel):
    message: str
    error: Optional[Any] = None

class PrincipalCreate(BaseModel):
    """Fields shared by every account a school registers"""
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=20)

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        if v is None:
            return v
        cleaned_phone = ''.join(filter(str.isdigit, v))
        if not (8 <= len(cleaned_phone) <= 15):
            raise ValueError('Phone number must be between 8 and 15 digits')
        return v

class PrincipalResponse(BaseModel):
    id: int
    role: str
    name: str
    email: str
    phone: Optional[str] = None
    school_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

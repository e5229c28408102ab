from datetime import date, datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

class ActivityCategory(str, Enum):
    SPORTS = "sports"
    ARTS = "arts"
    MUSIC = "music"
    ACADEMIC = "academic"
    CULTURAL = "cultural"
    OTHER = "other"

class ActivityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: ActivityCategory = ActivityCategory.OTHER
    start_date: date
    end_date: Optional[date] = None
    location: Optional[str] = Field(None, max_length=255)
    price: Optional[float] = Field(None, ge=0)
    capacity: Optional[int] = Field(None, ge=1)
    is_active: bool = True

    @model_validator(mode='after')
    def check_dates(self):
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("End date cannot precede start date")
        return self

class ActivityUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[ActivityCategory] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    location: Optional[str] = Field(None, max_length=255)
    price: Optional[float] = Field(None, ge=0)
    capacity: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None

class ActivityRegistration(BaseModel):
    """Students register themselves; other callers name the student"""
    student_id: Optional[int] = None

class ActivityResponse(BaseModel):
    id: int
    school_id: int
    name: str
    description: Optional[str] = None
    category: str
    start_date: date
    end_date: Optional[date] = None
    location: Optional[str] = None
    price: Optional[float] = None
    capacity: Optional[int] = None
    is_active: bool
    participant_ids: List[int] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

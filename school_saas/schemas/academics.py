from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator
from .common import validate_time

# Classes

class ClassCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    grade: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    capacity: int = Field(30, ge=1)
    class_teacher_id: Optional[int] = None
    cycle_id: Optional[int] = None
    subject_ids: List[int] = []
    student_ids: List[int] = []

class ClassUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    grade: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=1)
    class_teacher_id: Optional[int] = None
    cycle_id: Optional[int] = None
    subject_ids: Optional[List[int]] = None

class ClassResponse(BaseModel):
    id: int
    school_id: int
    name: str
    grade: Optional[str] = None
    description: Optional[str] = None
    capacity: int
    class_teacher_id: Optional[int] = None
    cycle_id: Optional[int] = None
    student_ids: List[int] = []
    subject_ids: List[int] = []

    class Config:
        from_attributes = True

class ClassLink(BaseModel):
    class_id: int

# Subjects

class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    code: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    teacher_ids: List[int] = []
    class_ids: List[int] = []

    @field_validator('code')
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()

class SubjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    teacher_ids: Optional[List[int]] = None
    class_ids: Optional[List[int]] = None

    @field_validator('code')
    @classmethod
    def normalize_code(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v

class SubjectResponse(BaseModel):
    id: int
    school_id: int
    name: str
    code: str
    description: Optional[str] = None
    teacher_ids: List[int] = []
    class_ids: List[int] = []

    class Config:
        from_attributes = True

class SubjectLink(BaseModel):
    subject_id: int

# Cycles

class CycleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    class_ids: List[int] = []

class CycleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    class_ids: Optional[List[int]] = None

class CycleResponse(BaseModel):
    id: int
    school_id: int
    name: str
    description: Optional[str] = None
    class_ids: List[int] = []

    class Config:
        from_attributes = True

# Schedules

class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"

class PeriodIn(BaseModel):
    start_time: str
    end_time: str
    subject_id: Optional[int] = None
    teacher_id: Optional[int] = None
    room: Optional[str] = Field(None, max_length=50)

    @field_validator('start_time', 'end_time')
    @classmethod
    def check_time(cls, v: str) -> str:
        return validate_time(v)

    @model_validator(mode='after')
    def check_order(self):
        if self.start_time >= self.end_time:
            raise ValueError("A period must end after it starts")
        return self

class PeriodResponse(BaseModel):
    id: int
    position: int
    start_time: str
    end_time: str
    subject_id: Optional[int] = None
    teacher_id: Optional[int] = None
    room: Optional[str] = None

    class Config:
        from_attributes = True

class ScheduleCreate(BaseModel):
    class_id: int
    day: Weekday
    periods: List[PeriodIn] = Field(..., min_length=1)

class ScheduleUpdate(BaseModel):
    day: Optional[Weekday] = None
    periods: Optional[List[PeriodIn]] = Field(None, min_length=1)

class ScheduleResponse(BaseModel):
    id: int
    school_id: int
    class_id: int
    day: str
    periods: List[PeriodResponse] = []

    class Config:
        from_attributes = True

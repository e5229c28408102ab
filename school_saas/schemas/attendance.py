from datetime import date as date_type
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator
from .common import validate_time
from .role import StaffType

class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"

ATTENDANCE_STATUSES = tuple(status.value for status in AttendanceStatus)


def _reject_duplicates(ids: List[int], label: str) -> None:
    if len(ids) != len(set(ids)):
        raise ValueError(f"Each {label} may appear only once")

# Student attendance

class AttendanceRecordIn(BaseModel):
    student_id: int
    status: AttendanceStatus
    remarks: Optional[str] = None

class AttendanceRecordResponse(BaseModel):
    id: int
    student_id: int
    status: str
    remarks: Optional[str] = None

    class Config:
        from_attributes = True

class AttendanceCreate(BaseModel):
    subject_id: int
    class_id: Optional[int] = None
    # Required when a school or guard records on a teacher's behalf
    teacher_id: Optional[int] = None
    date: date_type
    records: List[AttendanceRecordIn] = Field(..., min_length=1)

    @field_validator('records')
    @classmethod
    def unique_students(cls, v):
        _reject_duplicates([record.student_id for record in v], "student")
        return v

class AttendanceUpdate(BaseModel):
    class_id: Optional[int] = None
    teacher_id: Optional[int] = None
    date: Optional[date_type] = None
    records: Optional[List[AttendanceRecordIn]] = Field(None, min_length=1)

    @field_validator('records')
    @classmethod
    def unique_students(cls, v):
        if v is not None:
            _reject_duplicates([record.student_id for record in v], "student")
        return v

class AttendanceResponse(BaseModel):
    id: int
    school_id: int
    subject_id: Optional[int] = None
    class_id: Optional[int] = None
    teacher_id: Optional[int] = None
    date: date_type
    records: List[AttendanceRecordResponse] = []
    summary: Dict[str, int] = {}

    class Config:
        from_attributes = True

# Staff attendance

class StaffAttendanceRecordIn(BaseModel):
    staff_id: int
    staff_type: StaffType
    status: AttendanceStatus
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    remarks: Optional[str] = None

    @field_validator('check_in_time', 'check_out_time')
    @classmethod
    def check_time(cls, v):
        return validate_time(v)

    @model_validator(mode='after')
    def check_order(self):
        if self.status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE) and not self.check_in_time:
            raise ValueError("Check-in time is required for present or late status")
        if self.check_in_time and self.check_out_time and self.check_out_time < self.check_in_time:
            raise ValueError("Check-out time cannot precede check-in time")
        return self

class StaffAttendanceRecordResponse(BaseModel):
    id: int
    staff_id: int
    staff_type: str
    status: str
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    remarks: Optional[str] = None

    class Config:
        from_attributes = True

def _unique_staff(records: List[StaffAttendanceRecordIn]) -> None:
    keys = [(record.staff_type, record.staff_id) for record in records]
    if len(keys) != len(set(keys)):
        raise ValueError("Each staff member may appear only once")

class StaffAttendanceCreate(BaseModel):
    date: date_type
    records: List[StaffAttendanceRecordIn] = Field(..., min_length=1)

    @field_validator('records')
    @classmethod
    def unique_staff(cls, v):
        _unique_staff(v)
        return v

class StaffAttendanceUpdate(BaseModel):
    date: Optional[date_type] = None
    records: Optional[List[StaffAttendanceRecordIn]] = Field(None, min_length=1)

    @field_validator('records')
    @classmethod
    def unique_staff(cls, v):
        if v is not None:
            _unique_staff(v)
        return v

class StaffAttendanceResponse(BaseModel):
    id: int
    school_id: int
    date: date_type
    created_by_id: int
    created_by_role: str
    records: List[StaffAttendanceRecordResponse] = []
    summary: Dict[str, int] = {}

    class Config:
        from_attributes = True

class StudentAttendanceEntry(BaseModel):
    """One student's line of a roll call, as seen from the student's history"""
    attendance_id: int
    date: date_type
    subject_id: Optional[int] = None
    class_id: Optional[int] = None
    status: str
    remarks: Optional[str] = None

class StaffAttendanceEntry(BaseModel):
    staff_attendance_id: int
    date: date_type
    staff_id: int
    staff_type: str
    status: str
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    remarks: Optional[str] = None

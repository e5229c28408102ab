from datetime import date
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator
from .common import validate_time

class ExamType(str, Enum):
    QUIZ = "quiz"
    MIDTERM = "midterm"
    FINAL = "final"
    ASSIGNMENT = "assignment"

class ExamStatus(str, Enum):
    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class ResultStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"

RESULT_STATUSES = tuple(status.value for status in ResultStatus)

class ExamResultIn(BaseModel):
    student_id: int
    marks: float = Field(..., ge=0)
    remarks: Optional[str] = None

class ExamResultResponse(BaseModel):
    id: int
    student_id: int
    marks: float
    status: str
    remarks: Optional[str] = None

    class Config:
        from_attributes = True

class ExamCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    subject_id: int
    class_id: int
    # Required when a school schedules the exam for a teacher
    teacher_id: Optional[int] = None
    exam_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    exam_type: ExamType = ExamType.QUIZ
    total_marks: float = Field(..., gt=0)
    passing_marks: float = Field(..., ge=0)
    status: ExamStatus = ExamStatus.SCHEDULED
    results: List[ExamResultIn] = []

    @field_validator('start_time', 'end_time')
    @classmethod
    def check_time(cls, v):
        return validate_time(v)

    @model_validator(mode='after')
    def check_marks(self):
        if self.passing_marks > self.total_marks:
            raise ValueError("Passing marks cannot exceed total marks")
        student_ids = [result.student_id for result in self.results]
        if len(student_ids) != len(set(student_ids)):
            raise ValueError("Each student may appear only once")
        return self

class ExamUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    teacher_id: Optional[int] = None
    exam_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    exam_type: Optional[ExamType] = None
    total_marks: Optional[float] = Field(None, gt=0)
    passing_marks: Optional[float] = Field(None, ge=0)
    status: Optional[ExamStatus] = None
    results: Optional[List[ExamResultIn]] = None

    @field_validator('start_time', 'end_time')
    @classmethod
    def check_time(cls, v):
        return validate_time(v)

    @field_validator('results')
    @classmethod
    def unique_students(cls, v):
        if v is not None:
            student_ids = [result.student_id for result in v]
            if len(student_ids) != len(set(student_ids)):
                raise ValueError("Each student may appear only once")
        return v

class ExamStatusUpdate(BaseModel):
    status: ExamStatus

class ExamResponse(BaseModel):
    id: int
    school_id: int
    title: str
    description: Optional[str] = None
    subject_id: Optional[int] = None
    class_id: Optional[int] = None
    teacher_id: Optional[int] = None
    exam_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    exam_type: str
    total_marks: float
    passing_marks: float
    status: str
    results: List[ExamResultResponse] = []
    summary: Dict[str, int] = {}

    class Config:
        from_attributes = True

class StudentExamEntry(BaseModel):
    exam_id: int
    title: str
    subject_id: Optional[int] = None
    exam_date: date
    exam_type: str
    total_marks: float
    marks: float
    status: str
    remarks: Optional[str] = None

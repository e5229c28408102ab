from sqlalchemy import Column, Integer, String, Date, ForeignKey, JSON, Text, Float
from sqlalchemy.orm import relationship
from .base import Base, TenantModel


class Exam(TenantModel):
    __tablename__ = "exams"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="SET NULL"), nullable=True, index=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="SET NULL"), nullable=True, index=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True, index=True)
    exam_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=True)
    end_time = Column(String(5), nullable=True)
    exam_type = Column(String(20), nullable=False, default="quiz")
    total_marks = Column(Float, nullable=False)
    passing_marks = Column(Float, nullable=False)
    status = Column(String(20), nullable=False, default="scheduled")
    summary = Column(JSON, nullable=False, default=dict)

    results = relationship(
        "ExamResult",
        back_populates="exam",
        cascade="all, delete-orphan",
        order_by="ExamResult.id"
    )


class ExamResult(Base):
    __tablename__ = "exam_results"

    id = Column(Integer, primary_key=True)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    marks = Column(Float, nullable=False)
    # pass/fail, derived from marks and the exam's passing mark
    status = Column(String(10), nullable=False)
    remarks = Column(Text, nullable=True)

    exam = relationship("Exam", back_populates="results")

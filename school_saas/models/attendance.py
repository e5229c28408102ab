from sqlalchemy import Column, Integer, String, Date, ForeignKey, JSON, Text, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .base import Base, TenantModel


class Attendance(TenantModel):
    """
    One roll call for a subject on a date.
    summary is derived from records and rewritten on every change.
    """
    __tablename__ = "attendances"

    id = Column(Integer, primary_key=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="SET NULL"), nullable=True, index=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="SET NULL"), nullable=True, index=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True, index=True)
    date = Column(Date, nullable=False, index=True)
    summary = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    records = relationship(
        "AttendanceRecord",
        back_populates="attendance",
        cascade="all, delete-orphan",
        order_by="AttendanceRecord.id"
    )


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"

    id = Column(Integer, primary_key=True)
    attendance_id = Column(Integer, ForeignKey("attendances.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    remarks = Column(Text, nullable=True)

    attendance = relationship("Attendance", back_populates="records")


class StaffAttendance(TenantModel):
    """Daily presence of teachers, guards, drivers and accompaniments"""
    __tablename__ = "staff_attendances"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, index=True)
    created_by_id = Column(Integer, nullable=False)
    created_by_role = Column(String(20), nullable=False)
    summary = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    records = relationship(
        "StaffAttendanceRecord",
        back_populates="staff_attendance",
        cascade="all, delete-orphan",
        order_by="StaffAttendanceRecord.id"
    )


class StaffAttendanceRecord(Base):
    __tablename__ = "staff_attendance_records"

    id = Column(Integer, primary_key=True)
    staff_attendance_id = Column(
        Integer, ForeignKey("staff_attendances.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # staff_id points into the table named by staff_type
    staff_id = Column(Integer, nullable=False, index=True)
    staff_type = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False)
    check_in_time = Column(String(5), nullable=True)
    check_out_time = Column(String(5), nullable=True)
    remarks = Column(Text, nullable=True)

    staff_attendance = relationship("StaffAttendance", back_populates="records")

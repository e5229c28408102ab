from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base, TenantModel

class Schedule(TenantModel):
    """One day of a class timetable"""
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    day = Column(String(20), nullable=False)

    periods = relationship(
        "SchedulePeriod",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="SchedulePeriod.position"
    )

class SchedulePeriod(Base):
    __tablename__ = "schedule_periods"

    id = Column(Integer, primary_key=True)
    schedule_id = Column(Integer, ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="SET NULL"), nullable=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True)
    room = Column(String(50), nullable=True)

    schedule = relationship("Schedule", back_populates="periods")

from sqlalchemy import Column, Integer, String, Date, Text, Boolean, DateTime, Float
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .base import TenantModel
from .associations import activity_participants

class Activity(TenantModel):
    """Extracurricular activity; readable without authentication"""
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False, default="other")
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    location = Column(String(255), nullable=True)
    price = Column(Float, nullable=True)
    capacity = Column(Integer, nullable=True)  # None means unbounded
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    participants = relationship(
        "Student",
        secondary=activity_participants,
        back_populates="activities"
    )

    @property
    def participant_ids(self):
        return [student.id for student in self.participants]

from sqlalchemy import Column, Integer, String, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import TenantModel
from .associations import transportation_accompaniments

class Transportation(TenantModel):
    """A school vehicle and its route"""
    __tablename__ = "transportations"
    __table_args__ = (
        UniqueConstraint("school_id", "bus_number", name="uq_transportation_school_bus"),
    )

    id = Column(Integer, primary_key=True)
    bus_number = Column(String(50), nullable=False)
    capacity = Column(Integer, nullable=False)
    name = Column(String(100), nullable=True)
    route = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="active")
    driver_id = Column(Integer, ForeignKey("drivers.id", ondelete="SET NULL"), nullable=True, index=True)

    driver = relationship("Driver", back_populates="vehicles")
    students = relationship("Student", back_populates="transportation")
    accompaniments = relationship(
        "Accompaniment",
        secondary=transportation_accompaniments,
        back_populates="transportations"
    )

    @property
    def student_ids(self):
        return [student.id for student in self.students]

    @property
    def accompaniment_ids(self):
        return [person.id for person in self.accompaniments]

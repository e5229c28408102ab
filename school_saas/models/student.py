from sqlalchemy import Column, Integer, String, Date, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import TenantModel, PrincipalMixin
from .associations import activity_participants
from school_saas.schemas.role import Role

class Student(PrincipalMixin, TenantModel):
    __tablename__ = "students"
    __table_args__ = (
        UniqueConstraint("school_id", "pupil_code", name="uq_student_school_pupil_code"),
    )
    ROLE = Role.STUDENT

    id = Column(Integer, primary_key=True, index=True)
    pupil_code = Column(String(50), nullable=True)
    gender = Column(String(20), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    address = Column(Text, nullable=True)

    # Single-valued back-references, each the only copy of its relation
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="SET NULL"), nullable=True, index=True)
    parent_id = Column(Integer, ForeignKey("parents.id", ondelete="SET NULL"), nullable=True, index=True)
    transportation_id = Column(
        Integer, ForeignKey("transportations.id", ondelete="SET NULL"), nullable=True, index=True
    )

    student_class = relationship("Class", back_populates="students")
    parent = relationship("Parent", back_populates="children")
    transportation = relationship("Transportation", back_populates="students")
    activities = relationship(
        "Activity",
        secondary=activity_participants,
        back_populates="participants"
    )

    @property
    def activity_ids(self):
        return [activity.id for activity in self.activities]

from sqlalchemy import Column, Integer, String, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import TenantModel
from .associations import class_subjects

class Class(TenantModel):
    __tablename__ = "classes"
    __table_args__ = (
        UniqueConstraint("school_id", "name", name="uq_class_school_name"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)  # e.g., "Grade 5 A"
    grade = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
    capacity = Column(Integer, nullable=False, default=30)
    class_teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True, index=True)
    cycle_id = Column(Integer, ForeignKey("cycles.id", ondelete="SET NULL"), nullable=True, index=True)

    class_teacher = relationship("Teacher", back_populates="classes")
    cycle = relationship("Cycle", back_populates="classes")
    students = relationship("Student", back_populates="student_class")
    subjects = relationship(
        "Subject",
        secondary=class_subjects,
        back_populates="classes"
    )

    @property
    def student_ids(self):
        return [student.id for student in self.students]

    @property
    def subject_ids(self):
        return [subject.id for subject in self.subjects]

    def __repr__(self):
        name = self.__dict__.get('name', '<detached>')
        school_id = self.__dict__.get('school_id', '<detached>')
        return f"<Class(name={name}, school_id={school_id})>"

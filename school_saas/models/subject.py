from sqlalchemy import Column, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import TenantModel
from .associations import class_subjects, subject_teachers

class Subject(TenantModel):
    __tablename__ = "subjects"
    __table_args__ = (
        UniqueConstraint("school_id", "code", name="uq_subject_school_code"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    code = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)

    teachers = relationship(
        "Teacher",
        secondary=subject_teachers,
        back_populates="subjects"
    )
    classes = relationship(
        "Class",
        secondary=class_subjects,
        back_populates="subjects"
    )

    @property
    def teacher_ids(self):
        return [teacher.id for teacher in self.teachers]

    @property
    def class_ids(self):
        return [class_.id for class_ in self.classes]

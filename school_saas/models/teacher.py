from sqlalchemy import Column, Integer, String, Date, Text
from sqlalchemy.orm import relationship
from .base import TenantModel, PrincipalMixin
from .associations import subject_teachers
from school_saas.schemas.role import Role

class Teacher(PrincipalMixin, TenantModel):
    __tablename__ = "teachers"
    ROLE = Role.TEACHER

    id = Column(Integer, primary_key=True, index=True)
    gender = Column(String(20), nullable=True)
    specialization = Column(String(255), nullable=True)
    date_of_joining = Column(Date, nullable=True)
    address = Column(Text, nullable=True)

    # Classes this teacher leads, via Class.class_teacher_id
    classes = relationship("Class", back_populates="class_teacher")
    subjects = relationship(
        "Subject",
        secondary=subject_teachers,
        back_populates="teachers"
    )

    @property
    def class_ids(self):
        return [class_.id for class_ in self.classes]

    @property
    def subject_ids(self):
        return [subject.id for subject in self.subjects]

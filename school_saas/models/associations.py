from sqlalchemy import Table, Column, Integer, ForeignKey
from .base import Base

# Each row is both sides of one many-to-many link

class_subjects = Table(
    "class_subjects",
    Base.metadata,
    Column("class_id", Integer, ForeignKey("classes.id", ondelete="CASCADE"), primary_key=True),
    Column("subject_id", Integer, ForeignKey("subjects.id", ondelete="CASCADE"), primary_key=True),
)

subject_teachers = Table(
    "subject_teachers",
    Base.metadata,
    Column("subject_id", Integer, ForeignKey("subjects.id", ondelete="CASCADE"), primary_key=True),
    Column("teacher_id", Integer, ForeignKey("teachers.id", ondelete="CASCADE"), primary_key=True),
)

transportation_accompaniments = Table(
    "transportation_accompaniments",
    Base.metadata,
    Column("transportation_id", Integer, ForeignKey("transportations.id", ondelete="CASCADE"), primary_key=True),
    Column("accompaniment_id", Integer, ForeignKey("accompaniments.id", ondelete="CASCADE"), primary_key=True),
)

activity_participants = Table(
    "activity_participants",
    Base.metadata,
    Column("activity_id", Integer, ForeignKey("activities.id", ondelete="CASCADE"), primary_key=True),
    Column("student_id", Integer, ForeignKey("students.id", ondelete="CASCADE"), primary_key=True),
)

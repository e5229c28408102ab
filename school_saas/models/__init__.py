from .base import Base, TenantModel, PrincipalMixin
from .associations import (
    class_subjects,
    subject_teachers,
    transportation_accompaniments,
    activity_participants,
)
from .school import School, Admin
from .student import Student
from .teacher import Teacher
from .parent import Parent
from .staff import Guard, Driver, Accompaniment
from .class_ import Class
from .subject import Subject
from .cycle import Cycle
from .schedule import Schedule, SchedulePeriod
from .attendance import Attendance, AttendanceRecord, StaffAttendance, StaffAttendanceRecord
from .exam import Exam, ExamResult
from .transportation import Transportation
from .activity import Activity
from school_saas.schemas.role import Role

# Principal table for every role
PRINCIPAL_MODELS = {
    Role.ADMIN: Admin,
    Role.SCHOOL: School,
    Role.STUDENT: Student,
    Role.TEACHER: Teacher,
    Role.PARENT: Parent,
    Role.GUARD: Guard,
    Role.DRIVER: Driver,
    Role.ACCOMPANIMENT: Accompaniment,
}

__all__ = [
    "Base",
    "TenantModel",
    "PrincipalMixin",
    "class_subjects",
    "subject_teachers",
    "transportation_accompaniments",
    "activity_participants",
    "School",
    "Admin",
    "Student",
    "Teacher",
    "Parent",
    "Guard",
    "Driver",
    "Accompaniment",
    "Class",
    "Subject",
    "Cycle",
    "Schedule",
    "SchedulePeriod",
    "Attendance",
    "AttendanceRecord",
    "StaffAttendance",
    "StaffAttendanceRecord",
    "Exam",
    "ExamResult",
    "Transportation",
    "Activity",
    "PRINCIPAL_MODELS",
]

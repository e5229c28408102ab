from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    SCHOOL = "school"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"
    GUARD = "guard"
    DRIVER = "driver"
    ACCOMPANIMENT = "accompaniment"

# Staff whose presence is tracked by staff attendance
class StaffType(str, Enum):
    TEACHER = "teacher"
    GUARD = "guard"
    DRIVER = "driver"
    ACCOMPANIMENT = "accompaniment"

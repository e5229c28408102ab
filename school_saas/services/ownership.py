"""SQL predicates for rows a teacher or parent owns inside their school."""
from sqlalchemy import or_, select

from school_saas.models import (
    AttendanceRecord, Class, ExamResult, SchedulePeriod, Student,
    class_subjects, subject_teachers,
)


def classes_led_by(teacher_id: int):
    return select(Class.id).where(Class.class_teacher_id == teacher_id)


def subjects_taught_by(teacher_id: int):
    return select(subject_teachers.c.subject_id).where(subject_teachers.c.teacher_id == teacher_id)


def classes_taught_by(teacher_id: int):
    """Classes holding at least one subject the teacher teaches"""
    return select(class_subjects.c.class_id).where(
        class_subjects.c.subject_id.in_(subjects_taught_by(teacher_id))
    )


def teacher_students(teacher_id: int):
    return or_(
        Student.class_id.in_(classes_led_by(teacher_id)),
        Student.class_id.in_(classes_taught_by(teacher_id)),
    )


def children_of(parent_id: int):
    return select(Student.id).where(Student.parent_id == parent_id)


def classes_of_children(parent_id: int):
    return select(Student.class_id).where(Student.parent_id == parent_id, Student.class_id.is_not(None))


def attendance_with_children(parent_id: int):
    return select(AttendanceRecord.attendance_id).where(
        AttendanceRecord.student_id.in_(children_of(parent_id))
    )


def exams_with_children(parent_id: int):
    return select(ExamResult.exam_id).where(ExamResult.student_id.in_(children_of(parent_id)))


def schedules_taught_by(teacher_id: int):
    return select(SchedulePeriod.schedule_id).where(SchedulePeriod.teacher_id == teacher_id)


def cycles_led_by(teacher_id: int):
    """Cycles holding a class the teacher leads"""
    return select(Class.cycle_id).where(Class.class_teacher_id == teacher_id, Class.cycle_id.is_not(None))

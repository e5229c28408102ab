"""Derived counters stored next to attendance, staff attendance and exam records."""
from typing import Any, Dict, Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.models import (
    Attendance, AttendanceRecord, Exam, ExamResult, StaffAttendance, StaffAttendanceRecord,
)
from school_saas.schemas.attendance import ATTENDANCE_STATUSES
from school_saas.schemas.exam import RESULT_STATUSES
from school_saas.schemas.role import StaffType

STAFF_TOTAL_KEYS = {
    StaffType.TEACHER.value: "total_teachers",
    StaffType.GUARD.value: "total_guards",
    StaffType.DRIVER.value: "total_drivers",
    StaffType.ACCOMPANIMENT.value: "total_accompaniments",
}


def _field(record: Any, name: str):
    if isinstance(record, dict):
        return record.get(name)
    value = getattr(record, name, None)
    return getattr(value, "value", value)


def summarize(records: Iterable[Any], statuses: Sequence[str]) -> Dict[str, int]:
    """
    Count records per status. Every status appears in the result, so an empty
    list summarizes to all zeros. Statuses outside the list are not counted.
    """
    counts = {status: 0 for status in statuses}
    for record in records:
        status = _field(record, "status")
        if status in counts:
            counts[status] += 1
    return counts


def summarize_attendance(records: Iterable[Any]) -> Dict[str, int]:
    return summarize(records, ATTENDANCE_STATUSES)


def summarize_exam(records: Iterable[Any]) -> Dict[str, int]:
    return summarize(records, RESULT_STATUSES)


def summarize_staff(records: Iterable[Any]) -> Dict[str, int]:
    """Status counts plus a head count per staff type"""
    records = list(records)
    counts = summarize(records, ATTENDANCE_STATUSES)
    totals = {key: 0 for key in STAFF_TOTAL_KEYS.values()}
    for record in records:
        key = STAFF_TOTAL_KEYS.get(_field(record, "staff_type"))
        if key:
            totals[key] += 1
    counts.update(totals)
    return counts


def result_status(marks: float, passing_marks: float) -> str:
    return "pass" if marks >= passing_marks else "fail"


async def _statuses(db: AsyncSession, query) -> list:
    # The session does not autoflush; pending records must reach the database first
    await db.flush()
    result = await db.execute(query)
    return [dict(row._mapping) for row in result]


async def recompute_attendance(db: AsyncSession, attendance_id: int) -> Dict[str, int]:
    rows = await _statuses(
        db, select(AttendanceRecord.status).where(AttendanceRecord.attendance_id == attendance_id)
    )
    summary = summarize_attendance(rows)
    attendance = await db.get(Attendance, attendance_id)
    if attendance is not None:
        attendance.summary = summary
    return summary


async def recompute_exam(db: AsyncSession, exam_id: int) -> Dict[str, int]:
    rows = await _statuses(db, select(ExamResult.status).where(ExamResult.exam_id == exam_id))
    summary = summarize_exam(rows)
    exam = await db.get(Exam, exam_id)
    if exam is not None:
        exam.summary = summary
    return summary


async def recompute_staff_attendance(db: AsyncSession, staff_attendance_id: int) -> Dict[str, int]:
    rows = await _statuses(
        db,
        select(StaffAttendanceRecord.status, StaffAttendanceRecord.staff_type)
        .where(StaffAttendanceRecord.staff_attendance_id == staff_attendance_id)
    )
    summary = summarize_staff(rows)
    sheet = await db.get(StaffAttendance, staff_attendance_id)
    if sheet is not None:
        sheet.summary = summary
    return summary

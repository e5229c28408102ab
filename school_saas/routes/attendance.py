from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.dependencies import get_db
from school_saas.core.permissions import AccessGrant, Action, Resource, require
from school_saas.routes import ERROR_RESPONSES
from school_saas.schemas.attendance import (
    AttendanceCreate, AttendanceResponse, AttendanceUpdate, StudentAttendanceEntry,
)
from school_saas.schemas.common import MessageResponse
from school_saas.services.attendance_service import AttendanceService

router = APIRouter(prefix="/attendance", tags=["Attendance"], responses=ERROR_RESPONSES)


@router.post(
    "",
    response_model=AttendanceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={201: {"description": "Attendance recorded"}}
)
async def create_attendance(
    data: AttendanceCreate,
    grant: AccessGrant = Depends(require(Resource.ATTENDANCE, Action.CREATE)),
    db: AsyncSession = Depends(get_db)
):
    """
    Record a roll call for a subject.

    Teachers record for subjects they teach. Schools and guards must name the
    teacher the sheet belongs to.
    """
    return await AttendanceService(db).create_attendance(data, grant)


@router.get("/subject/{subject_id}", response_model=List[AttendanceResponse])
async def list_subject_attendance(
    subject_id: int,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    grant: AccessGrant = Depends(require(Resource.ATTENDANCE, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await AttendanceService(db).list_by_subject(subject_id, grant, start_date, end_date)


@router.get("/date/{day}", response_model=List[AttendanceResponse])
async def list_attendance_by_date(
    day: date,
    grant: AccessGrant = Depends(require(Resource.ATTENDANCE, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await AttendanceService(db).list_by_date(day, grant)


@router.get("/student/{student_id}", response_model=List[StudentAttendanceEntry])
async def list_student_attendance(
    student_id: int,
    grant: AccessGrant = Depends(require(Resource.ATTENDANCE, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    """Attendance history of a student; parents only reach their own children"""
    return await AttendanceService(db).list_for_student(student_id, grant)


@router.get("/{attendance_id}", response_model=AttendanceResponse)
async def get_attendance(
    attendance_id: int,
    grant: AccessGrant = Depends(require(Resource.ATTENDANCE, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await AttendanceService(db).get_attendance(attendance_id, grant)


@router.put("/{attendance_id}", response_model=AttendanceResponse)
async def update_attendance(
    attendance_id: int,
    data: AttendanceUpdate,
    grant: AccessGrant = Depends(require(Resource.ATTENDANCE, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    """Update a roll call; records, when sent, replace the previous ones"""
    return await AttendanceService(db).update_attendance(attendance_id, data, grant)


@router.delete("/{attendance_id}", response_model=MessageResponse)
async def delete_attendance(
    attendance_id: int,
    grant: AccessGrant = Depends(require(Resource.ATTENDANCE, Action.DELETE)),
    db: AsyncSession = Depends(get_db)
):
    await AttendanceService(db).delete_attendance(attendance_id, grant)
    return MessageResponse(message="Attendance record deleted successfully")

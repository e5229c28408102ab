from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.dependencies import get_db
from school_saas.core.permissions import AccessGrant, Action, Resource, require
from school_saas.routes import ERROR_RESPONSES
from school_saas.schemas.attendance import (
    StaffAttendanceCreate, StaffAttendanceEntry, StaffAttendanceResponse, StaffAttendanceUpdate,
)
from school_saas.schemas.common import MessageResponse
from school_saas.schemas.role import StaffType
from school_saas.services.staff_attendance_service import StaffAttendanceService

router = APIRouter(prefix="/staff-attendance", tags=["Staff attendance"], responses=ERROR_RESPONSES)


@router.post("", response_model=StaffAttendanceResponse, status_code=status.HTTP_201_CREATED)
async def create_staff_attendance(
    data: StaffAttendanceCreate,
    grant: AccessGrant = Depends(require(Resource.STAFF_ATTENDANCE, Action.CREATE)),
    db: AsyncSession = Depends(get_db)
):
    """Record the day's presence of teachers, guards, drivers and accompaniments"""
    return await StaffAttendanceService(db).create_sheet(data, grant)


@router.get("", response_model=List[StaffAttendanceResponse])
async def list_staff_attendance(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    grant: AccessGrant = Depends(require(Resource.STAFF_ATTENDANCE, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await StaffAttendanceService(db).list_sheets(grant, start_date, end_date)


@router.get("/date/{day}", response_model=List[StaffAttendanceResponse])
async def list_staff_attendance_by_date(
    day: date,
    grant: AccessGrant = Depends(require(Resource.STAFF_ATTENDANCE, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await StaffAttendanceService(db).list_by_date(day, grant)


@router.get("/staff/{staff_id}", response_model=List[StaffAttendanceEntry])
async def list_member_attendance(
    staff_id: int,
    staff_type: StaffType = Query(..., description="Which kind of staff member staff_id names"),
    grant: AccessGrant = Depends(require(Resource.STAFF_ATTENDANCE, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await StaffAttendanceService(db).list_for_staff(staff_id, staff_type, grant)


@router.get("/{sheet_id}", response_model=StaffAttendanceResponse)
async def get_staff_attendance(
    sheet_id: int,
    grant: AccessGrant = Depends(require(Resource.STAFF_ATTENDANCE, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await StaffAttendanceService(db).get_sheet(sheet_id, grant)


@router.put("/{sheet_id}", response_model=StaffAttendanceResponse)
async def update_staff_attendance(
    sheet_id: int,
    data: StaffAttendanceUpdate,
    grant: AccessGrant = Depends(require(Resource.STAFF_ATTENDANCE, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await StaffAttendanceService(db).update_sheet(sheet_id, data, grant)


@router.delete("/{sheet_id}", response_model=MessageResponse)
async def delete_staff_attendance(
    sheet_id: int,
    grant: AccessGrant = Depends(require(Resource.STAFF_ATTENDANCE, Action.DELETE)),
    db: AsyncSession = Depends(get_db)
):
    await StaffAttendanceService(db).delete_sheet(sheet_id, grant)
    return MessageResponse(message="Staff attendance record deleted successfully")

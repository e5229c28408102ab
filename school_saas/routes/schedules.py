from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.dependencies import get_db
from school_saas.core.permissions import AccessGrant, Action, Resource, require
from school_saas.routes import ERROR_RESPONSES
from school_saas.schemas.academics import ScheduleCreate, ScheduleResponse, ScheduleUpdate
from school_saas.schemas.common import MessageResponse
from school_saas.services.schedule_service import ScheduleService

router = APIRouter(prefix="/schedules", tags=["Schedules"], responses=ERROR_RESPONSES)


@router.post("", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    data: ScheduleCreate,
    grant: AccessGrant = Depends(require(Resource.SCHEDULE, Action.CREATE)),
    db: AsyncSession = Depends(get_db)
):
    """Create one day of a class timetable; periods may not collide with existing ones"""
    return await ScheduleService(db).create_schedule(data, grant)


@router.get("", response_model=List[ScheduleResponse])
async def list_schedules(
    class_id: Optional[int] = Query(None),
    grant: AccessGrant = Depends(require(Resource.SCHEDULE, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await ScheduleService(db).list_schedules(grant, class_id=class_id)


@router.get("/class/{class_id}", response_model=List[ScheduleResponse])
async def list_class_schedules(
    class_id: int,
    grant: AccessGrant = Depends(require(Resource.SCHEDULE, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await ScheduleService(db).list_for_class(class_id, grant)


@router.get("/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(
    schedule_id: int,
    grant: AccessGrant = Depends(require(Resource.SCHEDULE, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await ScheduleService(db).get_schedule(schedule_id, grant)


@router.put("/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_id: int,
    data: ScheduleUpdate,
    grant: AccessGrant = Depends(require(Resource.SCHEDULE, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    """Move the schedule to another day or replace its periods"""
    return await ScheduleService(db).update_schedule(schedule_id, data, grant)


@router.delete("/{schedule_id}", response_model=MessageResponse)
async def delete_schedule(
    schedule_id: int,
    grant: AccessGrant = Depends(require(Resource.SCHEDULE, Action.DELETE)),
    db: AsyncSession = Depends(get_db)
):
    await ScheduleService(db).delete_schedule(schedule_id, grant)
    return MessageResponse(message="Schedule deleted successfully")

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.dependencies import get_db
from school_saas.core.permissions import AccessGrant, Action, Resource, require
from school_saas.routes import ERROR_RESPONSES
from school_saas.schemas.activity import (
    ActivityCategory, ActivityCreate, ActivityRegistration, ActivityResponse, ActivityUpdate,
)
from school_saas.schemas.common import MessageResponse
from school_saas.services.activity_service import ActivityService

router = APIRouter(tags=["Activities"], responses=ERROR_RESPONSES)


@router.post("/activities", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
async def create_activity(
    data: ActivityCreate,
    grant: AccessGrant = Depends(require(Resource.ACTIVITY, Action.CREATE)),
    db: AsyncSession = Depends(get_db)
):
    return await ActivityService(db).create_activity(data, grant)


@router.get("/activities", response_model=List[ActivityResponse])
async def list_activities(
    school_id: Optional[int] = Query(None),
    category: Optional[ActivityCategory] = Query(None),
    active: Optional[bool] = Query(None, description="Only activities still open"),
    upcoming: Optional[bool] = Query(None, description="Only activities that have not ended"),
    db: AsyncSession = Depends(get_db)
):
    """Public catalogue of activities across schools"""
    return await ActivityService(db).list_public(
        school_id=school_id,
        category=category.value if category else None,
        active=active,
        upcoming=upcoming,
    )


@router.get("/school/activities", response_model=List[ActivityResponse])
async def list_school_activities(
    grant: AccessGrant = Depends(require(Resource.ACTIVITY, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    """Activities created by the calling school, newest first"""
    return await ActivityService(db).list_for_school(grant)


@router.get("/activities/{activity_id}", response_model=ActivityResponse)
async def get_activity(activity_id: int, db: AsyncSession = Depends(get_db)):
    return await ActivityService(db).get_public(activity_id)


@router.put("/activities/{activity_id}", response_model=ActivityResponse)
async def update_activity(
    activity_id: int,
    data: ActivityUpdate,
    grant: AccessGrant = Depends(require(Resource.ACTIVITY, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await ActivityService(db).update_activity(activity_id, data, grant)


@router.delete("/activities/{activity_id}", response_model=MessageResponse)
async def delete_activity(
    activity_id: int,
    grant: AccessGrant = Depends(require(Resource.ACTIVITY, Action.DELETE)),
    db: AsyncSession = Depends(get_db)
):
    await ActivityService(db).delete_activity(activity_id, grant)
    return MessageResponse(message="Activity deleted successfully")


@router.post("/activities/{activity_id}/register", response_model=ActivityResponse)
async def register_for_activity(
    activity_id: int,
    data: ActivityRegistration,
    grant: AccessGrant = Depends(require(Resource.ACTIVITY_PARTICIPANT, Action.CREATE)),
    db: AsyncSession = Depends(get_db)
):
    """Register a student; students register themselves, parents their children"""
    return await ActivityService(db).register(activity_id, data.student_id, grant)


@router.post("/activities/{activity_id}/deregister", response_model=ActivityResponse)
async def deregister_from_activity(
    activity_id: int,
    data: ActivityRegistration,
    grant: AccessGrant = Depends(require(Resource.ACTIVITY_PARTICIPANT, Action.DELETE)),
    db: AsyncSession = Depends(get_db)
):
    return await ActivityService(db).deregister(activity_id, data.student_id, grant)

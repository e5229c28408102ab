from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.dependencies import get_db
from school_saas.core.permissions import AccessGrant, Action, Resource, require
from school_saas.routes import ERROR_RESPONSES
from school_saas.schemas.common import MessageResponse
from school_saas.schemas.school import SchoolCreate, SchoolResponse
from school_saas.services.school_service import SchoolService

router = APIRouter(tags=["Schools"], responses=ERROR_RESPONSES)


@router.post(
    "/school/register",
    response_model=SchoolResponse,
    status_code=status.HTTP_201_CREATED
)
async def register_school(
    data: SchoolCreate,
    grant: AccessGrant = Depends(require(Resource.SCHOOL, Action.CREATE)),
    db: AsyncSession = Depends(get_db)
):
    """Register a new school tenant (admin only)"""
    return await SchoolService(db).register_school(data)


@router.get("/schools", response_model=List[SchoolResponse])
async def list_schools(
    grant: AccessGrant = Depends(require(Resource.SCHOOL, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    """Admins see every school; a school sees itself"""
    return await SchoolService(db).list_schools(grant)


@router.get("/school/{school_id:int}", response_model=SchoolResponse)
async def get_school(
    school_id: int,
    grant: AccessGrant = Depends(require(Resource.SCHOOL, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await SchoolService(db).get_school(school_id, grant)


@router.delete("/school/{school_id:int}", response_model=MessageResponse)
async def delete_school(
    school_id: int,
    grant: AccessGrant = Depends(require(Resource.SCHOOL, Action.DELETE)),
    db: AsyncSession = Depends(get_db)
):
    """Delete a school together with every record it owns"""
    await SchoolService(db).delete_school(school_id, grant)
    return MessageResponse(message="School deleted successfully")

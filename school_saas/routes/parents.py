from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.dependencies import get_db
from school_saas.core.permissions import AccessGrant, Action, Resource, require
from school_saas.routes import ERROR_RESPONSES
from school_saas.schemas.common import MessageResponse
from school_saas.schemas.parent import ParentCreate, ParentResponse, ParentUpdate
from school_saas.schemas.student import StudentLink
from school_saas.services.parent_service import ParentService

router = APIRouter(prefix="/parents", tags=["Parents"], responses=ERROR_RESPONSES)


@router.post("", response_model=ParentResponse, status_code=status.HTTP_201_CREATED)
async def create_parent(
    data: ParentCreate,
    grant: AccessGrant = Depends(require(Resource.PARENT, Action.CREATE)),
    db: AsyncSession = Depends(get_db)
):
    return await ParentService(db).create_parent(data, grant)


@router.get("", response_model=List[ParentResponse])
async def list_parents(
    grant: AccessGrant = Depends(require(Resource.PARENT, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await ParentService(db).list_parents(grant)


@router.get("/{parent_id}", response_model=ParentResponse)
async def get_parent(
    parent_id: int,
    grant: AccessGrant = Depends(require(Resource.PARENT, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await ParentService(db).get_parent(parent_id, grant)


@router.put("/{parent_id}", response_model=ParentResponse)
async def update_parent(
    parent_id: int,
    data: ParentUpdate,
    grant: AccessGrant = Depends(require(Resource.PARENT, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await ParentService(db).update_parent(parent_id, data, grant)


@router.delete("/{parent_id}", response_model=MessageResponse)
async def delete_parent(
    parent_id: int,
    grant: AccessGrant = Depends(require(Resource.PARENT, Action.DELETE)),
    db: AsyncSession = Depends(get_db)
):
    """Delete a parent; their children stay enrolled without a parent link"""
    await ParentService(db).delete_parent(parent_id, grant)
    return MessageResponse(message="Parent deleted successfully")


@router.post("/{parent_id}/children", response_model=ParentResponse)
async def add_child(
    parent_id: int,
    link: StudentLink,
    grant: AccessGrant = Depends(require(Resource.PARENT, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await ParentService(db).add_child(parent_id, link.student_id, grant)


@router.delete("/{parent_id}/children/{student_id}", response_model=ParentResponse)
async def remove_child(
    parent_id: int,
    student_id: int,
    grant: AccessGrant = Depends(require(Resource.PARENT, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await ParentService(db).remove_child(parent_id, student_id, grant)

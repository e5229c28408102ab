from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.dependencies import get_db
from school_saas.core.permissions import AccessGrant, Action, Resource, require
from school_saas.routes import ERROR_RESPONSES
from school_saas.schemas.common import MessageResponse
from school_saas.schemas.teacher import TeacherCreate, TeacherResponse, TeacherUpdate
from school_saas.services.teacher_service import TeacherService

router = APIRouter(prefix="/teachers", tags=["Teachers"], responses=ERROR_RESPONSES)


@router.post(
    "",
    response_model=TeacherResponse,
    status_code=status.HTTP_201_CREATED,
    responses={201: {"description": "Teacher successfully registered"}}
)
async def register_teacher(
    data: TeacherCreate,
    grant: AccessGrant = Depends(require(Resource.TEACHER, Action.CREATE)),
    db: AsyncSession = Depends(get_db)
):
    """Register a teacher with login credentials and optional subject and class assignments"""
    return await TeacherService(db).register_teacher(data, grant)


@router.get("", response_model=List[TeacherResponse])
async def list_teachers(
    grant: AccessGrant = Depends(require(Resource.TEACHER, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    """List all teachers in a school."""
    return await TeacherService(db).list_teachers(grant)


@router.get("/{teacher_id}", response_model=TeacherResponse)
async def get_teacher(
    teacher_id: int,
    grant: AccessGrant = Depends(require(Resource.TEACHER, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await TeacherService(db).get_teacher(teacher_id, grant)


@router.put("/{teacher_id}", response_model=TeacherResponse)
async def update_teacher(
    teacher_id: int,
    data: TeacherUpdate,
    grant: AccessGrant = Depends(require(Resource.TEACHER, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    """Update a teacher; subject_ids and class_ids replace the current assignments"""
    return await TeacherService(db).update_teacher(teacher_id, data, grant)


@router.delete("/{teacher_id}", response_model=MessageResponse)
async def delete_teacher(
    teacher_id: int,
    grant: AccessGrant = Depends(require(Resource.TEACHER, Action.DELETE)),
    db: AsyncSession = Depends(get_db)
):
    await TeacherService(db).delete_teacher(teacher_id, grant)
    return MessageResponse(message="Teacher deleted successfully")

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.dependencies import get_db
from school_saas.core.permissions import AccessGrant, Action, Resource, require
from school_saas.routes import ERROR_RESPONSES
from school_saas.schemas.academics import SubjectCreate, SubjectResponse, SubjectUpdate
from school_saas.schemas.common import MessageResponse
from school_saas.schemas.teacher import TeacherLink
from school_saas.services.subject_service import SubjectService

router = APIRouter(prefix="/subjects", tags=["Subjects"], responses=ERROR_RESPONSES)


@router.post("", response_model=SubjectResponse, status_code=status.HTTP_201_CREATED)
async def create_subject(
    data: SubjectCreate,
    grant: AccessGrant = Depends(require(Resource.SUBJECT, Action.CREATE)),
    db: AsyncSession = Depends(get_db)
):
    return await SubjectService(db).create_subject(data, grant)


@router.get("", response_model=List[SubjectResponse])
async def list_subjects(
    grant: AccessGrant = Depends(require(Resource.SUBJECT, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await SubjectService(db).list_subjects(grant)


@router.get("/{subject_id}", response_model=SubjectResponse)
async def get_subject(
    subject_id: int,
    grant: AccessGrant = Depends(require(Resource.SUBJECT, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await SubjectService(db).get_subject(subject_id, grant)


@router.put("/{subject_id}", response_model=SubjectResponse)
async def update_subject(
    subject_id: int,
    data: SubjectUpdate,
    grant: AccessGrant = Depends(require(Resource.SUBJECT, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await SubjectService(db).update_subject(subject_id, data, grant)


@router.delete("/{subject_id}", response_model=MessageResponse)
async def delete_subject(
    subject_id: int,
    grant: AccessGrant = Depends(require(Resource.SUBJECT, Action.DELETE)),
    db: AsyncSession = Depends(get_db)
):
    await SubjectService(db).delete_subject(subject_id, grant)
    return MessageResponse(message="Subject deleted successfully")


@router.post("/{subject_id}/teachers", response_model=SubjectResponse)
async def add_teacher(
    subject_id: int,
    link: TeacherLink,
    grant: AccessGrant = Depends(require(Resource.SUBJECT, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await SubjectService(db).add_teacher(subject_id, link.teacher_id, grant)


@router.delete("/{subject_id}/teachers/{teacher_id}", response_model=SubjectResponse)
async def remove_teacher(
    subject_id: int,
    teacher_id: int,
    grant: AccessGrant = Depends(require(Resource.SUBJECT, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await SubjectService(db).remove_teacher(subject_id, teacher_id, grant)

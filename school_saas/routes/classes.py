from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.dependencies import get_db
from school_saas.core.permissions import AccessGrant, Action, Resource, require
from school_saas.routes import ERROR_RESPONSES
from school_saas.schemas.academics import ClassCreate, ClassResponse, ClassUpdate, SubjectLink
from school_saas.schemas.common import MessageResponse
from school_saas.schemas.student import StudentLink, StudentResponse
from school_saas.services.class_service import ClassService

router = APIRouter(prefix="/classes", tags=["Classes"], responses=ERROR_RESPONSES)


@router.post("", response_model=ClassResponse, status_code=status.HTTP_201_CREATED)
async def create_class(
    data: ClassCreate,
    grant: AccessGrant = Depends(require(Resource.CLASS, Action.CREATE)),
    db: AsyncSession = Depends(get_db)
):
    return await ClassService(db).create_class(data, grant)


@router.get("", response_model=List[ClassResponse])
async def list_classes(
    cycle_id: Optional[int] = Query(None, description="Only classes of this cycle"),
    grant: AccessGrant = Depends(require(Resource.CLASS, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    """Classes of the school; teachers see the classes they lead"""
    return await ClassService(db).list_classes(grant, cycle_id=cycle_id)


@router.get("/{class_id}", response_model=ClassResponse)
async def get_class(
    class_id: int,
    grant: AccessGrant = Depends(require(Resource.CLASS, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await ClassService(db).get_class(class_id, grant)


@router.put("/{class_id}", response_model=ClassResponse)
async def update_class(
    class_id: int,
    data: ClassUpdate,
    grant: AccessGrant = Depends(require(Resource.CLASS, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await ClassService(db).update_class(class_id, data, grant)


@router.delete("/{class_id}", response_model=MessageResponse)
async def delete_class(
    class_id: int,
    grant: AccessGrant = Depends(require(Resource.CLASS, Action.DELETE)),
    db: AsyncSession = Depends(get_db)
):
    """Delete a class; its students stay enrolled in the school without a class"""
    await ClassService(db).delete_class(class_id, grant)
    return MessageResponse(message="Class deleted successfully")


@router.get("/{class_id}/students", response_model=List[StudentResponse])
async def list_class_students(
    class_id: int,
    grant: AccessGrant = Depends(require(Resource.CLASS, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await ClassService(db).list_students(class_id, grant)


@router.post("/{class_id}/students", response_model=ClassResponse)
async def add_student(
    class_id: int,
    link: StudentLink,
    grant: AccessGrant = Depends(require(Resource.CLASS, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    """Enroll a student, moving them out of their previous class"""
    return await ClassService(db).add_student(class_id, link.student_id, grant)


@router.delete("/{class_id}/students/{student_id}", response_model=ClassResponse)
async def remove_student(
    class_id: int,
    student_id: int,
    grant: AccessGrant = Depends(require(Resource.CLASS, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await ClassService(db).remove_student(class_id, student_id, grant)


@router.post("/{class_id}/subjects", response_model=ClassResponse)
async def add_subject(
    class_id: int,
    link: SubjectLink,
    grant: AccessGrant = Depends(require(Resource.CLASS, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await ClassService(db).add_subject(class_id, link.subject_id, grant)


@router.delete("/{class_id}/subjects/{subject_id}", response_model=ClassResponse)
async def remove_subject(
    class_id: int,
    subject_id: int,
    grant: AccessGrant = Depends(require(Resource.CLASS, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await ClassService(db).remove_subject(class_id, subject_id, grant)

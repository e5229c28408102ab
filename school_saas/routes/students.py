from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.dependencies import get_db
from school_saas.core.permissions import AccessGrant, Action, Resource, require
from school_saas.routes import ERROR_RESPONSES
from school_saas.schemas.common import MessageResponse
from school_saas.schemas.student import StudentCreate, StudentResponse, StudentUpdate
from school_saas.services.student_service import StudentService

router = APIRouter(prefix="/students", tags=["Students"], responses=ERROR_RESPONSES)


@router.post(
    "",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_student(
    data: StudentCreate,
    grant: AccessGrant = Depends(require(Resource.STUDENT, Action.CREATE)),
    db: AsyncSession = Depends(get_db)
):
    """Register a student, optionally placing them in a class, family and vehicle"""
    return await StudentService(db).create_student(data, grant)


@router.get("", response_model=List[StudentResponse])
async def list_students(
    class_id: Optional[int] = Query(None, description="Only students of this class"),
    grant: AccessGrant = Depends(require(Resource.STUDENT, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await StudentService(db).list_students(grant, class_id=class_id)


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: int,
    grant: AccessGrant = Depends(require(Resource.STUDENT, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await StudentService(db).get_student(student_id, grant)


@router.put("/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: int,
    data: StudentUpdate,
    grant: AccessGrant = Depends(require(Resource.STUDENT, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    """Update a student; a null class, parent or vehicle detaches the student from it"""
    return await StudentService(db).update_student(student_id, data, grant)


@router.delete("/{student_id}", response_model=MessageResponse)
async def delete_student(
    student_id: int,
    grant: AccessGrant = Depends(require(Resource.STUDENT, Action.DELETE)),
    db: AsyncSession = Depends(get_db)
):
    await StudentService(db).delete_student(student_id, grant)
    return MessageResponse(message="Student deleted successfully")

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.dependencies import get_db
from school_saas.core.permissions import AccessGrant, Action, Resource, require
from school_saas.routes import ERROR_RESPONSES
from school_saas.schemas.common import MessageResponse
from school_saas.schemas.exam import (
    ExamCreate, ExamResponse, ExamStatusUpdate, ExamUpdate, StudentExamEntry,
)
from school_saas.services.exam_service import ExamService

router = APIRouter(prefix="/exams", tags=["Exams"], responses=ERROR_RESPONSES)


@router.post("", response_model=ExamResponse, status_code=status.HTTP_201_CREATED)
async def create_exam(
    data: ExamCreate,
    grant: AccessGrant = Depends(require(Resource.EXAM, Action.CREATE)),
    db: AsyncSession = Depends(get_db)
):
    """Schedule an exam, optionally with results; pass/fail is derived from the passing mark"""
    return await ExamService(db).create_exam(data, grant)


@router.get("", response_model=List[ExamResponse])
async def list_exams(
    class_id: Optional[int] = Query(None),
    subject_id: Optional[int] = Query(None),
    grant: AccessGrant = Depends(require(Resource.EXAM, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await ExamService(db).list_exams(grant, class_id=class_id, subject_id=subject_id)


@router.get("/student/{student_id}", response_model=List[StudentExamEntry])
async def list_student_results(
    student_id: int,
    grant: AccessGrant = Depends(require(Resource.EXAM, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await ExamService(db).list_for_student(student_id, grant)


@router.get("/{exam_id}", response_model=ExamResponse)
async def get_exam(
    exam_id: int,
    grant: AccessGrant = Depends(require(Resource.EXAM, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await ExamService(db).get_exam(exam_id, grant)


@router.put("/{exam_id}", response_model=ExamResponse)
async def update_exam(
    exam_id: int,
    data: ExamUpdate,
    grant: AccessGrant = Depends(require(Resource.EXAM, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await ExamService(db).update_exam(exam_id, data, grant)


@router.put("/{exam_id}/status", response_model=ExamResponse)
async def update_exam_status(
    exam_id: int,
    data: ExamStatusUpdate,
    grant: AccessGrant = Depends(require(Resource.EXAM, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await ExamService(db).update_status(exam_id, data.status, grant)


@router.delete("/{exam_id}", response_model=MessageResponse)
async def delete_exam(
    exam_id: int,
    grant: AccessGrant = Depends(require(Resource.EXAM, Action.DELETE)),
    db: AsyncSession = Depends(get_db)
):
    await ExamService(db).delete_exam(exam_id, grant)
    return MessageResponse(message="Exam deleted successfully")

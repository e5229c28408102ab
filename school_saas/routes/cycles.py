from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.dependencies import get_db
from school_saas.core.permissions import AccessGrant, Action, Resource, require
from school_saas.routes import ERROR_RESPONSES
from school_saas.schemas.academics import ClassLink, CycleCreate, CycleResponse, CycleUpdate
from school_saas.schemas.common import MessageResponse
from school_saas.services.cycle_service import CycleService

router = APIRouter(prefix="/cycles", tags=["Cycles"], responses=ERROR_RESPONSES)


@router.post("", response_model=CycleResponse, status_code=status.HTTP_201_CREATED)
async def create_cycle(
    data: CycleCreate,
    grant: AccessGrant = Depends(require(Resource.CYCLE, Action.CREATE)),
    db: AsyncSession = Depends(get_db)
):
    return await CycleService(db).create_cycle(data, grant)


@router.get("", response_model=List[CycleResponse])
async def list_cycles(
    grant: AccessGrant = Depends(require(Resource.CYCLE, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await CycleService(db).list_cycles(grant)


@router.get("/{cycle_id}", response_model=CycleResponse)
async def get_cycle(
    cycle_id: int,
    grant: AccessGrant = Depends(require(Resource.CYCLE, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await CycleService(db).get_cycle(cycle_id, grant)


@router.put("/{cycle_id}", response_model=CycleResponse)
async def update_cycle(
    cycle_id: int,
    data: CycleUpdate,
    grant: AccessGrant = Depends(require(Resource.CYCLE, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await CycleService(db).update_cycle(cycle_id, data, grant)


@router.delete("/{cycle_id}", response_model=MessageResponse)
async def delete_cycle(
    cycle_id: int,
    grant: AccessGrant = Depends(require(Resource.CYCLE, Action.DELETE)),
    db: AsyncSession = Depends(get_db)
):
    await CycleService(db).delete_cycle(cycle_id, grant)
    return MessageResponse(message="Cycle deleted successfully")


@router.post("/{cycle_id}/classes", response_model=CycleResponse)
async def add_class(
    cycle_id: int,
    link: ClassLink,
    grant: AccessGrant = Depends(require(Resource.CYCLE, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await CycleService(db).add_class(cycle_id, link.class_id, grant)


@router.delete("/{cycle_id}/classes/{class_id}", response_model=CycleResponse)
async def remove_class(
    cycle_id: int,
    class_id: int,
    grant: AccessGrant = Depends(require(Resource.CYCLE, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await CycleService(db).remove_class(cycle_id, class_id, grant)

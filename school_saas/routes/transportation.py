from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.dependencies import get_db
from school_saas.core.permissions import AccessGrant, Action, Resource, require
from school_saas.routes import ERROR_RESPONSES
from school_saas.schemas.common import MessageResponse
from school_saas.schemas.staff import AccompanimentLink
from school_saas.schemas.student import StudentLink
from school_saas.schemas.transportation import (
    TransportationCreate, TransportationResponse, TransportationUpdate,
)
from school_saas.services.transportation_service import TransportationService

router = APIRouter(prefix="/transportation", tags=["Transportation"], responses=ERROR_RESPONSES)


@router.post("", response_model=TransportationResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    data: TransportationCreate,
    grant: AccessGrant = Depends(require(Resource.TRANSPORTATION, Action.CREATE)),
    db: AsyncSession = Depends(get_db)
):
    return await TransportationService(db).create_vehicle(data, grant)


@router.get("", response_model=List[TransportationResponse])
async def list_vehicles(
    grant: AccessGrant = Depends(require(Resource.TRANSPORTATION, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await TransportationService(db).list_vehicles(grant)


@router.get("/{vehicle_id}", response_model=TransportationResponse)
async def get_vehicle(
    vehicle_id: int,
    grant: AccessGrant = Depends(require(Resource.TRANSPORTATION, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await TransportationService(db).get_vehicle(vehicle_id, grant)


@router.put("/{vehicle_id}", response_model=TransportationResponse)
async def update_vehicle(
    vehicle_id: int,
    data: TransportationUpdate,
    grant: AccessGrant = Depends(require(Resource.TRANSPORTATION, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await TransportationService(db).update_vehicle(vehicle_id, data, grant)


@router.delete("/{vehicle_id}", response_model=MessageResponse)
async def delete_vehicle(
    vehicle_id: int,
    grant: AccessGrant = Depends(require(Resource.TRANSPORTATION, Action.DELETE)),
    db: AsyncSession = Depends(get_db)
):
    """Delete a vehicle; its riders and accompaniments are released"""
    await TransportationService(db).delete_vehicle(vehicle_id, grant)
    return MessageResponse(message="Vehicle deleted successfully")


@router.post("/{vehicle_id}/students", response_model=TransportationResponse)
async def add_student(
    vehicle_id: int,
    link: StudentLink,
    grant: AccessGrant = Depends(require(Resource.TRANSPORTATION, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    """Assign a student to the vehicle, moving them off any other vehicle"""
    return await TransportationService(db).add_student(vehicle_id, link.student_id, grant)


@router.delete("/{vehicle_id}/students/{student_id}", response_model=TransportationResponse)
async def remove_student(
    vehicle_id: int,
    student_id: int,
    grant: AccessGrant = Depends(require(Resource.TRANSPORTATION, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await TransportationService(db).remove_student(vehicle_id, student_id, grant)

# Accompaniment assignments are delegated to guards as well

@router.post("/{vehicle_id}/accompaniments", response_model=TransportationResponse)
async def add_accompaniment(
    vehicle_id: int,
    link: AccompanimentLink,
    grant: AccessGrant = Depends(require(Resource.ACCOMPANIMENT, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await TransportationService(db).add_accompaniment(vehicle_id, link.accompaniment_id, grant)


@router.delete("/{vehicle_id}/accompaniments/{accompaniment_id}", response_model=TransportationResponse)
async def remove_accompaniment(
    vehicle_id: int,
    accompaniment_id: int,
    grant: AccessGrant = Depends(require(Resource.ACCOMPANIMENT, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await TransportationService(db).remove_accompaniment(vehicle_id, accompaniment_id, grant)

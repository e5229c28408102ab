"""Guards, drivers and accompaniments: staff registered by a school."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.dependencies import get_db
from school_saas.core.permissions import AccessGrant, Action, Resource, require
from school_saas.routes import ERROR_RESPONSES
from school_saas.schemas.common import MessageResponse
from school_saas.schemas.staff import (
    AccompanimentCreate, AccompanimentResponse, AccompanimentUpdate,
    DriverCreate, DriverResponse, DriverUpdate,
    GuardCreate, GuardResponse, GuardUpdate,
    VehicleLink,
)
from school_saas.services.staff_service import AccompanimentService, DriverService, GuardService

guard_router = APIRouter(prefix="/guards", tags=["Guards"], responses=ERROR_RESPONSES)
driver_router = APIRouter(prefix="/drivers", tags=["Drivers"], responses=ERROR_RESPONSES)
accompaniment_router = APIRouter(prefix="/accompaniments", tags=["Accompaniments"], responses=ERROR_RESPONSES)

# Guards

@guard_router.post("", response_model=GuardResponse, status_code=status.HTTP_201_CREATED)
async def create_guard(
    data: GuardCreate,
    grant: AccessGrant = Depends(require(Resource.GUARD, Action.CREATE)),
    db: AsyncSession = Depends(get_db)
):
    return await GuardService(db).create_staff(data, grant)


@guard_router.get("", response_model=List[GuardResponse])
async def list_guards(
    grant: AccessGrant = Depends(require(Resource.GUARD, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await GuardService(db).list_staff(grant)


@guard_router.get("/{guard_id}", response_model=GuardResponse)
async def get_guard(
    guard_id: int,
    grant: AccessGrant = Depends(require(Resource.GUARD, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await GuardService(db).get_staff(guard_id, grant)


@guard_router.put("/{guard_id}", response_model=GuardResponse)
async def update_guard(
    guard_id: int,
    data: GuardUpdate,
    grant: AccessGrant = Depends(require(Resource.GUARD, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await GuardService(db).update_staff(guard_id, data, grant)


@guard_router.delete("/{guard_id}", response_model=MessageResponse)
async def delete_guard(
    guard_id: int,
    grant: AccessGrant = Depends(require(Resource.GUARD, Action.DELETE)),
    db: AsyncSession = Depends(get_db)
):
    await GuardService(db).delete_staff(guard_id, grant)
    return MessageResponse(message="Guard deleted successfully")

# Drivers

@driver_router.post("", response_model=DriverResponse, status_code=status.HTTP_201_CREATED)
async def create_driver(
    data: DriverCreate,
    grant: AccessGrant = Depends(require(Resource.DRIVER, Action.CREATE)),
    db: AsyncSession = Depends(get_db)
):
    return await DriverService(db).create_staff(data, grant)


@driver_router.get("", response_model=List[DriverResponse])
async def list_drivers(
    grant: AccessGrant = Depends(require(Resource.DRIVER, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await DriverService(db).list_staff(grant)


@driver_router.get("/{driver_id}", response_model=DriverResponse)
async def get_driver(
    driver_id: int,
    grant: AccessGrant = Depends(require(Resource.DRIVER, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await DriverService(db).get_staff(driver_id, grant)


@driver_router.put("/{driver_id}", response_model=DriverResponse)
async def update_driver(
    driver_id: int,
    data: DriverUpdate,
    grant: AccessGrant = Depends(require(Resource.DRIVER, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    """Update a driver; vehicle_ids replaces the vehicles they drive"""
    return await DriverService(db).update_staff(driver_id, data, grant)


@driver_router.delete("/{driver_id}", response_model=MessageResponse)
async def delete_driver(
    driver_id: int,
    grant: AccessGrant = Depends(require(Resource.DRIVER, Action.DELETE)),
    db: AsyncSession = Depends(get_db)
):
    await DriverService(db).delete_staff(driver_id, grant)
    return MessageResponse(message="Driver deleted successfully")


@driver_router.post("/{driver_id}/vehicles", response_model=DriverResponse)
async def add_vehicle(
    driver_id: int,
    link: VehicleLink,
    grant: AccessGrant = Depends(require(Resource.DRIVER, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    """Assign a vehicle to the driver, taking it from its previous driver"""
    return await DriverService(db).add_vehicle(driver_id, link.vehicle_id, grant)


@driver_router.delete("/{driver_id}/vehicles/{vehicle_id}", response_model=DriverResponse)
async def remove_vehicle(
    driver_id: int,
    vehicle_id: int,
    grant: AccessGrant = Depends(require(Resource.DRIVER, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await DriverService(db).remove_vehicle(driver_id, vehicle_id, grant)

# Accompaniments

@accompaniment_router.post("", response_model=AccompanimentResponse, status_code=status.HTTP_201_CREATED)
async def create_accompaniment(
    data: AccompanimentCreate,
    grant: AccessGrant = Depends(require(Resource.ACCOMPANIMENT, Action.CREATE)),
    db: AsyncSession = Depends(get_db)
):
    return await AccompanimentService(db).create_staff(data, grant)


@accompaniment_router.get("", response_model=List[AccompanimentResponse])
async def list_accompaniments(
    grant: AccessGrant = Depends(require(Resource.ACCOMPANIMENT, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await AccompanimentService(db).list_staff(grant)


@accompaniment_router.get("/search", response_model=List[AccompanimentResponse])
async def search_accompaniments(
    query: Optional[str] = Query(None, description="Part of a name or email"),
    grant: AccessGrant = Depends(require(Resource.ACCOMPANIMENT, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await AccompanimentService(db).search(query, grant)


@accompaniment_router.get("/{accompaniment_id}", response_model=AccompanimentResponse)
async def get_accompaniment(
    accompaniment_id: int,
    grant: AccessGrant = Depends(require(Resource.ACCOMPANIMENT, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    return await AccompanimentService(db).get_staff(accompaniment_id, grant)


@accompaniment_router.put("/{accompaniment_id}", response_model=AccompanimentResponse)
async def update_accompaniment(
    accompaniment_id: int,
    data: AccompanimentUpdate,
    grant: AccessGrant = Depends(require(Resource.ACCOMPANIMENT, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    return await AccompanimentService(db).update_staff(accompaniment_id, data, grant)


@accompaniment_router.delete("/{accompaniment_id}", response_model=MessageResponse)
async def delete_accompaniment(
    accompaniment_id: int,
    grant: AccessGrant = Depends(require(Resource.ACCOMPANIMENT, Action.DELETE)),
    db: AsyncSession = Depends(get_db)
):
    await AccompanimentService(db).delete_staff(accompaniment_id, grant)
    return MessageResponse(message="Accompaniment deleted successfully")

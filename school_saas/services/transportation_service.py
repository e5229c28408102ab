# school_saas/services/transportation_service.py
from typing import List, Optional

from sqlalchemy.orm import selectinload

from school_saas.core.errors import ValidationError
from school_saas.core.logging import logger
from school_saas.core.permissions import AccessGrant
from school_saas.models import Accompaniment, Driver, Student, Transportation
from school_saas.schemas.transportation import TransportationCreate, TransportationUpdate
from school_saas.services.base_service import BaseService
from school_saas.services.relationships import Relation, RelationshipManager

VEHICLE_FIELDS = ("bus_number", "name", "capacity", "route", "status")


class TransportationService(BaseService):
    model = Transportation
    label = "Vehicle"

    def load_options(self):
        return (selectinload(Transportation.students), selectinload(Transportation.accompaniments))

    async def _validate_bus_number(self, school_id: int, bus_number: str, exclude_id: Optional[int] = None) -> None:
        await self.ensure_unique(
            Transportation.bus_number, bus_number, Transportation.school_id == school_id,
            exclude_id=exclude_id,
            message="Vehicle with this bus number already exists"
        )

    async def create_vehicle(self, data: TransportationCreate, grant: AccessGrant) -> Transportation:
        school_id = grant.school_id
        manager = RelationshipManager(self.db)

        async with self.transaction():
            await self._validate_bus_number(school_id, data.bus_number)
            if data.driver_id is not None:
                await self.get_in_tenant(Driver, data.driver_id, school_id, "Driver")
            await self.ensure_all_in_tenant(Student, data.student_ids, school_id, "Student")
            await self.ensure_all_in_tenant(Accompaniment, data.accompaniment_ids, school_id, "Accompaniment")

            vehicle = Transportation(school_id=school_id)
            self.apply_fields(vehicle, data.model_dump(), VEHICLE_FIELDS)
            self.db.add(vehicle)
            await self.db.flush()

            if data.driver_id is not None:
                await manager.link(Relation.DRIVER_VEHICLE, data.driver_id, vehicle.id)
            for student_id in data.student_ids:
                await manager.link(Relation.VEHICLE_STUDENT, vehicle.id, student_id)
            await manager.sync(Relation.VEHICLE_ACCOMPANIMENT, vehicle.id, data.accompaniment_ids)

        logger.info(f"Vehicle {vehicle.bus_number} registered in school {school_id}")
        return await self.reload(vehicle.id)

    async def list_vehicles(self, grant: AccessGrant) -> List[Transportation]:
        return await self.list_scoped(grant, order_by=Transportation.bus_number)

    async def get_vehicle(self, vehicle_id: int, grant: AccessGrant) -> Transportation:
        return await self.get_scoped(vehicle_id, grant)

    async def update_vehicle(self, vehicle_id: int, data: TransportationUpdate, grant: AccessGrant) -> Transportation:
        vehicle = await self.get_scoped(vehicle_id, grant)
        changes = data.model_dump(exclude_unset=True)
        manager = RelationshipManager(self.db)

        async with self.transaction():
            if changes.get("bus_number") and changes["bus_number"] != vehicle.bus_number:
                await self._validate_bus_number(vehicle.school_id, changes["bus_number"], exclude_id=vehicle.id)
            if changes.get("capacity") is not None:
                riders = await manager.count(Relation.VEHICLE_STUDENT, vehicle.id)
                if changes["capacity"] < riders:
                    raise ValidationError(f"Capacity cannot be below the {riders} assigned students")
            self.apply_fields(vehicle, changes, VEHICLE_FIELDS)

            if "driver_id" in changes:
                new_driver = changes["driver_id"]
                if new_driver is not None:
                    await self.get_in_tenant(Driver, new_driver, vehicle.school_id, "Driver")
                await manager.reassign(Relation.DRIVER_VEHICLE, vehicle.id, vehicle.driver_id, new_driver)
            if changes.get("accompaniment_ids") is not None:
                await self.ensure_all_in_tenant(
                    Accompaniment, changes["accompaniment_ids"], vehicle.school_id, "Accompaniment"
                )
                await manager.sync(Relation.VEHICLE_ACCOMPANIMENT, vehicle.id, changes["accompaniment_ids"])

        return await self.reload(vehicle.id)

    async def delete_vehicle(self, vehicle_id: int, grant: AccessGrant) -> None:
        vehicle = await self.get_scoped(vehicle_id, grant)
        async with self.transaction():
            await RelationshipManager(self.db).cascade_delete(vehicle)

    async def _member_link(self, vehicle_id: int, relation: Relation, member_model, member_id: int,
                           label: str, grant: AccessGrant, attach: bool) -> Transportation:
        vehicle = await self.get_scoped(vehicle_id, grant)
        manager = RelationshipManager(self.db)
        async with self.transaction():
            await self.get_in_tenant(member_model, member_id, vehicle.school_id, label)
            if attach:
                await manager.link(relation, vehicle.id, member_id)
            else:
                await manager.unlink(relation, vehicle.id, member_id)
        return await self.reload(vehicle.id)

    async def add_student(self, vehicle_id: int, student_id: int, grant: AccessGrant) -> Transportation:
        return await self._member_link(
            vehicle_id, Relation.VEHICLE_STUDENT, Student, student_id, "Student", grant, attach=True
        )

    async def remove_student(self, vehicle_id: int, student_id: int, grant: AccessGrant) -> Transportation:
        return await self._member_link(
            vehicle_id, Relation.VEHICLE_STUDENT, Student, student_id, "Student", grant, attach=False
        )

    async def add_accompaniment(self, vehicle_id: int, accompaniment_id: int, grant: AccessGrant) -> Transportation:
        return await self._member_link(
            vehicle_id, Relation.VEHICLE_ACCOMPANIMENT, Accompaniment, accompaniment_id,
            "Accompaniment", grant, attach=True
        )

    async def remove_accompaniment(self, vehicle_id: int, accompaniment_id: int,
                                   grant: AccessGrant) -> Transportation:
        return await self._member_link(
            vehicle_id, Relation.VEHICLE_ACCOMPANIMENT, Accompaniment, accompaniment_id,
            "Accompaniment", grant, attach=False
        )

# school_saas/services/staff_service.py
from typing import List

from sqlalchemy import or_
from sqlalchemy.orm import selectinload

from school_saas.core.errors import ValidationError
from school_saas.core.logging import logger
from school_saas.core.permissions import AccessGrant
from school_saas.models import Accompaniment, Driver, Guard, Transportation
from school_saas.services.base_service import BaseService
from school_saas.services.relationships import Relation, RelationshipManager


class StaffService(BaseService):
    """CRUD shared by guards, drivers and accompaniments"""
    fields = ("name", "email", "password", "phone")

    async def _before_save(self, instance, changes: dict, creating: bool) -> None:
        """Hook for per-type uniqueness checks"""

    async def _after_save(self, instance, changes: dict) -> None:
        """Hook for per-type relationship writes"""

    async def create_staff(self, data, grant: AccessGrant):
        values = data.model_dump()
        async with self.transaction():
            await self.ensure_email_free(self.model, data.email)
            instance = self.model(school_id=grant.school_id)
            await self._before_save(instance, values, creating=True)
            self.apply_fields(instance, values, self.fields)
            self.db.add(instance)
            await self.db.flush()
            await self._after_save(instance, values)

        logger.info(f"{self.label} {instance.id} registered in school {grant.school_id}")
        return await self.reload(instance.id)

    async def list_staff(self, grant: AccessGrant) -> List:
        return await self.list_scoped(grant, order_by=self.model.name)

    async def get_staff(self, object_id: int, grant: AccessGrant):
        return await self.get_scoped(object_id, grant)

    async def update_staff(self, object_id: int, data, grant: AccessGrant):
        instance = await self.get_scoped(object_id, grant)
        changes = data.model_dump(exclude_unset=True)
        async with self.transaction():
            if changes.get("email") and changes["email"] != instance.email:
                await self.ensure_email_free(self.model, changes["email"], exclude_id=instance.id)
            await self._before_save(instance, changes, creating=False)
            self.apply_fields(instance, changes, self.fields)
            await self._after_save(instance, changes)
        return await self.reload(instance.id)

    async def delete_staff(self, object_id: int, grant: AccessGrant) -> None:
        instance = await self.get_scoped(object_id, grant)
        async with self.transaction():
            await RelationshipManager(self.db).cascade_delete(instance)


class GuardService(StaffService):
    model = Guard
    label = "Guard"
    fields = StaffService.fields + ("shift",)


class DriverService(StaffService):
    model = Driver
    label = "Driver"
    fields = StaffService.fields + ("license_number", "license_expiry")

    def load_options(self):
        return (selectinload(Driver.vehicles),)

    async def _before_save(self, instance, changes: dict, creating: bool) -> None:
        license_number = changes.get("license_number")
        if license_number:
            await self.ensure_unique(
                Driver.license_number, license_number, Driver.school_id == instance.school_id,
                exclude_id=None if creating else instance.id,
                message=f"License number {license_number} already exists in this school"
            )

    async def _after_save(self, instance, changes: dict) -> None:
        vehicle_ids = changes.get("vehicle_ids")
        if vehicle_ids is not None:
            await self.ensure_all_in_tenant(Transportation, vehicle_ids, instance.school_id, "Transportation")
            await RelationshipManager(self.db).sync(Relation.DRIVER_VEHICLE, instance.id, vehicle_ids)

    async def _vehicle_link(self, driver_id: int, vehicle_id: int, grant: AccessGrant, attach: bool) -> Driver:
        driver = await self.get_scoped(driver_id, grant)
        manager = RelationshipManager(self.db)
        async with self.transaction():
            await self.get_in_tenant(Transportation, vehicle_id, driver.school_id, "Transportation")
            if attach:
                await manager.link(Relation.DRIVER_VEHICLE, driver.id, vehicle_id)
            else:
                await manager.unlink(Relation.DRIVER_VEHICLE, driver.id, vehicle_id)
        return await self.reload(driver.id)

    async def add_vehicle(self, driver_id: int, vehicle_id: int, grant: AccessGrant) -> Driver:
        return await self._vehicle_link(driver_id, vehicle_id, grant, attach=True)

    async def remove_vehicle(self, driver_id: int, vehicle_id: int, grant: AccessGrant) -> Driver:
        return await self._vehicle_link(driver_id, vehicle_id, grant, attach=False)


class AccompanimentService(StaffService):
    model = Accompaniment
    label = "Accompaniment"

    def load_options(self):
        return (selectinload(Accompaniment.transportations),)

    async def _after_save(self, instance, changes: dict) -> None:
        transportation_ids = changes.get("transportation_ids")
        if transportation_ids is not None:
            await self.ensure_all_in_tenant(Transportation, transportation_ids, instance.school_id, "Transportation")
            await RelationshipManager(self.db).sync_sources(
                Relation.VEHICLE_ACCOMPANIMENT, instance.id, transportation_ids
            )

    async def search(self, query: str, grant: AccessGrant) -> List[Accompaniment]:
        """Name or email containing query, ignoring case, within the caller's school"""
        query = (query or "").strip()
        if not query:
            raise ValidationError("Search query is required")
        pattern = f"%{query}%"
        return await self.list_scoped(
            grant,
            or_(Accompaniment.name.ilike(pattern), Accompaniment.email.ilike(pattern)),
            order_by=Accompaniment.name,
        )

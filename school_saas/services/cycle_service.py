# school_saas/services/cycle_service.py
from typing import List

from sqlalchemy.orm import selectinload

from school_saas.core.permissions import AccessGrant
from school_saas.models import Class, Cycle
from school_saas.schemas.academics import CycleCreate, CycleUpdate
from school_saas.schemas.role import Role
from school_saas.services.base_service import BaseService
from school_saas.services.ownership import cycles_led_by
from school_saas.services.relationships import Relation, RelationshipManager


class CycleService(BaseService):
    model = Cycle
    label = "Cycle"

    def load_options(self):
        return (selectinload(Cycle.classes),)

    def own_filter(self, grant: AccessGrant):
        if grant.role is Role.TEACHER:
            return Cycle.id.in_(cycles_led_by(grant.subject_id))
        return super().own_filter(grant)

    async def _sync_classes(self, cycle: Cycle, class_ids) -> None:
        await self.ensure_all_in_tenant(Class, class_ids, cycle.school_id, "Class")
        await RelationshipManager(self.db).sync(Relation.CYCLE_CLASS, cycle.id, class_ids)

    async def create_cycle(self, data: CycleCreate, grant: AccessGrant) -> Cycle:
        async with self.transaction():
            cycle = Cycle(school_id=grant.school_id, name=data.name, description=data.description)
            self.db.add(cycle)
            await self.db.flush()
            if data.class_ids:
                await self._sync_classes(cycle, data.class_ids)
        return await self.reload(cycle.id)

    async def list_cycles(self, grant: AccessGrant) -> List[Cycle]:
        return await self.list_scoped(grant, order_by=Cycle.name)

    async def get_cycle(self, cycle_id: int, grant: AccessGrant) -> Cycle:
        return await self.get_scoped(cycle_id, grant)

    async def update_cycle(self, cycle_id: int, data: CycleUpdate, grant: AccessGrant) -> Cycle:
        cycle = await self.get_scoped(cycle_id, grant)
        changes = data.model_dump(exclude_unset=True)
        async with self.transaction():
            self.apply_fields(cycle, changes, ("name", "description"))
            if changes.get("class_ids") is not None:
                await self._sync_classes(cycle, changes["class_ids"])
        return await self.reload(cycle.id)

    async def delete_cycle(self, cycle_id: int, grant: AccessGrant) -> None:
        cycle = await self.get_scoped(cycle_id, grant)
        async with self.transaction():
            await RelationshipManager(self.db).cascade_delete(cycle)

    async def add_class(self, cycle_id: int, class_id: int, grant: AccessGrant) -> Cycle:
        cycle = await self.get_scoped(cycle_id, grant)
        async with self.transaction():
            await self.get_in_tenant(Class, class_id, cycle.school_id, "Class")
            await RelationshipManager(self.db).link(Relation.CYCLE_CLASS, cycle.id, class_id)
        return await self.reload(cycle.id)

    async def remove_class(self, cycle_id: int, class_id: int, grant: AccessGrant) -> Cycle:
        cycle = await self.get_scoped(cycle_id, grant)
        async with self.transaction():
            await self.get_in_tenant(Class, class_id, cycle.school_id, "Class")
            await RelationshipManager(self.db).unlink(Relation.CYCLE_CLASS, cycle.id, class_id)
        return await self.reload(cycle.id)

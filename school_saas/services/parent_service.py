# school_saas/services/parent_service.py
from typing import List

from sqlalchemy.orm import selectinload

from school_saas.core.logging import logger
from school_saas.core.permissions import AccessGrant
from school_saas.core.security import get_password_hash
from school_saas.models import Parent, Student
from school_saas.schemas.parent import ParentCreate, ParentUpdate
from school_saas.services.base_service import BaseService
from school_saas.services.relationships import Relation, RelationshipManager

PARENT_FIELDS = ("name", "email", "password", "phone", "address", "occupation")


class ParentService(BaseService):
    model = Parent
    label = "Parent"

    def load_options(self):
        return (selectinload(Parent.children),)

    async def _sync_children(self, parent: Parent, children_ids) -> None:
        await self.ensure_all_in_tenant(Student, children_ids, parent.school_id, "Student")
        await RelationshipManager(self.db).sync(Relation.PARENT_STUDENT, parent.id, children_ids)

    async def create_parent(self, data: ParentCreate, grant: AccessGrant) -> Parent:
        async with self.transaction():
            await self.ensure_email_free(Parent, data.email)
            parent = Parent(school_id=grant.school_id, password_hash=get_password_hash(data.password))
            self.apply_fields(parent, data.model_dump(), [f for f in PARENT_FIELDS if f != "password"])
            self.db.add(parent)
            await self.db.flush()
            if data.children_ids:
                await self._sync_children(parent, data.children_ids)

        logger.info(f"Parent {parent.id} registered in school {grant.school_id}")
        return await self.reload(parent.id)

    async def list_parents(self, grant: AccessGrant) -> List[Parent]:
        return await self.list_scoped(grant, order_by=Parent.name)

    async def get_parent(self, parent_id: int, grant: AccessGrant) -> Parent:
        return await self.get_scoped(parent_id, grant)

    async def update_parent(self, parent_id: int, data: ParentUpdate, grant: AccessGrant) -> Parent:
        parent = await self.get_scoped(parent_id, grant)
        changes = data.model_dump(exclude_unset=True)

        async with self.transaction():
            if changes.get("email") and changes["email"] != parent.email:
                await self.ensure_email_free(Parent, changes["email"], exclude_id=parent.id)
            self.apply_fields(parent, changes, PARENT_FIELDS)
            if changes.get("children_ids") is not None:
                await self._sync_children(parent, changes["children_ids"])

        return await self.reload(parent.id)

    async def add_child(self, parent_id: int, student_id: int, grant: AccessGrant) -> Parent:
        parent = await self.get_scoped(parent_id, grant)
        async with self.transaction():
            await self.get_in_tenant(Student, student_id, parent.school_id, "Student")
            await RelationshipManager(self.db).link(Relation.PARENT_STUDENT, parent.id, student_id)
        return await self.reload(parent.id)

    async def remove_child(self, parent_id: int, student_id: int, grant: AccessGrant) -> Parent:
        parent = await self.get_scoped(parent_id, grant)
        async with self.transaction():
            await self.get_in_tenant(Student, student_id, parent.school_id, "Student")
            await RelationshipManager(self.db).unlink(Relation.PARENT_STUDENT, parent.id, student_id)
        return await self.reload(parent.id)

    async def delete_parent(self, parent_id: int, grant: AccessGrant) -> None:
        parent = await self.get_scoped(parent_id, grant)
        async with self.transaction():
            await RelationshipManager(self.db).cascade_delete(parent)

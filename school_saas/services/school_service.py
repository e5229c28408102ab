# school_saas/services/school_service.py
from typing import List

from school_saas.core.logging import logger
from school_saas.core.permissions import AccessGrant
from school_saas.core.security import get_password_hash
from school_saas.models import School
from school_saas.schemas.school import SchoolCreate
from school_saas.services.base_service import BaseService
from school_saas.services.relationships import RelationshipManager


class SchoolService(BaseService):
    model = School
    label = "School"

    async def register_school(self, data: SchoolCreate) -> School:
        async with self.transaction():
            await self.ensure_email_free(School, data.email)
            school = School(
                name=data.name,
                email=data.email.lower(),
                password_hash=get_password_hash(data.password),
                phone=data.phone,
                address=data.address,
                description=data.description,
                website=data.website,
            )
            self.db.add(school)
            await self.db.flush()
        logger.info(f"School {school.id} registered")
        return school

    def scope_filters(self, grant: AccessGrant) -> List:
        # Schools are tenant roots; SELF is the only narrowing that applies
        if grant.is_global:
            return []
        return [School.id == grant.school_id]

    async def list_schools(self, grant: AccessGrant) -> List[School]:
        return await self.list_scoped(grant, order_by=School.name)

    async def get_school(self, school_id: int, grant: AccessGrant) -> School:
        return await self.get_scoped(school_id, grant)

    async def delete_school(self, school_id: int, grant: AccessGrant) -> None:
        """Remove the school and everything it owns"""
        school = await self.get_scoped(school_id, grant)
        async with self.transaction():
            await RelationshipManager(self.db).cascade_delete(school)

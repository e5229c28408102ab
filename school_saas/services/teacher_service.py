# teacher_service.py
from typing import List

from sqlalchemy.orm import selectinload

from school_saas.core.logging import logger
from school_saas.core.permissions import AccessGrant
from school_saas.core.security import get_password_hash
from school_saas.models import Class, Subject, Teacher
from school_saas.schemas.teacher import TeacherCreate, TeacherUpdate
from school_saas.services.base_service import BaseService
from school_saas.services.relationships import Relation, RelationshipManager

TEACHER_FIELDS = ("name", "email", "password", "phone", "gender", "specialization", "date_of_joining", "address")


class TeacherService(BaseService):
    model = Teacher
    label = "Teacher"

    def load_options(self):
        return (selectinload(Teacher.subjects), selectinload(Teacher.classes))

    async def _link_assignments(self, teacher: Teacher, subject_ids, class_ids) -> None:
        manager = RelationshipManager(self.db)
        if subject_ids is not None:
            await self.ensure_all_in_tenant(Subject, subject_ids, teacher.school_id, "Subject")
            await manager.sync_sources(Relation.SUBJECT_TEACHER, teacher.id, subject_ids)
        if class_ids is not None:
            await self.ensure_all_in_tenant(Class, class_ids, teacher.school_id, "Class")
            await manager.sync(Relation.TEACHER_CLASS, teacher.id, class_ids)

    async def register_teacher(self, data: TeacherCreate, grant: AccessGrant) -> Teacher:
        async with self.transaction():
            await self.ensure_email_free(Teacher, data.email)
            teacher = Teacher(school_id=grant.school_id, password_hash=get_password_hash(data.password))
            self.apply_fields(teacher, data.model_dump(), [f for f in TEACHER_FIELDS if f != "password"])
            self.db.add(teacher)
            await self.db.flush()
            await self._link_assignments(teacher, data.subject_ids, data.class_ids)

        logger.info(f"Teacher {teacher.id} registered in school {grant.school_id}")
        return await self.reload(teacher.id)

    async def list_teachers(self, grant: AccessGrant) -> List[Teacher]:
        return await self.list_scoped(grant, order_by=Teacher.name)

    async def get_teacher(self, teacher_id: int, grant: AccessGrant) -> Teacher:
        return await self.get_scoped(teacher_id, grant)

    async def update_teacher(self, teacher_id: int, data: TeacherUpdate, grant: AccessGrant) -> Teacher:
        teacher = await self.get_scoped(teacher_id, grant)
        changes = data.model_dump(exclude_unset=True)

        async with self.transaction():
            if changes.get("email") and changes["email"] != teacher.email:
                await self.ensure_email_free(Teacher, changes["email"], exclude_id=teacher.id)
            self.apply_fields(teacher, changes, TEACHER_FIELDS)
            await self._link_assignments(teacher, changes.get("subject_ids"), changes.get("class_ids"))

        return await self.reload(teacher.id)

    async def delete_teacher(self, teacher_id: int, grant: AccessGrant) -> None:
        teacher = await self.get_scoped(teacher_id, grant)
        async with self.transaction():
            await RelationshipManager(self.db).cascade_delete(teacher)

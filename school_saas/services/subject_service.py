# school_saas/services/subject_service.py
from typing import List, Optional

from sqlalchemy.orm import selectinload

from school_saas.core.logging import logger
from school_saas.core.permissions import AccessGrant
from school_saas.models import Class, Subject, Teacher
from school_saas.schemas.academics import SubjectCreate, SubjectUpdate
from school_saas.schemas.role import Role
from school_saas.services.base_service import BaseService
from school_saas.services.ownership import subjects_taught_by
from school_saas.services.relationships import Relation, RelationshipManager

SUBJECT_FIELDS = ("name", "code", "description")


class SubjectService(BaseService):
    model = Subject
    label = "Subject"

    def load_options(self):
        return (selectinload(Subject.teachers), selectinload(Subject.classes))

    def own_filter(self, grant: AccessGrant):
        if grant.role is Role.TEACHER:
            return Subject.id.in_(subjects_taught_by(grant.subject_id))
        return super().own_filter(grant)

    async def _validate_code(self, school_id: int, code: str, exclude_id: Optional[int] = None) -> None:
        await self.ensure_unique(
            Subject.code, code, Subject.school_id == school_id,
            exclude_id=exclude_id,
            message=f"Subject code {code} already exists in this school"
        )

    async def _link_members(self, subject: Subject, teacher_ids, class_ids) -> None:
        manager = RelationshipManager(self.db)
        if teacher_ids is not None:
            await self.ensure_all_in_tenant(Teacher, teacher_ids, subject.school_id, "Teacher")
            await manager.sync(Relation.SUBJECT_TEACHER, subject.id, teacher_ids)
        if class_ids is not None:
            await self.ensure_all_in_tenant(Class, class_ids, subject.school_id, "Class")
            await manager.sync_sources(Relation.CLASS_SUBJECT, subject.id, class_ids)

    async def create_subject(self, data: SubjectCreate, grant: AccessGrant) -> Subject:
        async with self.transaction():
            await self._validate_code(grant.school_id, data.code)
            subject = Subject(school_id=grant.school_id)
            self.apply_fields(subject, data.model_dump(), SUBJECT_FIELDS)
            self.db.add(subject)
            await self.db.flush()
            await self._link_members(subject, data.teacher_ids, data.class_ids)

        logger.info(f"Subject {subject.code} created in school {grant.school_id}")
        return await self.reload(subject.id)

    async def list_subjects(self, grant: AccessGrant) -> List[Subject]:
        return await self.list_scoped(grant, order_by=Subject.name)

    async def get_subject(self, subject_id: int, grant: AccessGrant) -> Subject:
        return await self.get_scoped(subject_id, grant)

    async def update_subject(self, subject_id: int, data: SubjectUpdate, grant: AccessGrant) -> Subject:
        subject = await self.get_scoped(subject_id, grant)
        changes = data.model_dump(exclude_unset=True)

        async with self.transaction():
            if changes.get("code") and changes["code"] != subject.code:
                await self._validate_code(subject.school_id, changes["code"], exclude_id=subject.id)
            self.apply_fields(subject, changes, SUBJECT_FIELDS)
            await self._link_members(subject, changes.get("teacher_ids"), changes.get("class_ids"))

        return await self.reload(subject.id)

    async def delete_subject(self, subject_id: int, grant: AccessGrant) -> None:
        subject = await self.get_scoped(subject_id, grant)
        async with self.transaction():
            await RelationshipManager(self.db).cascade_delete(subject)

    async def add_teacher(self, subject_id: int, teacher_id: int, grant: AccessGrant) -> Subject:
        subject = await self.get_scoped(subject_id, grant)
        async with self.transaction():
            await self.get_in_tenant(Teacher, teacher_id, subject.school_id, "Teacher")
            await RelationshipManager(self.db).link(Relation.SUBJECT_TEACHER, subject.id, teacher_id)
        return await self.reload(subject.id)

    async def remove_teacher(self, subject_id: int, teacher_id: int, grant: AccessGrant) -> Subject:
        subject = await self.get_scoped(subject_id, grant)
        async with self.transaction():
            await self.get_in_tenant(Teacher, teacher_id, subject.school_id, "Teacher")
            await RelationshipManager(self.db).unlink(Relation.SUBJECT_TEACHER, subject.id, teacher_id)
        return await self.reload(subject.id)

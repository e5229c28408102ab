# school_saas/services/class_service.py
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from school_saas.core.errors import ValidationError
from school_saas.core.logging import logger
from school_saas.core.permissions import AccessGrant
from school_saas.models import Class, Cycle, Student, Subject, Teacher
from school_saas.schemas.academics import ClassCreate, ClassUpdate
from school_saas.schemas.role import Role
from school_saas.services.base_service import BaseService
from school_saas.services.ownership import classes_led_by
from school_saas.services.relationships import Relation, RelationshipManager

CLASS_FIELDS = ("name", "grade", "description", "capacity")


class ClassService(BaseService):
    model = Class
    label = "Class"

    def load_options(self):
        return (selectinload(Class.students), selectinload(Class.subjects))

    def own_filter(self, grant: AccessGrant):
        if grant.role is Role.TEACHER:
            return Class.id.in_(classes_led_by(grant.subject_id))
        return super().own_filter(grant)

    async def validate_class_name(self, school_id: int, name: str, exclude_id: Optional[int] = None) -> None:
        """Class names are unique within a school"""
        await self.ensure_unique(
            Class.name, name, Class.school_id == school_id,
            exclude_id=exclude_id,
            message=f"Class '{name}' already exists in this school"
        )

    async def create_class(self, data: ClassCreate, grant: AccessGrant) -> Class:
        school_id = grant.school_id
        manager = RelationshipManager(self.db)

        async with self.transaction():
            await self.validate_class_name(school_id, data.name)
            if data.class_teacher_id is not None:
                await self.get_in_tenant(Teacher, data.class_teacher_id, school_id, "Teacher")
            if data.cycle_id is not None:
                await self.get_in_tenant(Cycle, data.cycle_id, school_id, "Cycle")
            await self.ensure_all_in_tenant(Subject, data.subject_ids, school_id, "Subject")
            await self.ensure_all_in_tenant(Student, data.student_ids, school_id, "Student")

            new_class = Class(school_id=school_id)
            self.apply_fields(new_class, data.model_dump(), CLASS_FIELDS)
            self.db.add(new_class)
            await self.db.flush()

            if data.class_teacher_id is not None:
                await manager.link(Relation.TEACHER_CLASS, data.class_teacher_id, new_class.id)
            if data.cycle_id is not None:
                await manager.link(Relation.CYCLE_CLASS, data.cycle_id, new_class.id)
            await manager.sync(Relation.CLASS_SUBJECT, new_class.id, data.subject_ids)
            for student_id in data.student_ids:
                await manager.link(Relation.CLASS_STUDENT, new_class.id, student_id)

        logger.info(f"Class {new_class.id} created in school {school_id}")
        return await self.reload(new_class.id)

    async def list_classes(self, grant: AccessGrant, cycle_id: Optional[int] = None) -> List[Class]:
        criteria = [Class.cycle_id == cycle_id] if cycle_id is not None else []
        return await self.list_scoped(grant, *criteria, order_by=Class.name)

    async def get_class(self, class_id: int, grant: AccessGrant) -> Class:
        return await self.get_scoped(class_id, grant)

    async def update_class(self, class_id: int, data: ClassUpdate, grant: AccessGrant) -> Class:
        class_obj = await self.get_scoped(class_id, grant)
        changes = data.model_dump(exclude_unset=True)
        manager = RelationshipManager(self.db)
        school_id = class_obj.school_id

        async with self.transaction():
            if changes.get("name") and changes["name"] != class_obj.name:
                await self.validate_class_name(school_id, changes["name"], exclude_id=class_obj.id)
            if changes.get("capacity") is not None:
                enrolled = await manager.count(Relation.CLASS_STUDENT, class_obj.id)
                if changes["capacity"] < enrolled:
                    raise ValidationError(f"Capacity cannot be below the {enrolled} enrolled students")
            self.apply_fields(class_obj, changes, CLASS_FIELDS)

            if "class_teacher_id" in changes:
                new_teacher = changes["class_teacher_id"]
                if new_teacher is not None:
                    await self.get_in_tenant(Teacher, new_teacher, school_id, "Teacher")
                await manager.reassign(Relation.TEACHER_CLASS, class_obj.id, class_obj.class_teacher_id, new_teacher)
            if "cycle_id" in changes:
                new_cycle = changes["cycle_id"]
                if new_cycle is not None:
                    await self.get_in_tenant(Cycle, new_cycle, school_id, "Cycle")
                await manager.reassign(Relation.CYCLE_CLASS, class_obj.id, class_obj.cycle_id, new_cycle)
            if changes.get("subject_ids") is not None:
                await self.ensure_all_in_tenant(Subject, changes["subject_ids"], school_id, "Subject")
                await manager.sync(Relation.CLASS_SUBJECT, class_obj.id, changes["subject_ids"])

        return await self.reload(class_obj.id)

    async def delete_class(self, class_id: int, grant: AccessGrant) -> None:
        class_obj = await self.get_scoped(class_id, grant)
        async with self.transaction():
            await RelationshipManager(self.db).cascade_delete(class_obj)

    async def add_student(self, class_id: int, student_id: int, grant: AccessGrant) -> Class:
        class_obj = await self.get_scoped(class_id, grant)
        async with self.transaction():
            await self.get_in_tenant(Student, student_id, class_obj.school_id, "Student")
            await RelationshipManager(self.db).link(Relation.CLASS_STUDENT, class_obj.id, student_id)
        return await self.reload(class_obj.id)

    async def remove_student(self, class_id: int, student_id: int, grant: AccessGrant) -> Class:
        class_obj = await self.get_scoped(class_id, grant)
        async with self.transaction():
            await self.get_in_tenant(Student, student_id, class_obj.school_id, "Student")
            await RelationshipManager(self.db).unlink(Relation.CLASS_STUDENT, class_obj.id, student_id)
        return await self.reload(class_obj.id)

    async def list_students(self, class_id: int, grant: AccessGrant) -> List[Student]:
        class_obj = await self.get_scoped(class_id, grant)
        result = await self.db.execute(
            select(Student)
            .options(selectinload(Student.activities))
            .where(Student.class_id == class_obj.id)
            .order_by(Student.name)
        )
        return list(result.scalars().all())

    async def add_subject(self, class_id: int, subject_id: int, grant: AccessGrant) -> Class:
        class_obj = await self.get_scoped(class_id, grant)
        async with self.transaction():
            await self.get_in_tenant(Subject, subject_id, class_obj.school_id, "Subject")
            await RelationshipManager(self.db).link(Relation.CLASS_SUBJECT, class_obj.id, subject_id)
        return await self.reload(class_obj.id)

    async def remove_subject(self, class_id: int, subject_id: int, grant: AccessGrant) -> Class:
        class_obj = await self.get_scoped(class_id, grant)
        async with self.transaction():
            await self.get_in_tenant(Subject, subject_id, class_obj.school_id, "Subject")
            await RelationshipManager(self.db).unlink(Relation.CLASS_SUBJECT, class_obj.id, subject_id)
        return await self.reload(class_obj.id)

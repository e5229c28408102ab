# school_saas/services/student_service.py
from typing import List, Optional

from sqlalchemy.orm import selectinload

from school_saas.core.logging import logger
from school_saas.core.permissions import AccessGrant
from school_saas.core.security import get_password_hash
from school_saas.models import Class, Parent, Student, Transportation
from school_saas.schemas.role import Role
from school_saas.schemas.student import StudentCreate, StudentUpdate
from school_saas.services.base_service import BaseService
from school_saas.services.ownership import teacher_students
from school_saas.services.relationships import Relation, RelationshipManager

# (request field, relation holding it, model, label)
STUDENT_REFERENCES = (
    ("class_id", Relation.CLASS_STUDENT, Class, "Class"),
    ("parent_id", Relation.PARENT_STUDENT, Parent, "Parent"),
    ("transportation_id", Relation.VEHICLE_STUDENT, Transportation, "Transportation"),
)

PROFILE_FIELDS = ("name", "email", "password", "phone", "pupil_code", "gender", "date_of_birth", "address")


class StudentService(BaseService):
    model = Student
    label = "Student"

    def load_options(self):
        return (selectinload(Student.activities),)

    def own_filter(self, grant: AccessGrant):
        if grant.role is Role.TEACHER:
            return teacher_students(grant.subject_id)
        if grant.role is Role.PARENT:
            return Student.parent_id == grant.subject_id
        return super().own_filter(grant)

    async def _validate_pupil_code(self, school_id: int, pupil_code: Optional[str], exclude_id: Optional[int] = None):
        if pupil_code:
            await self.ensure_unique(
                Student.pupil_code, pupil_code, Student.school_id == school_id,
                exclude_id=exclude_id,
                message=f"Pupil code {pupil_code} already exists in this school"
            )

    async def create_student(self, data: StudentCreate, grant: AccessGrant) -> Student:
        school_id = grant.school_id
        manager = RelationshipManager(self.db)

        async with self.transaction():
            await self.ensure_email_free(Student, data.email)
            await self._validate_pupil_code(school_id, data.pupil_code)
            for field, _, model, label in STUDENT_REFERENCES:
                value = getattr(data, field)
                if value is not None:
                    await self.get_in_tenant(model, value, school_id, label)

            student = Student(school_id=school_id, password_hash=get_password_hash(data.password))
            self.apply_fields(student, data.model_dump(), [f for f in PROFILE_FIELDS if f != "password"])
            self.db.add(student)
            await self.db.flush()

            for field, relation, _, _ in STUDENT_REFERENCES:
                value = getattr(data, field)
                if value is not None:
                    await manager.link(relation, value, student.id)

        logger.info(f"Student {student.id} registered in school {school_id}")
        return await self.reload(student.id)

    async def list_students(self, grant: AccessGrant, class_id: Optional[int] = None) -> List[Student]:
        criteria = [Student.class_id == class_id] if class_id is not None else []
        return await self.list_scoped(grant, *criteria, order_by=Student.name)

    async def get_student(self, student_id: int, grant: AccessGrant) -> Student:
        return await self.get_scoped(student_id, grant)

    async def update_student(self, student_id: int, data: StudentUpdate, grant: AccessGrant) -> Student:
        student = await self.get_scoped(student_id, grant)
        changes = data.model_dump(exclude_unset=True)
        manager = RelationshipManager(self.db)

        async with self.transaction():
            if changes.get("email") and changes["email"] != student.email:
                await self.ensure_email_free(Student, changes["email"], exclude_id=student.id)
            if "pupil_code" in changes:
                await self._validate_pupil_code(student.school_id, changes["pupil_code"], exclude_id=student.id)

            self.apply_fields(student, changes, PROFILE_FIELDS)

            for field, relation, model, label in STUDENT_REFERENCES:
                if field not in changes:
                    continue
                new_value = changes[field]
                if new_value is not None:
                    await self.get_in_tenant(model, new_value, student.school_id, label)
                await manager.reassign(relation, student.id, getattr(student, field), new_value)

        return await self.reload(student.id)

    async def delete_student(self, student_id: int, grant: AccessGrant) -> None:
        student = await self.get_scoped(student_id, grant)
        async with self.transaction():
            await RelationshipManager(self.db).cascade_delete(student)

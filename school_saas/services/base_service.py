# school_saas/services/base_service.py
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.errors import DuplicateResourceError, NotFoundError, PermissionDenied, ValidationError
from school_saas.core.logging import logger
from school_saas.core.permissions import AccessGrant, Scope
from school_saas.core.security import get_password_hash
from school_saas.models import Teacher, subject_teachers
from school_saas.schemas.role import Role


class BaseService:
    """
    Tenant-aware data access shared by the resource services.

    Every lookup goes through scope_filters, so a row from another school is
    indistinguishable from a missing one.
    """
    model = None
    label = "Resource"

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def transaction(self):
        """Commit on success, roll back on any error"""
        try:
            yield
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    def load_options(self) -> Sequence:
        return ()

    def own_filter(self, grant: AccessGrant):
        """Predicate for Scope.OWN; services with an ownership notion override this"""
        raise PermissionDenied(f"Role '{grant.role.value}' has no ownership over {self.label.lower()} records")

    def scope_filters(self, grant: AccessGrant) -> List:
        filters = list(grant.tenant_filter(self.model))
        if grant.scope is Scope.OWN:
            filters.append(self.own_filter(grant))
        elif grant.scope is Scope.SELF:
            filters.append(self.model.id == grant.subject_id)
        return filters

    def scoped_query(self, grant: AccessGrant):
        return (
            select(self.model)
            .options(*self.load_options())
            .where(*self.scope_filters(grant))
            .execution_options(populate_existing=True)
        )

    async def get_scoped(self, object_id: int, grant: AccessGrant):
        result = await self.db.execute(self.scoped_query(grant).where(self.model.id == object_id))
        instance = result.scalar_one_or_none()
        if instance is None:
            logger.warning(
                f"{self.label} {object_id} not visible to {grant.role.value} {grant.subject_id}"
            )
            raise NotFoundError(f"{self.label} not found")
        return instance

    async def list_scoped(self, grant: AccessGrant, *criteria, order_by=None) -> List[Any]:
        query = self.scoped_query(grant).where(*criteria)
        query = query.order_by(order_by if order_by is not None else self.model.id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def reload(self, object_id: int):
        """Fresh copy with relations loaded, after bulk relationship writes"""
        result = await self.db.execute(
            select(self.model)
            .options(*self.load_options())
            .where(self.model.id == object_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def get_in_tenant(self, model, object_id: int, school_id: Optional[int], label: str):
        """Resolve an id named in a request body; foreign rows read as missing"""
        instance = await self.db.get(model, object_id)
        if instance is None or (school_id is not None and instance.school_id != school_id):
            raise NotFoundError(f"{label} not found")
        return instance

    async def ensure_all_in_tenant(self, model, ids: Iterable[int], school_id: Optional[int], label: str) -> None:
        ids = set(ids)
        if not ids:
            return
        query = select(func.count()).select_from(model).where(model.id.in_(ids))
        if school_id is not None:
            query = query.where(model.school_id == school_id)
        found = (await self.db.execute(query)).scalar_one()
        if found != len(ids):
            raise NotFoundError(f"{label} not found")

    async def ensure_unique(self, column, value, *criteria, exclude_id: Optional[int] = None, message: str) -> None:
        query = select(column.class_).where(column == value, *criteria)
        if exclude_id is not None:
            query = query.where(column.class_.id != exclude_id)
        existing = await self.db.execute(query.limit(1))
        if existing.scalar_one_or_none() is not None:
            raise DuplicateResourceError(message)

    async def ensure_email_free(self, model, email: str, exclude_id: Optional[int] = None) -> None:
        """Emails are unique per role regardless of letter case"""
        query = select(model.id).where(func.lower(model.email) == email.lower())
        if exclude_id is not None:
            query = query.where(model.id != exclude_id)
        existing = await self.db.execute(query.limit(1))
        if existing.scalar_one_or_none() is not None:
            raise DuplicateResourceError(f"A {model.ROLE.value} with email {email} already exists")

    @staticmethod
    def apply_fields(instance, data: Dict[str, Any], fields: Iterable[str]) -> None:
        """Copy plain columns; password is hashed, nulls never reach NOT NULL columns"""
        columns = instance.__table__.c
        for field in fields:
            if field not in data:
                continue
            value = data[field]
            if field == "password":
                if value:
                    instance.password_hash = get_password_hash(value)
                continue
            if value is None and field in columns and not columns[field].nullable:
                continue
            if field == "email" and value:
                value = value.lower()
            if isinstance(value, Enum):
                value = value.value
            setattr(instance, field, value)


class TeachingRecordService(BaseService):
    """Base for records a teacher holds for one of their subjects"""
    record_noun = "records"

    async def teaches(self, teacher_id: int, subject_id: int) -> bool:
        result = await self.db.execute(
            select(subject_teachers.c.subject_id).where(
                subject_teachers.c.teacher_id == teacher_id,
                subject_teachers.c.subject_id == subject_id,
            )
        )
        return result.first() is not None

    async def resolve_teacher(self, grant: AccessGrant, subject_id: int, teacher_id: Optional[int]) -> int:
        """Teachers record for themselves; schools and guards name the teacher"""
        if grant.role is Role.TEACHER:
            if teacher_id is not None and teacher_id != grant.subject_id:
                raise PermissionDenied(f"Teachers can only create their own {self.record_noun}")
            if not await self.teaches(grant.subject_id, subject_id):
                raise PermissionDenied(f"You are not authorized to create {self.record_noun} for this subject")
            return grant.subject_id
        if teacher_id is None:
            raise ValidationError("Teacher ID is required")
        await self.get_in_tenant(Teacher, teacher_id, grant.school_id, "Teacher")
        return teacher_id

    async def check_teacher_change(self, instance, teacher_id: Optional[int], grant: AccessGrant) -> None:
        if grant.role is Role.TEACHER:
            if teacher_id != grant.subject_id:
                raise PermissionDenied(f"Teachers cannot hand {self.record_noun} to someone else")
            return
        if teacher_id is not None:
            await self.get_in_tenant(Teacher, teacher_id, instance.school_id, "Teacher")
        instance.teacher_id = teacher_id

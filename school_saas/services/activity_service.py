# school_saas/services/activity_service.py
from datetime import date
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import selectinload

from school_saas.core.errors import NotFoundError, PermissionDenied, ValidationError
from school_saas.core.logging import logger
from school_saas.core.permissions import AccessGrant
from school_saas.models import Activity, Student
from school_saas.schemas.activity import ActivityCreate, ActivityUpdate
from school_saas.schemas.role import Role
from school_saas.services.base_service import BaseService
from school_saas.services.relationships import Relation, RelationshipManager

ACTIVITY_FIELDS = (
    "name", "description", "category", "start_date", "end_date",
    "location", "price", "capacity", "is_active",
)


class ActivityService(BaseService):
    """
    Extracurricular activities.

    Listing is public. Writes are limited to the owning school, deletes also
    to admins. Registration links a student of the same school.
    """
    model = Activity
    label = "Activity"

    def load_options(self):
        return (selectinload(Activity.participants),)

    async def create_activity(self, data: ActivityCreate, grant: AccessGrant) -> Activity:
        async with self.transaction():
            activity = Activity(school_id=grant.school_id)
            self.apply_fields(activity, data.model_dump(), ACTIVITY_FIELDS)
            self.db.add(activity)
            await self.db.flush()

        logger.info(f"Activity {activity.id} '{activity.name}' created by school {grant.school_id}")
        return await self.reload(activity.id)

    async def list_public(
        self,
        school_id: Optional[int] = None,
        category: Optional[str] = None,
        active: Optional[bool] = None,
        upcoming: Optional[bool] = None
    ) -> List[Activity]:
        query = select(Activity).options(*self.load_options())
        if school_id is not None:
            query = query.where(Activity.school_id == school_id)
        if category:
            query = query.where(Activity.category == category)
        if active:
            query = query.where(Activity.is_active.is_(True))
        if upcoming:
            today = date.today()
            query = query.where(or_(
                Activity.end_date >= today,
                Activity.end_date.is_(None) & (Activity.start_date >= today),
            ))
        result = await self.db.execute(query.order_by(Activity.start_date))
        return list(result.scalars().all())

    async def get_public(self, activity_id: int) -> Activity:
        result = await self.db.execute(
            select(Activity)
            .options(*self.load_options())
            .where(Activity.id == activity_id)
            .execution_options(populate_existing=True)
        )
        activity = result.scalar_one_or_none()
        if activity is None:
            raise NotFoundError("Activity not found")
        return activity

    async def list_for_school(self, grant: AccessGrant) -> List[Activity]:
        return await self.list_scoped(grant, order_by=Activity.created_at.desc())

    async def update_activity(self, activity_id: int, data: ActivityUpdate, grant: AccessGrant) -> Activity:
        activity = await self.get_scoped(activity_id, grant)
        changes = data.model_dump(exclude_unset=True)

        start = changes.get("start_date") or activity.start_date
        end = changes["end_date"] if "end_date" in changes else activity.end_date
        if end is not None and end < start:
            raise ValidationError("End date cannot precede start date")

        async with self.transaction():
            if changes.get("capacity") is not None:
                enrolled = await RelationshipManager(self.db).count(Relation.ACTIVITY_STUDENT, activity.id)
                if changes["capacity"] < enrolled:
                    raise ValidationError(f"Capacity cannot be below the {enrolled} registered students")
            self.apply_fields(activity, changes, ACTIVITY_FIELDS)

        return await self.reload(activity.id)

    async def delete_activity(self, activity_id: int, grant: AccessGrant) -> None:
        activity = await self.get_scoped(activity_id, grant)
        async with self.transaction():
            await RelationshipManager(self.db).cascade_delete(activity)

    async def _resolve_participant(self, activity: Activity, student_id: Optional[int], grant: AccessGrant) -> Student:
        """Which student a registration request is about, checked against the caller"""
        if grant.role is Role.STUDENT:
            if student_id is not None and student_id != grant.subject_id:
                raise PermissionDenied("Students can only register themselves")
            student_id = grant.subject_id
        if student_id is None:
            raise ValidationError("Student ID is required")

        student = await self.get_in_tenant(Student, student_id, activity.school_id, "Student")
        if grant.role is Role.PARENT and student.parent_id != grant.subject_id:
            raise PermissionDenied("You can only register your own children")
        return student

    async def _activity_in_reach(self, activity_id: int, grant: AccessGrant) -> Activity:
        """The activity, when it belongs to the caller's school; admins reach all"""
        activity = await self.get_public(activity_id)
        if not grant.owns(activity.school_id):
            logger.warning(f"Activity {activity_id} not visible to {grant.role.value} {grant.subject_id}")
            raise NotFoundError("Activity not found")
        return activity

    async def register(self, activity_id: int, student_id: Optional[int], grant: AccessGrant) -> Activity:
        activity = await self._activity_in_reach(activity_id, grant)
        async with self.transaction():
            student = await self._resolve_participant(activity, student_id, grant)
            if not activity.is_active:
                raise ValidationError("This activity is no longer available")
            await RelationshipManager(self.db).link(Relation.ACTIVITY_STUDENT, activity.id, student.id)

        logger.info(f"Student {student.id} registered for activity {activity.id}")
        return await self.reload(activity.id)

    async def deregister(self, activity_id: int, student_id: Optional[int], grant: AccessGrant) -> Activity:
        activity = await self._activity_in_reach(activity_id, grant)
        async with self.transaction():
            student = await self._resolve_participant(activity, student_id, grant)
            await RelationshipManager(self.db).unlink(Relation.ACTIVITY_STUDENT, activity.id, student.id)

        logger.info(f"Student {student.id} deregistered from activity {activity.id}")
        return await self.reload(activity.id)

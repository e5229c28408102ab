# school_saas/services/schedule_service.py
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import selectinload

from school_saas.core.errors import ValidationError
from school_saas.core.logging import logger
from school_saas.core.permissions import AccessGrant
from school_saas.models import Class, Schedule, SchedulePeriod, Subject, Teacher
from school_saas.schemas.academics import ScheduleCreate, ScheduleUpdate
from school_saas.schemas.role import Role
from school_saas.services.base_service import BaseService
from school_saas.services.ownership import classes_led_by, schedules_taught_by
from school_saas.services.relationships import RelationshipManager


class ScheduleService(BaseService):
    model = Schedule
    label = "Schedule"

    def load_options(self):
        return (selectinload(Schedule.periods),)

    def own_filter(self, grant: AccessGrant):
        if grant.role is Role.TEACHER:
            return or_(
                Schedule.class_id.in_(classes_led_by(grant.subject_id)),
                Schedule.id.in_(schedules_taught_by(grant.subject_id)),
            )
        return super().own_filter(grant)

    async def _validate_periods(self, school_id: int, periods) -> None:
        starts = [period.start_time for period in periods]
        if len(set(starts)) != len(starts):
            raise ValidationError("Two periods start at the same time")
        for period in periods:
            if period.subject_id is not None:
                await self.get_in_tenant(Subject, period.subject_id, school_id, "Subject")
            if period.teacher_id is not None:
                await self.get_in_tenant(Teacher, period.teacher_id, school_id, "Teacher")

    async def _check_conflict(self, class_id: int, day: str, periods, exclude_id: Optional[int] = None) -> None:
        """A class may not have two periods starting at the same time on one day"""
        query = (
            select(SchedulePeriod.id)
            .join(Schedule, SchedulePeriod.schedule_id == Schedule.id)
            .where(
                Schedule.class_id == class_id,
                Schedule.day == day,
                SchedulePeriod.start_time.in_([period.start_time for period in periods]),
            )
        )
        if exclude_id is not None:
            query = query.where(Schedule.id != exclude_id)
        if (await self.db.execute(query.limit(1))).scalar_one_or_none() is not None:
            raise ValidationError("Schedule conflict detected")

    @staticmethod
    def _build_periods(periods) -> List[SchedulePeriod]:
        ordered = sorted(periods, key=lambda period: period.start_time)
        return [
            SchedulePeriod(position=index, **period.model_dump())
            for index, period in enumerate(ordered)
        ]

    async def create_schedule(self, data: ScheduleCreate, grant: AccessGrant) -> Schedule:
        school_id = grant.school_id
        async with self.transaction():
            await self.get_in_tenant(Class, data.class_id, school_id, "Class")
            await self._validate_periods(school_id, data.periods)
            await self._check_conflict(data.class_id, data.day.value, data.periods)

            schedule = Schedule(
                school_id=school_id,
                class_id=data.class_id,
                day=data.day.value,
                periods=self._build_periods(data.periods)
            )
            self.db.add(schedule)
            await self.db.flush()

        logger.info(f"Schedule {schedule.id} created for class {data.class_id} on {data.day.value}")
        return await self.reload(schedule.id)

    async def list_schedules(self, grant: AccessGrant, class_id: Optional[int] = None) -> List[Schedule]:
        criteria = [Schedule.class_id == class_id] if class_id is not None else []
        return await self.list_scoped(grant, *criteria, order_by=Schedule.id)

    async def list_for_class(self, class_id: int, grant: AccessGrant) -> List[Schedule]:
        if grant.school_id is not None:
            await self.get_in_tenant(Class, class_id, grant.school_id, "Class")
        return await self.list_schedules(grant, class_id=class_id)

    async def get_schedule(self, schedule_id: int, grant: AccessGrant) -> Schedule:
        return await self.get_scoped(schedule_id, grant)

    async def update_schedule(self, schedule_id: int, data: ScheduleUpdate, grant: AccessGrant) -> Schedule:
        schedule = await self.get_scoped(schedule_id, grant)
        day = data.day.value if data.day is not None else schedule.day

        async with self.transaction():
            if data.periods is not None:
                await self._validate_periods(schedule.school_id, data.periods)
                await self._check_conflict(schedule.class_id, day, data.periods, exclude_id=schedule.id)
                schedule.periods = self._build_periods(data.periods)
            elif day != schedule.day:
                await self._check_conflict(schedule.class_id, day, schedule.periods, exclude_id=schedule.id)
            schedule.day = day

        return await self.reload(schedule.id)

    async def delete_schedule(self, schedule_id: int, grant: AccessGrant) -> None:
        schedule = await self.get_scoped(schedule_id, grant)
        async with self.transaction():
            await RelationshipManager(self.db).cascade_delete(schedule)

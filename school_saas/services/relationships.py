"""
Maintenance of cross references between school entities.

A relation is stored exactly once: either as a foreign key on the "many"
side or as one row of an association table. Both directions are read from
that single copy, so a link or unlink can never leave the two sides
disagreeing. Writes go through the caller's session; committing is left to
the service transaction that wraps the request.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Set

from sqlalchemy import Table, delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.errors import CapacityExceeded
from school_saas.core.logging import log_function_call, logger
from school_saas.models import (
    Accompaniment, Activity, Attendance, AttendanceRecord, Class, Cycle, Driver, Exam,
    ExamResult, Guard, Parent, Schedule, SchedulePeriod, School, StaffAttendance,
    StaffAttendanceRecord, Student, Subject, Teacher, Transportation,
    activity_participants, class_subjects, subject_teachers, transportation_accompaniments,
)
from school_saas.schemas.role import StaffType
from school_saas.services.summary import (
    recompute_attendance, recompute_exam, recompute_staff_attendance,
)


@dataclass(frozen=True)
class ForeignKeyRelation:
    """source 1..n target, stored as target.<column> = source.id"""
    source: type
    target: type
    column: str
    capacity: Optional[str] = None  # attribute on source bounding its targets

    @property
    def fk(self):
        return getattr(self.target, self.column)


@dataclass(frozen=True)
class AssociationRelation:
    """source n..n target, stored as one row of table"""
    source: type
    target: type
    table: Table
    source_key: str
    target_key: str
    capacity: Optional[str] = None

    @property
    def source_col(self):
        return self.table.c[self.source_key]

    @property
    def target_col(self):
        return self.table.c[self.target_key]


class Relation(Enum):
    CLASS_STUDENT = ForeignKeyRelation(Class, Student, "class_id", capacity="capacity")
    TEACHER_CLASS = ForeignKeyRelation(Teacher, Class, "class_teacher_id")
    CYCLE_CLASS = ForeignKeyRelation(Cycle, Class, "cycle_id")
    PARENT_STUDENT = ForeignKeyRelation(Parent, Student, "parent_id")
    DRIVER_VEHICLE = ForeignKeyRelation(Driver, Transportation, "driver_id")
    VEHICLE_STUDENT = ForeignKeyRelation(Transportation, Student, "transportation_id", capacity="capacity")
    CLASS_SUBJECT = AssociationRelation(Class, Subject, class_subjects, "class_id", "subject_id")
    SUBJECT_TEACHER = AssociationRelation(Subject, Teacher, subject_teachers, "subject_id", "teacher_id")
    VEHICLE_ACCOMPANIMENT = AssociationRelation(
        Transportation, Accompaniment, transportation_accompaniments, "transportation_id", "accompaniment_id"
    )
    ACTIVITY_STUDENT = AssociationRelation(
        Activity, Student, activity_participants, "activity_id", "student_id", capacity="capacity"
    )


CAPACITY_MESSAGES = {
    Relation.CLASS_STUDENT: "Class is at maximum capacity",
    Relation.VEHICLE_STUDENT: "Transportation is at maximum capacity",
    Relation.ACTIVITY_STUDENT: "Activity is full",
}

STAFF_TYPES = {
    Teacher: StaffType.TEACHER,
    Guard: StaffType.GUARD,
    Driver: StaffType.DRIVER,
    Accompaniment: StaffType.ACCOMPANIMENT,
}


class RelationshipManager:
    def __init__(self, db: AsyncSession):
        self.db = db

    # Queries

    async def targets_of(self, relation: Relation, source_id: int) -> Set[int]:
        link_def = relation.value
        if isinstance(link_def, ForeignKeyRelation):
            query = select(link_def.target.id).where(link_def.fk == source_id)
        else:
            query = select(link_def.target_col).where(link_def.source_col == source_id)
        result = await self.db.execute(query)
        return set(result.scalars().all())

    async def sources_of(self, relation: Relation, target_id: int) -> Set[int]:
        link_def = relation.value
        if isinstance(link_def, ForeignKeyRelation):
            query = select(link_def.fk).where(link_def.target.id == target_id, link_def.fk.is_not(None))
        else:
            query = select(link_def.source_col).where(link_def.target_col == target_id)
        result = await self.db.execute(query)
        return set(result.scalars().all())

    async def is_linked(self, relation: Relation, source_id: int, target_id: int) -> bool:
        return target_id in await self.targets_of(relation, source_id)

    async def count(self, relation: Relation, source_id: int) -> int:
        link_def = relation.value
        if isinstance(link_def, ForeignKeyRelation):
            query = select(func.count()).select_from(link_def.target).where(link_def.fk == source_id)
        else:
            query = select(func.count()).select_from(link_def.table).where(link_def.source_col == source_id)
        return (await self.db.execute(query)).scalar_one()

    # Mutations

    async def _check_capacity(self, relation: Relation, source_id: int) -> None:
        link_def = relation.value
        if not link_def.capacity:
            return
        limit = (
            await self.db.execute(
                select(getattr(link_def.source, link_def.capacity)).where(link_def.source.id == source_id)
            )
        ).scalar_one_or_none()
        if limit is None:
            return
        if await self.count(relation, source_id) >= limit:
            logger.info(f"{relation.name} link refused: source {source_id} holds {limit}")
            raise CapacityExceeded(CAPACITY_MESSAGES.get(relation, "Maximum capacity reached"))

    async def link(self, relation: Relation, source_id: int, target_id: int) -> bool:
        """
        Attach target to source. Linking an existing pair is a no-op; a full
        source refuses new targets. For single-valued relations this moves
        the target away from its previous source. Returns whether anything
        changed.
        """
        await self.db.flush()
        if await self.is_linked(relation, source_id, target_id):
            return False
        await self._check_capacity(relation, source_id)

        link_def = relation.value
        if isinstance(link_def, ForeignKeyRelation):
            await self.db.execute(
                update(link_def.target)
                .where(link_def.target.id == target_id)
                .values({link_def.column: source_id})
            )
        else:
            await self.db.execute(
                insert(link_def.table).values({link_def.source_key: source_id, link_def.target_key: target_id})
            )
        logger.debug(f"Linked {relation.name} {source_id} -> {target_id}")
        return True

    async def unlink(self, relation: Relation, source_id: int, target_id: int) -> bool:
        """Detach target from source; detaching an absent link is a no-op"""
        await self.db.flush()
        link_def = relation.value
        if isinstance(link_def, ForeignKeyRelation):
            result = await self.db.execute(
                update(link_def.target)
                .where(link_def.target.id == target_id, link_def.fk == source_id)
                .values({link_def.column: None})
            )
        else:
            result = await self.db.execute(
                delete(link_def.table).where(link_def.source_col == source_id, link_def.target_col == target_id)
            )
        if result.rowcount:
            logger.debug(f"Unlinked {relation.name} {source_id} -> {target_id}")
        return bool(result.rowcount)

    async def reassign(
        self,
        relation: Relation,
        target_id: int,
        old_source_id: Optional[int],
        new_source_id: Optional[int]
    ) -> None:
        """Move target from one source to another: unlink, then link"""
        if old_source_id == new_source_id:
            return
        if old_source_id is not None:
            await self.unlink(relation, old_source_id, target_id)
        if new_source_id is not None:
            await self.link(relation, new_source_id, target_id)

    async def sync(self, relation: Relation, source_id: int, target_ids: Iterable[int]) -> None:
        """Make the targets of source exactly target_ids"""
        wanted = set(target_ids)
        current = await self.targets_of(relation, source_id)
        for target_id in sorted(current - wanted):
            await self.unlink(relation, source_id, target_id)
        for target_id in sorted(wanted - current):
            await self.link(relation, source_id, target_id)

    async def sync_sources(self, relation: Relation, target_id: int, source_ids: Iterable[int]) -> None:
        """Make the sources of target exactly source_ids"""
        wanted = set(source_ids)
        current = await self.sources_of(relation, target_id)
        for source_id in sorted(current - wanted):
            await self.unlink(relation, source_id, target_id)
        for source_id in sorted(wanted - current):
            await self.link(relation, source_id, target_id)

    async def detach_all(self, relation: Relation, *, source_id: int = None, target_id: int = None) -> None:
        """Remove every link of a source, or of a target"""
        link_def = relation.value
        if isinstance(link_def, ForeignKeyRelation):
            query = update(link_def.target).values({link_def.column: None})
            if source_id is not None:
                query = query.where(link_def.fk == source_id)
            if target_id is not None:
                query = query.where(link_def.target.id == target_id)
            await self.db.execute(query)
        else:
            query = delete(link_def.table)
            if source_id is not None:
                query = query.where(link_def.source_col == source_id)
            if target_id is not None:
                query = query.where(link_def.target_col == target_id)
            await self.db.execute(query)

    # Deletion

    @log_function_call(logger)
    async def cascade_delete(self, instance) -> None:
        """
        Delete instance after clearing every reference to it, so no surviving
        row points at a deleted one and every stored summary still matches
        its records.
        """
        await self.db.flush()
        handler = getattr(self, f"_release_{type(instance).__name__.lower()}", None)
        if handler is not None:
            await handler(instance)
        staff_type = STAFF_TYPES.get(type(instance))
        if staff_type is not None:
            await self._purge_staff_records(staff_type, instance.id)
        if isinstance(instance, School):
            await self._purge_school(instance.id)

        await self.db.execute(delete(type(instance)).where(type(instance).id == instance.id))
        logger.info(f"Deleted {type(instance).__name__} {instance.id}")

    async def _release_student(self, student: Student) -> None:
        await self.detach_all(Relation.ACTIVITY_STUDENT, target_id=student.id)

        attendance_ids = (await self.db.execute(
            select(AttendanceRecord.attendance_id).where(AttendanceRecord.student_id == student.id)
        )).scalars().all()
        exam_ids = (await self.db.execute(
            select(ExamResult.exam_id).where(ExamResult.student_id == student.id)
        )).scalars().all()

        await self.db.execute(delete(AttendanceRecord).where(AttendanceRecord.student_id == student.id))
        await self.db.execute(delete(ExamResult).where(ExamResult.student_id == student.id))
        for attendance_id in set(attendance_ids):
            await recompute_attendance(self.db, attendance_id)
        for exam_id in set(exam_ids):
            await recompute_exam(self.db, exam_id)

    async def _release_teacher(self, teacher: Teacher) -> None:
        await self.detach_all(Relation.TEACHER_CLASS, source_id=teacher.id)
        await self.detach_all(Relation.SUBJECT_TEACHER, target_id=teacher.id)
        for model in (Attendance, Exam, SchedulePeriod):
            await self.db.execute(
                update(model)
                .where(model.teacher_id == teacher.id)
                .values(teacher_id=None)
            )

    async def _release_parent(self, parent: Parent) -> None:
        await self.detach_all(Relation.PARENT_STUDENT, source_id=parent.id)

    async def _release_class(self, class_: Class) -> None:
        await self.detach_all(Relation.CLASS_STUDENT, source_id=class_.id)
        await self.detach_all(Relation.CLASS_SUBJECT, source_id=class_.id)
        schedule_ids = select(Schedule.id).where(Schedule.class_id == class_.id)
        await self.db.execute(delete(SchedulePeriod).where(SchedulePeriod.schedule_id.in_(schedule_ids)))
        await self.db.execute(delete(Schedule).where(Schedule.class_id == class_.id))
        for model in (Attendance, Exam):
            await self.db.execute(
                update(model)
                .where(model.class_id == class_.id)
                .values(class_id=None)
            )

    async def _release_subject(self, subject: Subject) -> None:
        await self.detach_all(Relation.CLASS_SUBJECT, target_id=subject.id)
        await self.detach_all(Relation.SUBJECT_TEACHER, source_id=subject.id)
        for model in (Attendance, Exam, SchedulePeriod):
            await self.db.execute(
                update(model)
                .where(model.subject_id == subject.id)
                .values(subject_id=None)
            )

    async def _release_cycle(self, cycle: Cycle) -> None:
        await self.detach_all(Relation.CYCLE_CLASS, source_id=cycle.id)

    async def _release_transportation(self, vehicle: Transportation) -> None:
        await self.detach_all(Relation.VEHICLE_STUDENT, source_id=vehicle.id)
        await self.detach_all(Relation.VEHICLE_ACCOMPANIMENT, source_id=vehicle.id)

    async def _release_driver(self, driver: Driver) -> None:
        await self.detach_all(Relation.DRIVER_VEHICLE, source_id=driver.id)

    async def _release_accompaniment(self, person: Accompaniment) -> None:
        await self.detach_all(Relation.VEHICLE_ACCOMPANIMENT, target_id=person.id)

    async def _release_activity(self, activity: Activity) -> None:
        await self.detach_all(Relation.ACTIVITY_STUDENT, source_id=activity.id)

    async def _release_schedule(self, schedule: Schedule) -> None:
        await self.db.execute(delete(SchedulePeriod).where(SchedulePeriod.schedule_id == schedule.id))

    async def _release_attendance(self, attendance: Attendance) -> None:
        await self.db.execute(delete(AttendanceRecord).where(AttendanceRecord.attendance_id == attendance.id))

    async def _release_exam(self, exam: Exam) -> None:
        await self.db.execute(delete(ExamResult).where(ExamResult.exam_id == exam.id))

    async def _release_staffattendance(self, sheet: StaffAttendance) -> None:
        await self.db.execute(
            delete(StaffAttendanceRecord).where(StaffAttendanceRecord.staff_attendance_id == sheet.id)
        )

    async def _purge_staff_records(self, staff_type: StaffType, staff_id: int) -> None:
        sheet_ids = (await self.db.execute(
            select(StaffAttendanceRecord.staff_attendance_id).where(
                StaffAttendanceRecord.staff_type == staff_type.value,
                StaffAttendanceRecord.staff_id == staff_id,
            )
        )).scalars().all()
        if not sheet_ids:
            return
        await self.db.execute(
            delete(StaffAttendanceRecord).where(
                StaffAttendanceRecord.staff_type == staff_type.value,
                StaffAttendanceRecord.staff_id == staff_id,
            )
        )
        for sheet_id in set(sheet_ids):
            await recompute_staff_attendance(self.db, sheet_id)

    async def _purge_school(self, school_id: int) -> None:
        """Remove every row of the tenant, children before parents"""
        def in_school(model):
            return select(model.id).where(model.school_id == school_id)

        await self.db.execute(delete(activity_participants).where(
            activity_participants.c.activity_id.in_(in_school(Activity))))
        await self.db.execute(delete(transportation_accompaniments).where(
            transportation_accompaniments.c.transportation_id.in_(in_school(Transportation))))
        await self.db.execute(delete(class_subjects).where(
            class_subjects.c.class_id.in_(in_school(Class))))
        await self.db.execute(delete(subject_teachers).where(
            subject_teachers.c.subject_id.in_(in_school(Subject))))
        await self.db.execute(delete(AttendanceRecord).where(
            AttendanceRecord.attendance_id.in_(in_school(Attendance))))
        await self.db.execute(delete(StaffAttendanceRecord).where(
            StaffAttendanceRecord.staff_attendance_id.in_(in_school(StaffAttendance))))
        await self.db.execute(delete(ExamResult).where(ExamResult.exam_id.in_(in_school(Exam))))
        await self.db.execute(delete(SchedulePeriod).where(
            SchedulePeriod.schedule_id.in_(in_school(Schedule))))

        for model in (
            Attendance, StaffAttendance, Exam, Schedule, Activity, Student, Parent,
            Class, Transportation, Driver, Accompaniment, Guard, Teacher, Subject, Cycle,
        ):
            await self.db.execute(delete(model).where(model.school_id == school_id))


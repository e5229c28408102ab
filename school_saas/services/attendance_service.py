# school_saas/services/attendance_service.py
from datetime import date
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from school_saas.core.errors import NotFoundError, PermissionDenied, ValidationError
from school_saas.core.logging import logger
from school_saas.core.permissions import AccessGrant
from school_saas.models import Attendance, AttendanceRecord, Class, Student, Subject
from school_saas.schemas.attendance import (
    AttendanceCreate, AttendanceResponse, AttendanceUpdate, StudentAttendanceEntry,
)
from school_saas.schemas.role import Role
from school_saas.services.base_service import TeachingRecordService
from school_saas.services.ownership import attendance_with_children, children_of, teacher_students
from school_saas.services.relationships import RelationshipManager
from school_saas.services.student_service import StudentService
from school_saas.services.summary import recompute_attendance


class AttendanceService(TeachingRecordService):
    """
    Roll calls per subject and date.

    Teachers only see and write the sheets they hold. Parents read the sheets
    that mention one of their children, and only their children's lines.
    """
    model = Attendance
    label = "Attendance record"
    record_noun = "attendance"

    def load_options(self):
        return (selectinload(Attendance.records),)

    def own_filter(self, grant: AccessGrant):
        if grant.role is Role.TEACHER:
            return Attendance.teacher_id == grant.subject_id
        if grant.role is Role.PARENT:
            return Attendance.id.in_(attendance_with_children(grant.subject_id))
        return super().own_filter(grant)

    async def _visible(self, sheets: List[Attendance], grant: AccessGrant) -> list:
        if grant.role is not Role.PARENT:
            return sheets
        children = set((await self.db.execute(children_of(grant.subject_id))).scalars().all())
        views = []
        for sheet in sheets:
            view = AttendanceResponse.model_validate(sheet)
            view.records = [record for record in view.records if record.student_id in children]
            views.append(view)
        return views

    async def _build_records(self, school_id: int, records, grant: AccessGrant) -> List[AttendanceRecord]:
        student_ids = {record.student_id for record in records}
        await self.ensure_all_in_tenant(Student, student_ids, school_id, "Student")
        if grant.role is Role.TEACHER and student_ids:
            # Pupils of classes the teacher leads or teaches
            reachable = (await self.db.execute(
                select(func.count()).select_from(Student).where(
                    Student.id.in_(student_ids), teacher_students(grant.subject_id)
                )
            )).scalar_one()
            if reachable != len(student_ids):
                raise PermissionDenied("Teachers can only record attendance for their own students")
        return [
            AttendanceRecord(student_id=record.student_id, status=record.status.value, remarks=record.remarks)
            for record in records
        ]

    async def create_attendance(self, data: AttendanceCreate, grant: AccessGrant) -> Attendance:
        school_id = grant.school_id
        async with self.transaction():
            await self.get_in_tenant(Subject, data.subject_id, school_id, "Subject")
            if data.class_id is not None:
                await self.get_in_tenant(Class, data.class_id, school_id, "Class")
            teacher_id = await self.resolve_teacher(grant, data.subject_id, data.teacher_id)

            sheet = Attendance(
                school_id=school_id,
                subject_id=data.subject_id,
                class_id=data.class_id,
                teacher_id=teacher_id,
                date=data.date,
                records=await self._build_records(school_id, data.records, grant)
            )
            self.db.add(sheet)
            await self.db.flush()
            await recompute_attendance(self.db, sheet.id)

        logger.info(f"Attendance {sheet.id} recorded for subject {data.subject_id} on {data.date}")
        return await self.reload(sheet.id)

    async def get_attendance(self, attendance_id: int, grant: AccessGrant):
        sheet = await self.get_scoped(attendance_id, grant)
        return (await self._visible([sheet], grant))[0]

    async def list_by_subject(
        self,
        subject_id: int,
        grant: AccessGrant,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> list:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date cannot be after end_date")
        if grant.role is Role.TEACHER:
            if not await self.teaches(grant.subject_id, subject_id):
                raise NotFoundError("Subject not found")
        elif grant.school_id is not None:
            await self.get_in_tenant(Subject, subject_id, grant.school_id, "Subject")

        criteria = [Attendance.subject_id == subject_id]
        if start_date is not None:
            criteria.append(Attendance.date >= start_date)
        if end_date is not None:
            criteria.append(Attendance.date <= end_date)
        sheets = await self.list_scoped(grant, *criteria, order_by=Attendance.date.desc())
        return await self._visible(sheets, grant)

    async def list_by_date(self, day: date, grant: AccessGrant) -> list:
        sheets = await self.list_scoped(grant, Attendance.date == day, order_by=Attendance.id)
        return await self._visible(sheets, grant)

    async def list_for_student(self, student_id: int, grant: AccessGrant) -> List[StudentAttendanceEntry]:
        """Attendance history of one student, newest first"""
        # Parents and teachers only reach students they own
        await StudentService(self.db).get_scoped(student_id, grant)

        query = (
            select(Attendance, AttendanceRecord)
            .join(AttendanceRecord, AttendanceRecord.attendance_id == Attendance.id)
            .where(AttendanceRecord.student_id == student_id, *self.scope_filters(grant))
            .order_by(Attendance.date.desc(), Attendance.id.desc())
        )
        rows = (await self.db.execute(query)).all()
        return [
            StudentAttendanceEntry(
                attendance_id=sheet.id,
                date=sheet.date,
                subject_id=sheet.subject_id,
                class_id=sheet.class_id,
                status=record.status,
                remarks=record.remarks
            )
            for sheet, record in rows
        ]

    async def update_attendance(self, attendance_id: int, data: AttendanceUpdate, grant: AccessGrant) -> Attendance:
        sheet = await self.get_scoped(attendance_id, grant)
        changes = data.model_dump(exclude_unset=True)

        async with self.transaction():
            if "teacher_id" in changes:
                await self.check_teacher_change(sheet, changes["teacher_id"], grant)
            if "class_id" in changes:
                if changes["class_id"] is not None:
                    await self.get_in_tenant(Class, changes["class_id"], sheet.school_id, "Class")
                sheet.class_id = changes["class_id"]
            if changes.get("date") is not None:
                sheet.date = changes["date"]
            if data.records is not None:
                sheet.records = await self._build_records(sheet.school_id, data.records, grant)
            await recompute_attendance(self.db, sheet.id)

        return await self.reload(sheet.id)

    async def delete_attendance(self, attendance_id: int, grant: AccessGrant) -> None:
        sheet = await self.get_scoped(attendance_id, grant)
        async with self.transaction():
            await RelationshipManager(self.db).cascade_delete(sheet)

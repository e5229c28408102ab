# school_saas/services/staff_attendance_service.py
from collections import defaultdict
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from school_saas.core.logging import logger
from school_saas.core.permissions import AccessGrant
from school_saas.models import (
    Accompaniment, Driver, Guard, StaffAttendance, StaffAttendanceRecord, Teacher,
)
from school_saas.schemas.attendance import (
    StaffAttendanceCreate, StaffAttendanceEntry, StaffAttendanceUpdate,
)
from school_saas.schemas.role import StaffType
from school_saas.services.base_service import BaseService
from school_saas.services.relationships import RelationshipManager
from school_saas.services.summary import recompute_staff_attendance

STAFF_MODELS = {
    StaffType.TEACHER: (Teacher, "Teacher"),
    StaffType.GUARD: (Guard, "Guard"),
    StaffType.DRIVER: (Driver, "Driver"),
    StaffType.ACCOMPANIMENT: (Accompaniment, "Accompaniment"),
}


class StaffAttendanceService(BaseService):
    model = StaffAttendance
    label = "Staff attendance record"

    def load_options(self):
        return (selectinload(StaffAttendance.records),)

    async def _build_records(self, school_id: int, records) -> List[StaffAttendanceRecord]:
        by_type = defaultdict(list)
        for record in records:
            by_type[record.staff_type].append(record.staff_id)
        for staff_type, staff_ids in by_type.items():
            model, label = STAFF_MODELS[staff_type]
            await self.ensure_all_in_tenant(model, staff_ids, school_id, label)

        return [
            StaffAttendanceRecord(
                staff_id=record.staff_id,
                staff_type=record.staff_type.value,
                status=record.status.value,
                check_in_time=record.check_in_time,
                check_out_time=record.check_out_time,
                remarks=record.remarks
            )
            for record in records
        ]

    async def create_sheet(self, data: StaffAttendanceCreate, grant: AccessGrant) -> StaffAttendance:
        async with self.transaction():
            sheet = StaffAttendance(
                school_id=grant.school_id,
                date=data.date,
                created_by_id=grant.subject_id,
                created_by_role=grant.role.value,
                records=await self._build_records(grant.school_id, data.records)
            )
            self.db.add(sheet)
            await self.db.flush()
            await recompute_staff_attendance(self.db, sheet.id)

        logger.info(f"Staff attendance {sheet.id} recorded for {data.date} by {grant.role.value} {grant.subject_id}")
        return await self.reload(sheet.id)

    async def list_sheets(
        self,
        grant: AccessGrant,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[StaffAttendance]:
        criteria = []
        if start_date is not None:
            criteria.append(StaffAttendance.date >= start_date)
        if end_date is not None:
            criteria.append(StaffAttendance.date <= end_date)
        return await self.list_scoped(grant, *criteria, order_by=StaffAttendance.date.desc())

    async def list_by_date(self, day: date, grant: AccessGrant) -> List[StaffAttendance]:
        return await self.list_scoped(grant, StaffAttendance.date == day, order_by=StaffAttendance.id)

    async def list_for_staff(
        self,
        staff_id: int,
        staff_type: StaffType,
        grant: AccessGrant
    ) -> List[StaffAttendanceEntry]:
        """Presence history of one staff member, newest first"""
        model, label = STAFF_MODELS[staff_type]
        await self.get_in_tenant(model, staff_id, grant.school_id, label)

        query = (
            select(StaffAttendance, StaffAttendanceRecord)
            .join(StaffAttendanceRecord, StaffAttendanceRecord.staff_attendance_id == StaffAttendance.id)
            .where(
                StaffAttendanceRecord.staff_id == staff_id,
                StaffAttendanceRecord.staff_type == staff_type.value,
                *self.scope_filters(grant)
            )
            .order_by(StaffAttendance.date.desc())
        )
        rows = (await self.db.execute(query)).all()
        return [
            StaffAttendanceEntry(
                staff_attendance_id=sheet.id,
                date=sheet.date,
                staff_id=record.staff_id,
                staff_type=record.staff_type,
                status=record.status,
                check_in_time=record.check_in_time,
                check_out_time=record.check_out_time,
                remarks=record.remarks
            )
            for sheet, record in rows
        ]

    async def get_sheet(self, sheet_id: int, grant: AccessGrant) -> StaffAttendance:
        return await self.get_scoped(sheet_id, grant)

    async def update_sheet(self, sheet_id: int, data: StaffAttendanceUpdate, grant: AccessGrant) -> StaffAttendance:
        sheet = await self.get_scoped(sheet_id, grant)
        async with self.transaction():
            if data.date is not None:
                sheet.date = data.date
            if data.records is not None:
                sheet.records = await self._build_records(sheet.school_id, data.records)
            await recompute_staff_attendance(self.db, sheet.id)
        return await self.reload(sheet.id)

    async def delete_sheet(self, sheet_id: int, grant: AccessGrant) -> None:
        sheet = await self.get_scoped(sheet_id, grant)
        async with self.transaction():
            await RelationshipManager(self.db).cascade_delete(sheet)

# school_saas/services/exam_service.py
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from school_saas.core.errors import ValidationError
from school_saas.core.logging import logger
from school_saas.core.permissions import AccessGrant
from school_saas.models import Class, Exam, ExamResult, Student, Subject
from school_saas.schemas.exam import (
    ExamCreate, ExamResponse, ExamStatus, ExamUpdate, StudentExamEntry,
)
from school_saas.schemas.role import Role
from school_saas.services.base_service import TeachingRecordService
from school_saas.services.ownership import children_of, exams_with_children
from school_saas.services.relationships import RelationshipManager
from school_saas.services.student_service import StudentService
from school_saas.services.summary import recompute_exam, result_status

EXAM_FIELDS = (
    "title", "description", "exam_date", "start_time", "end_time",
    "exam_type", "total_marks", "passing_marks", "status",
)


class ExamService(TeachingRecordService):
    model = Exam
    label = "Exam"
    record_noun = "exams"

    def load_options(self):
        return (selectinload(Exam.results),)

    def own_filter(self, grant: AccessGrant):
        if grant.role is Role.TEACHER:
            return Exam.teacher_id == grant.subject_id
        if grant.role is Role.PARENT:
            return Exam.id.in_(exams_with_children(grant.subject_id))
        return super().own_filter(grant)

    async def _visible(self, exams: List[Exam], grant: AccessGrant) -> list:
        if grant.role is not Role.PARENT:
            return exams
        children = set((await self.db.execute(children_of(grant.subject_id))).scalars().all())
        views = []
        for exam in exams:
            view = ExamResponse.model_validate(exam)
            view.results = [result for result in view.results if result.student_id in children]
            views.append(view)
        return views

    async def _build_results(self, school_id: int, results, total_marks: float, passing_marks: float):
        await self.ensure_all_in_tenant(Student, [result.student_id for result in results], school_id, "Student")
        built = []
        for result in results:
            if result.marks > total_marks:
                raise ValidationError(f"Marks for student {result.student_id} exceed the total of {total_marks}")
            built.append(ExamResult(
                student_id=result.student_id,
                marks=result.marks,
                status=result_status(result.marks, passing_marks),
                remarks=result.remarks
            ))
        return built

    async def create_exam(self, data: ExamCreate, grant: AccessGrant) -> Exam:
        school_id = grant.school_id
        async with self.transaction():
            await self.get_in_tenant(Subject, data.subject_id, school_id, "Subject")
            await self.get_in_tenant(Class, data.class_id, school_id, "Class")
            teacher_id = await self.resolve_teacher(grant, data.subject_id, data.teacher_id)

            exam = Exam(
                school_id=school_id,
                subject_id=data.subject_id,
                class_id=data.class_id,
                teacher_id=teacher_id,
                results=await self._build_results(school_id, data.results, data.total_marks, data.passing_marks)
            )
            self.apply_fields(exam, data.model_dump(), EXAM_FIELDS)
            self.db.add(exam)
            await self.db.flush()
            await recompute_exam(self.db, exam.id)

        logger.info(f"Exam {exam.id} '{exam.title}' scheduled for class {data.class_id}")
        return await self.reload(exam.id)

    async def list_exams(
        self,
        grant: AccessGrant,
        class_id: Optional[int] = None,
        subject_id: Optional[int] = None
    ) -> list:
        criteria = []
        if class_id is not None:
            criteria.append(Exam.class_id == class_id)
        if subject_id is not None:
            criteria.append(Exam.subject_id == subject_id)
        exams = await self.list_scoped(grant, *criteria, order_by=Exam.exam_date.desc())
        return await self._visible(exams, grant)

    async def get_exam(self, exam_id: int, grant: AccessGrant):
        exam = await self.get_scoped(exam_id, grant)
        return (await self._visible([exam], grant))[0]

    async def list_for_student(self, student_id: int, grant: AccessGrant) -> List[StudentExamEntry]:
        """Results of one student across exams, newest first"""
        await StudentService(self.db).get_scoped(student_id, grant)

        query = (
            select(Exam, ExamResult)
            .join(ExamResult, ExamResult.exam_id == Exam.id)
            .where(ExamResult.student_id == student_id, *self.scope_filters(grant))
            .order_by(Exam.exam_date.desc(), Exam.id.desc())
        )
        rows = (await self.db.execute(query)).all()
        return [
            StudentExamEntry(
                exam_id=exam.id,
                title=exam.title,
                subject_id=exam.subject_id,
                exam_date=exam.exam_date,
                exam_type=exam.exam_type,
                total_marks=exam.total_marks,
                marks=result.marks,
                status=result.status,
                remarks=result.remarks
            )
            for exam, result in rows
        ]

    async def update_exam(self, exam_id: int, data: ExamUpdate, grant: AccessGrant) -> Exam:
        exam = await self.get_scoped(exam_id, grant)
        changes = data.model_dump(exclude_unset=True)
        total_marks = changes.get("total_marks") or exam.total_marks
        passing_marks = changes.get("passing_marks")
        if passing_marks is None:
            passing_marks = exam.passing_marks
        if passing_marks > total_marks:
            raise ValidationError("Passing marks cannot exceed total marks")

        async with self.transaction():
            if "teacher_id" in changes:
                await self.check_teacher_change(exam, changes["teacher_id"], grant)
            self.apply_fields(exam, changes, EXAM_FIELDS)

            if data.results is not None:
                exam.results = await self._build_results(exam.school_id, data.results, total_marks, passing_marks)
            else:
                # Marks stay, pass/fail follows the new thresholds
                for result in exam.results:
                    if result.marks > total_marks:
                        raise ValidationError(
                            f"Marks for student {result.student_id} exceed the total of {total_marks}"
                        )
                    result.status = result_status(result.marks, passing_marks)
            await recompute_exam(self.db, exam.id)

        return await self.reload(exam.id)

    async def update_status(self, exam_id: int, status: ExamStatus, grant: AccessGrant) -> Exam:
        exam = await self.get_scoped(exam_id, grant)
        async with self.transaction():
            exam.status = status.value
        logger.info(f"Exam {exam_id} moved to {status.value}")
        return await self.reload(exam_id)

    async def delete_exam(self, exam_id: int, grant: AccessGrant) -> None:
        exam = await self.get_scoped(exam_id, grant)
        async with self.transaction():
            await RelationshipManager(self.db).cascade_delete(exam)

from datetime import date

import pytest
from sqlalchemy import select

from school_saas.core.errors import CapacityExceeded
from school_saas.models import Activity, Class, School, Student, Subject, Teacher, class_subjects
from school_saas.services.relationships import Relation, RelationshipManager

pytestmark = pytest.mark.anyio


async def seed(db, capacity=2):
    school = School(name="North High", email="north@school.example.com")
    db.add(school)
    await db.flush()
    first = Class(school_id=school.id, name="5A", capacity=capacity)
    second = Class(school_id=school.id, name="5B", capacity=capacity)
    students = [
        Student(school_id=school.id, name=f"Pupil {n}", email=f"pupil{n}@people.example.com")
        for n in range(3)
    ]
    db.add_all([first, second, *students])
    await db.commit()
    return school, first, second, students


async def class_of(db, student_id):
    return (await db.execute(select(Student.class_id).where(Student.id == student_id))).scalar_one()


async def test_linking_twice_changes_nothing(db):
    _, first, _, students = await seed(db)
    manager = RelationshipManager(db)

    assert await manager.link(Relation.CLASS_STUDENT, first.id, students[0].id) is True
    assert await manager.link(Relation.CLASS_STUDENT, first.id, students[0].id) is False
    assert await manager.count(Relation.CLASS_STUDENT, first.id) == 1


async def test_unlinking_an_absent_pair_changes_nothing(db):
    _, first, _, students = await seed(db)
    assert await RelationshipManager(db).unlink(Relation.CLASS_STUDENT, first.id, students[0].id) is False


async def test_capacity_refuses_one_more(db):
    _, first, _, students = await seed(db, capacity=1)
    manager = RelationshipManager(db)
    await manager.link(Relation.CLASS_STUDENT, first.id, students[0].id)

    with pytest.raises(CapacityExceeded):
        await manager.link(Relation.CLASS_STUDENT, first.id, students[1].id)
    # Relinking a member of a full class is still a no-op, not a refusal
    assert await manager.link(Relation.CLASS_STUDENT, first.id, students[0].id) is False


async def test_reassign_keeps_both_sides_consistent(db):
    _, first, second, students = await seed(db)
    manager = RelationshipManager(db)
    pupil = students[0].id
    await manager.link(Relation.CLASS_STUDENT, first.id, pupil)

    await manager.reassign(Relation.CLASS_STUDENT, pupil, first.id, second.id)

    assert await class_of(db, pupil) == second.id
    assert await manager.targets_of(Relation.CLASS_STUDENT, first.id) == set()
    assert await manager.targets_of(Relation.CLASS_STUDENT, second.id) == {pupil}
    assert await manager.sources_of(Relation.CLASS_STUDENT, pupil) == {second.id}


async def test_sync_sets_exact_association_rows(db):
    school, first, _, _ = await seed(db)
    subjects = [Subject(school_id=school.id, name=f"Subject {n}", code=f"S{n}") for n in range(3)]
    db.add_all(subjects)
    await db.commit()
    manager = RelationshipManager(db)

    await manager.sync(Relation.CLASS_SUBJECT, first.id, [subjects[0].id, subjects[1].id])
    await manager.sync(Relation.CLASS_SUBJECT, first.id, [subjects[1].id, subjects[2].id])
    await db.commit()

    rows = (await db.execute(select(class_subjects.c.subject_id).where(class_subjects.c.class_id == first.id))).scalars().all()
    assert sorted(rows) == [subjects[1].id, subjects[2].id]
    assert await manager.sources_of(Relation.CLASS_SUBJECT, subjects[0].id) == set()


async def test_sync_sources_moves_teachers_onto_a_subject(db):
    school, _, _, _ = await seed(db)
    subject = Subject(school_id=school.id, name="Maths", code="MATH")
    teachers = [Teacher(school_id=school.id, name=f"Teacher {n}", email=f"t{n}@people.example.com") for n in range(2)]
    db.add_all([subject, *teachers])
    await db.commit()
    manager = RelationshipManager(db)

    await manager.sync_sources(Relation.SUBJECT_TEACHER, teachers[0].id, [subject.id])
    assert await manager.targets_of(Relation.SUBJECT_TEACHER, subject.id) == {teachers[0].id}


async def test_activity_capacity_is_enforced_on_the_association(db):
    school, _, _, students = await seed(db)
    activity = Activity(school_id=school.id, name="Chess", start_date=date(2026, 1, 10), capacity=1)
    db.add(activity)
    await db.commit()
    manager = RelationshipManager(db)

    await manager.link(Relation.ACTIVITY_STUDENT, activity.id, students[0].id)
    with pytest.raises(CapacityExceeded):
        await manager.link(Relation.ACTIVITY_STUDENT, activity.id, students[1].id)


async def test_cascade_delete_clears_back_references(db):
    _, first, _, students = await seed(db)
    manager = RelationshipManager(db)
    await manager.link(Relation.CLASS_STUDENT, first.id, students[0].id)
    await db.commit()

    await manager.cascade_delete(first)
    await db.commit()

    assert (await db.execute(select(Class.id).where(Class.id == first.id))).scalar_one_or_none() is None
    assert await class_of(db, students[0].id) is None

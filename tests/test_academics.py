import pytest

pytestmark = pytest.mark.anyio


async def test_subject_codes_are_unique_per_school(api, two_schools):
    token = two_schools["a_token"]
    first = await api.post("/subjects", token, json={"name": "Biology", "code": "bio"})
    assert first.status_code == 201
    assert first.json()["code"] == "BIO"

    assert (await api.post("/subjects", token, json={"name": "Biology II", "code": "BIO"})).status_code == 400
    assert (await api.post("/subjects", two_schools["b_token"], json={"name": "Biology", "code": "BIO"})).status_code == 201


async def test_subject_teacher_links_are_visible_from_both_sides(api, two_schools):
    token = two_schools["a_token"]
    subject = (await api.post("/subjects", token, json={"name": "Biology", "code": "bio"})).json()
    teacher, _ = await api.member(token, "/teachers", None, "Rosalind Teacher")

    linked = await api.post(f"/subjects/{subject['id']}/teachers", token, json={"teacher_id": teacher["id"]})
    assert linked.json()["teacher_ids"] == [teacher["id"]]
    assert (await api.get(f"/teachers/{teacher['id']}", token)).json()["subject_ids"] == [subject["id"]]

    unlinked = await api.delete(f"/subjects/{subject['id']}/teachers/{teacher['id']}", token)
    assert unlinked.json()["teacher_ids"] == []
    assert (await api.get(f"/teachers/{teacher['id']}", token)).json()["subject_ids"] == []


async def test_cycle_groups_classes(api, two_schools):
    token = two_schools["a_token"]
    klass = (await api.post("/classes", token, json={"name": "5A"})).json()
    cycle = await api.post("/cycles", token, json={"name": "Primary", "class_ids": [klass["id"]]})
    assert cycle.status_code == 201
    assert cycle.json()["class_ids"] == [klass["id"]]
    assert (await api.get(f"/classes/{klass['id']}", token)).json()["cycle_id"] == cycle.json()["id"]

    listed = await api.get("/classes", token, params={"cycle_id": cycle.json()["id"]})
    assert [row["id"] for row in listed.json()] == [klass["id"]]

    await api.delete(f"/cycles/{cycle.json()['id']}", token)
    assert (await api.get(f"/classes/{klass['id']}", token)).json()["cycle_id"] is None


async def test_teacher_sees_only_the_classes_they_lead(api, two_schools):
    token = two_schools["a_token"]
    teacher, teacher_token = await api.member(token, "/teachers", "teacher", "Maria Teacher")
    mine = (await api.post("/classes", token, json={"name": "5A", "class_teacher_id": teacher["id"]})).json()
    await api.post("/classes", token, json={"name": "5B"})

    listed = await api.get("/classes", teacher_token)
    assert [row["id"] for row in listed.json()] == [mine["id"]]


async def test_capacity_cannot_drop_below_enrolment(api, two_schools):
    token = two_schools["a_token"]
    klass = (await api.post("/classes", token, json={"name": "5A", "capacity": 5})).json()
    for name in ("Pupil One", "Pupil Two"):
        await api.member(token, "/students", None, name, class_id=klass["id"])

    assert (await api.put(f"/classes/{klass['id']}", token, json={"capacity": 1})).status_code == 400
    assert (await api.put(f"/classes/{klass['id']}", token, json={"capacity": 2})).status_code == 200


async def test_schedule_periods_are_sorted_and_conflicts_refused(api, two_schools):
    token = two_schools["a_token"]
    klass = (await api.post("/classes", token, json={"name": "5A"})).json()
    payload = {
        "class_id": klass["id"],
        "day": "Monday",
        "periods": [
            {"start_time": "10:00", "end_time": "10:45", "room": "B2"},
            {"start_time": "08:00", "end_time": "08:45", "room": "B1"},
        ],
    }
    created = await api.post("/schedules", token, json=payload)
    assert created.status_code == 201
    assert [period["start_time"] for period in created.json()["periods"]] == ["08:00", "10:00"]

    clash = await api.post("/schedules", token, json={**payload, "periods": [payload["periods"][1]]})
    assert clash.status_code == 400
    assert clash.json()["message"] == "Schedule conflict detected"

    other_day = await api.post("/schedules", token, json={**payload, "day": "Tuesday"})
    assert other_day.status_code == 201

    by_class = await api.get(f"/schedules/class/{klass['id']}", token)
    assert [schedule["day"] for schedule in by_class.json()] == ["Monday", "Tuesday"]


async def test_period_must_end_after_it_starts(api, two_schools):
    token = two_schools["a_token"]
    klass = (await api.post("/classes", token, json={"name": "5A"})).json()
    response = await api.post("/schedules", token, json={
        "class_id": klass["id"], "day": "Friday",
        "periods": [{"start_time": "11:00", "end_time": "10:00"}],
    })
    assert response.status_code == 400


async def test_changing_the_class_teacher_moves_the_class(api, two_schools):
    token = two_schools["a_token"]
    old, _ = await api.member(token, "/teachers", None, "Old Teacher")
    new, _ = await api.member(token, "/teachers", None, "New Teacher")
    klass = (await api.post("/classes", token, json={"name": "5A", "class_teacher_id": old["id"]})).json()
    assert (await api.get(f"/teachers/{old['id']}", token)).json()["class_ids"] == [klass["id"]]

    moved = await api.put(f"/classes/{klass['id']}", token, json={"class_teacher_id": new["id"]})
    assert moved.status_code == 200
    assert moved.json()["class_teacher_id"] == new["id"]

    assert (await api.get(f"/teachers/{old['id']}", token)).json()["class_ids"] == []
    assert (await api.get(f"/teachers/{new['id']}", token)).json()["class_ids"] == [klass["id"]]

    cleared = await api.put(f"/classes/{klass['id']}", token, json={"class_teacher_id": None})
    assert cleared.json()["class_teacher_id"] is None
    assert (await api.get(f"/teachers/{new['id']}", token)).json()["class_ids"] == []

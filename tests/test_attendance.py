import pytest

pytestmark = pytest.mark.anyio


@pytest.fixture
async def classroom(api, two_schools):
    """A school with one taught class, its teacher, a parent and two pupils"""
    token = two_schools["a_token"]
    subject = (await api.post("/subjects", token, json={"name": "Mathematics", "code": "math"})).json()
    other_subject = (await api.post("/subjects", token, json={"name": "History", "code": "hist"})).json()
    klass = (await api.post("/classes", token, json={"name": "4B", "subject_ids": [subject["id"]]})).json()
    teacher, teacher_token = await api.member(
        token, "/teachers", "teacher", "Grace Teacher", subject_ids=[subject["id"]]
    )
    parent, parent_token = await api.member(token, "/parents", "parent", "Pat Parent")
    child, _ = await api.member(
        token, "/students", None, "Kid One", parent_id=parent["id"], class_id=klass["id"]
    )
    other, _ = await api.member(token, "/students", None, "Kid Two", class_id=klass["id"])
    return {
        "token": token,
        "subject": subject, "other_subject": other_subject, "class": klass,
        "teacher": teacher, "teacher_token": teacher_token,
        "parent": parent, "parent_token": parent_token,
        "child": child, "other": other,
    }


def roll_call(room, date="2026-03-02", **extra):
    return {
        "subject_id": room["subject"]["id"],
        "date": date,
        "records": [
            {"student_id": room["child"]["id"], "status": "present"},
            {"student_id": room["other"]["id"], "status": "absent"},
        ],
        **extra,
    }


async def test_teacher_records_attendance_with_summary(api, classroom):
    response = await api.post("/attendance", classroom["teacher_token"], json=roll_call(classroom))
    assert response.status_code == 201
    body = response.json()
    assert body["teacher_id"] == classroom["teacher"]["id"]
    assert body["summary"] == {"present": 1, "absent": 1, "late": 0, "excused": 0}


async def test_summary_follows_record_updates(api, classroom):
    created = (await api.post("/attendance", classroom["teacher_token"], json=roll_call(classroom))).json()

    records = [
        {"student_id": classroom["child"]["id"], "status": "late"},
        {"student_id": classroom["other"]["id"], "status": "late"},
    ]
    response = await api.put(f"/attendance/{created['id']}", classroom["teacher_token"], json={"records": records})
    assert response.status_code == 200
    assert response.json()["summary"] == {"present": 0, "absent": 0, "late": 2, "excused": 0}


async def test_teacher_cannot_record_for_a_subject_they_do_not_teach(api, classroom):
    payload = roll_call(classroom)
    payload["subject_id"] = classroom["other_subject"]["id"]
    response = await api.post("/attendance", classroom["teacher_token"], json=payload)
    assert response.status_code == 403


async def test_teacher_cannot_list_pupils_outside_their_classes(api, classroom):
    stranger, _ = await api.member(classroom["token"], "/students", None, "Kid Three")
    payload = roll_call(classroom)
    payload["records"].append({"student_id": stranger["id"], "status": "present"})

    response = await api.post("/attendance", classroom["teacher_token"], json=payload)
    assert response.status_code == 403

    # The school itself is not limited to one teacher's classes
    named = await api.post("/attendance", classroom["token"], json={**payload, "teacher_id": classroom["teacher"]["id"]})
    assert named.status_code == 201


async def test_school_must_name_the_teacher(api, classroom):
    missing = await api.post("/attendance", classroom["token"], json=roll_call(classroom))
    assert missing.status_code == 400
    assert missing.json()["message"] == "Teacher ID is required"

    named = await api.post(
        "/attendance", classroom["token"], json=roll_call(classroom, teacher_id=classroom["teacher"]["id"])
    )
    assert named.status_code == 201


async def test_duplicate_students_are_rejected(api, classroom):
    payload = roll_call(classroom)
    payload["records"].append({"student_id": classroom["child"]["id"], "status": "late"})
    response = await api.post("/attendance", classroom["teacher_token"], json=payload)
    assert response.status_code == 400


async def test_parent_sees_only_their_child(api, classroom):
    created = (await api.post("/attendance", classroom["teacher_token"], json=roll_call(classroom))).json()

    sheet = await api.get(f"/attendance/{created['id']}", classroom["parent_token"])
    assert sheet.status_code == 200
    assert [record["student_id"] for record in sheet.json()["records"]] == [classroom["child"]["id"]]

    history = await api.get(f"/attendance/student/{classroom['child']['id']}", classroom["parent_token"])
    assert [(entry["attendance_id"], entry["status"]) for entry in history.json()] == [(created["id"], "present")]

    not_mine = await api.get(f"/attendance/student/{classroom['other']['id']}", classroom["parent_token"])
    assert not_mine.status_code == 404


async def test_lookup_by_subject_and_date(api, classroom):
    token = classroom["teacher_token"]
    await api.post("/attendance", token, json=roll_call(classroom, date="2026-03-02"))
    await api.post("/attendance", token, json=roll_call(classroom, date="2026-03-03"))

    by_subject = await api.get(
        f"/attendance/subject/{classroom['subject']['id']}", token,
        params={"start_date": "2026-03-03", "end_date": "2026-03-31"}
    )
    assert [sheet["date"] for sheet in by_subject.json()] == ["2026-03-03"]

    by_date = await api.get("/attendance/date/2026-03-02", classroom["token"])
    assert len(by_date.json()) == 1

    # Not this teacher's subject
    other = await api.get(f"/attendance/subject/{classroom['other_subject']['id']}", token)
    assert other.status_code == 404


async def test_deleting_a_student_updates_stored_summaries(api, classroom):
    created = (await api.post("/attendance", classroom["teacher_token"], json=roll_call(classroom))).json()

    assert (await api.delete(f"/students/{classroom['other']['id']}", classroom["token"])).status_code == 200

    sheet = (await api.get(f"/attendance/{created['id']}", classroom["token"])).json()
    assert sheet["summary"] == {"present": 1, "absent": 0, "late": 0, "excused": 0}
    assert len(sheet["records"]) == 1


async def test_staff_attendance_sheet(api, classroom):
    token = classroom["token"]
    guard, guard_token = await api.member(token, "/guards", "guard", "Gate Guard")
    payload = {
        "date": "2026-03-02",
        "records": [
            {"staff_id": classroom["teacher"]["id"], "staff_type": "teacher", "status": "present",
             "check_in_time": "07:45"},
            {"staff_id": guard["id"], "staff_type": "guard", "status": "absent"},
        ],
    }
    response = await api.post("/staff-attendance", guard_token, json=payload)
    assert response.status_code == 201
    body = response.json()
    assert body["created_by_role"] == "guard"
    assert body["summary"]["present"] == 1
    assert body["summary"]["total_teachers"] == 1
    assert body["summary"]["total_guards"] == 1

    history = await api.get(
        f"/staff-attendance/staff/{classroom['teacher']['id']}", token, params={"staff_type": "teacher"}
    )
    assert [entry["check_in_time"] for entry in history.json()] == ["07:45"]


async def test_present_staff_needs_a_check_in_time(api, classroom):
    payload = {
        "date": "2026-03-02",
        "records": [{"staff_id": classroom["teacher"]["id"], "staff_type": "teacher", "status": "present"}],
    }
    response = await api.post("/staff-attendance", classroom["token"], json=payload)
    assert response.status_code == 400

import pytest

pytestmark = pytest.mark.anyio


async def test_class_lifecycle(api, two_schools):
    token = two_schools["a_token"]

    teacher = await api.post(
        "/teachers", token,
        json={"name": "Grace Teacher", "email": "grace@people.example.com", "password": "secret123"}
    )
    assert teacher.status_code == 201

    created = await api.post(
        "/classes", token,
        json={"name": "Grade 5 A", "capacity": 1, "class_teacher_id": teacher.json()["id"]}
    )
    assert created.status_code == 201
    class_id = created.json()["id"]

    x, _ = await api.member(token, "/students", None, "Student X")
    y, _ = await api.member(token, "/students", None, "Student Y")

    added = await api.post(f"/classes/{class_id}/students", token, json={"student_id": x["id"]})
    assert added.status_code == 200
    assert added.json()["student_ids"] == [x["id"]]

    full = await api.post(f"/classes/{class_id}/students", token, json={"student_id": y["id"]})
    assert full.status_code == 400
    assert full.json()["message"] == "Class is at maximum capacity"

    # Both directions agree
    assert (await api.get(f"/students/{x['id']}", token)).json()["class_id"] == class_id
    teacher_view = await api.get(f"/teachers/{teacher.json()['id']}", token)
    assert teacher_view.json()["class_ids"] == [class_id]

    deleted = await api.delete(f"/classes/{class_id}", token)
    assert deleted.status_code == 200
    assert deleted.json() == {"message": "Class deleted successfully"}

    assert (await api.get(f"/classes/{class_id}", token)).status_code == 404
    assert (await api.get(f"/students/{x['id']}", token)).json()["class_id"] is None
    assert (await api.get(f"/teachers/{teacher.json()['id']}", token)).json()["class_ids"] == []


async def test_adding_the_same_student_twice_is_harmless(api, two_schools):
    token = two_schools["a_token"]
    created = (await api.post("/classes", token, json={"name": "5B", "capacity": 1})).json()
    pupil, _ = await api.member(token, "/students", None, "Student Z")

    for _ in range(2):
        response = await api.post(f"/classes/{created['id']}/students", token, json={"student_id": pupil["id"]})
        assert response.status_code == 200
        assert response.json()["student_ids"] == [pupil["id"]]


async def test_moving_a_student_between_classes(api, two_schools):
    token = two_schools["a_token"]
    first = (await api.post("/classes", token, json={"name": "5A"})).json()
    second = (await api.post("/classes", token, json={"name": "5B"})).json()
    pupil, _ = await api.member(token, "/students", None, "Student Z", class_id=first["id"])

    moved = await api.put(f"/students/{pupil['id']}", token, json={"class_id": second["id"]})
    assert moved.status_code == 200
    assert moved.json()["class_id"] == second["id"]

    assert (await api.get(f"/classes/{first['id']}", token)).json()["student_ids"] == []
    assert (await api.get(f"/classes/{second['id']}", token)).json()["student_ids"] == [pupil["id"]]


async def test_duplicate_class_name_is_rejected(api, two_schools):
    token = two_schools["a_token"]
    assert (await api.post("/classes", token, json={"name": "5A"})).status_code == 201
    assert (await api.post("/classes", token, json={"name": "5A"})).status_code == 400
    # Names are per school
    assert (await api.post("/classes", two_schools["b_token"], json={"name": "5A"})).status_code == 201


async def test_request_validation_errors_use_the_error_body(api, two_schools):
    response = await api.post("/classes", two_schools["a_token"], json={"capacity": 0})
    assert response.status_code == 400
    body = response.json()
    assert "message" in body
    assert isinstance(body["error"], list)

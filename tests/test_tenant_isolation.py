import pytest

pytestmark = pytest.mark.anyio


async def test_other_school_student_reads_as_missing(api, two_schools):
    student, _ = await api.member(two_schools["a_token"], "/students", None, "Alice Pupil")

    own = await api.get(f"/students/{student['id']}", two_schools["a_token"])
    assert own.status_code == 200
    assert own.json()["school_id"] == two_schools["a"]["id"]

    foreign = await api.get(f"/students/{student['id']}", two_schools["b_token"])
    assert foreign.status_code == 404
    assert foreign.json()["message"] == "Student not found"


async def test_listing_only_returns_own_tenant(api, two_schools):
    await api.member(two_schools["a_token"], "/students", None, "Alice Pupil")
    await api.member(two_schools["b_token"], "/students", None, "Bob Pupil")

    response = await api.get("/students", two_schools["b_token"])
    assert [row["name"] for row in response.json()] == ["Bob Pupil"]


async def test_foreign_ids_in_a_body_are_rejected(api, two_schools):
    student, _ = await api.member(two_schools["a_token"], "/students", None, "Alice Pupil")

    response = await api.post(
        "/classes", two_schools["b_token"],
        json={"name": "6A", "capacity": 10, "student_ids": [student["id"]]}
    )
    assert response.status_code == 404


async def test_guard_creates_accompaniment_in_its_school(api, two_schools):
    _, guard_token = await api.member(two_schools["a_token"], "/guards", "guard", "Gate Guard")

    response = await api.post(
        "/accompaniments", guard_token,
        json={"name": "Bus Helper", "email": "helper@people.example.com"}
    )
    assert response.status_code == 201
    assert response.json()["school_id"] == two_schools["a"]["id"]


async def test_guard_cannot_reach_another_school(api, two_schools):
    _, guard_token = await api.member(two_schools["a_token"], "/guards", "guard", "Gate Guard")
    foreign = (await api.post(
        "/accompaniments", two_schools["b_token"],
        json={"name": "Other Helper", "email": "other.helper@people.example.com"}
    )).json()

    assert (await api.get(f"/accompaniments/{foreign['id']}", guard_token)).status_code == 404
    assert (await api.delete(f"/accompaniments/{foreign['id']}", guard_token)).status_code == 404


async def test_guard_cannot_create_teachers(api, two_schools):
    _, guard_token = await api.member(two_schools["a_token"], "/guards", "guard", "Gate Guard")

    response = await api.post(
        "/teachers", guard_token,
        json={"name": "Some Teacher", "email": "teacher@people.example.com", "password": "secret123"}
    )
    assert response.status_code == 403


async def test_school_only_sees_itself(api, two_schools):
    response = await api.get("/schools", two_schools["a_token"])
    assert [school["id"] for school in response.json()] == [two_schools["a"]["id"]]

    other = await api.get(f"/school/{two_schools['b']['id']}", two_schools["a_token"])
    assert other.status_code == 404

    everything = await api.get("/schools", two_schools["admin"])
    assert len(everything.json()) == 2


async def test_deleting_a_school_removes_its_records(api, two_schools):
    student, _ = await api.member(two_schools["a_token"], "/students", None, "Alice Pupil")

    response = await api.delete(f"/school/{two_schools['a']['id']}", two_schools["admin"])
    assert response.status_code == 200
    assert response.json() == {"message": "School deleted successfully"}

    # The token of the deleted school no longer resolves to a tenant
    assert (await api.get(f"/students/{student['id']}", two_schools["a_token"])).status_code == 404
    assert (await api.get("/students", two_schools["b_token"])).json() == []

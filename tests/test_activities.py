import pytest

pytestmark = pytest.mark.anyio


@pytest.fixture
async def chess_club(api, two_schools):
    token = two_schools["a_token"]
    activity = await api.post(
        "/activities", token,
        json={"name": "Chess Club", "category": "academic", "start_date": "2026-05-01", "capacity": 1}
    )
    assert activity.status_code == 201
    parent, parent_token = await api.member(token, "/parents", "parent", "Pat Parent")
    child, child_token = await api.member(token, "/students", "student", "Kid One", parent_id=parent["id"])
    other, other_token = await api.member(token, "/students", "student", "Kid Two")
    return {
        "token": token, "activity": activity.json(),
        "parent_token": parent_token, "child": child, "child_token": child_token,
        "other": other, "other_token": other_token,
    }


async def test_catalogue_is_public(api, chess_club):
    listing = await api.get("/activities")
    assert listing.status_code == 200
    assert [activity["name"] for activity in listing.json()] == ["Chess Club"]

    single = await api.get(f"/activities/{chess_club['activity']['id']}")
    assert single.status_code == 200

    filtered = await api.get("/activities", params={"category": "sports"})
    assert filtered.json() == []


async def test_student_registers_themselves(api, chess_club):
    activity_id = chess_club["activity"]["id"]
    response = await api.post(f"/activities/{activity_id}/register", chess_club["child_token"], json={})
    assert response.status_code == 200
    assert response.json()["participant_ids"] == [chess_club["child"]["id"]]

    student = await api.get(f"/students/{chess_club['child']['id']}", chess_club["token"])
    assert student.json()["activity_ids"] == [activity_id]


async def test_student_cannot_register_someone_else(api, chess_club):
    activity_id = chess_club["activity"]["id"]
    response = await api.post(
        f"/activities/{activity_id}/register", chess_club["child_token"],
        json={"student_id": chess_club["other"]["id"]}
    )
    assert response.status_code == 403


async def test_parent_registers_only_their_children(api, chess_club):
    activity_id = chess_club["activity"]["id"]
    own = await api.post(
        f"/activities/{activity_id}/register", chess_club["parent_token"],
        json={"student_id": chess_club["child"]["id"]}
    )
    assert own.status_code == 200

    foreign = await api.post(
        f"/activities/{activity_id}/deregister", chess_club["parent_token"],
        json={"student_id": chess_club["other"]["id"]}
    )
    assert foreign.status_code == 403


async def test_full_activity_refuses_registration(api, chess_club):
    activity_id = chess_club["activity"]["id"]
    await api.post(f"/activities/{activity_id}/register", chess_club["child_token"], json={})

    response = await api.post(f"/activities/{activity_id}/register", chess_club["other_token"], json={})
    assert response.status_code == 400
    assert response.json()["message"] == "Activity is full"


async def test_deregister_frees_the_seat(api, chess_club):
    activity_id = chess_club["activity"]["id"]
    await api.post(f"/activities/{activity_id}/register", chess_club["child_token"], json={})
    response = await api.post(f"/activities/{activity_id}/deregister", chess_club["child_token"], json={})
    assert response.json()["participant_ids"] == []

    assert (await api.post(f"/activities/{activity_id}/register", chess_club["other_token"], json={})).status_code == 200


async def test_other_school_cannot_edit(api, two_schools, chess_club):
    activity_id = chess_club["activity"]["id"]
    response = await api.put(f"/activities/{activity_id}", two_schools["b_token"], json={"name": "Hijacked"})
    assert response.status_code == 404

    mine = await api.get("/school/activities", two_schools["b_token"])
    assert mine.json() == []


async def test_inactive_activity_refuses_registration(api, chess_club):
    activity_id = chess_club["activity"]["id"]
    await api.put(f"/activities/{activity_id}", chess_club["token"], json={"is_active": False})

    response = await api.post(f"/activities/{activity_id}/register", chess_club["child_token"], json={})
    assert response.status_code == 400

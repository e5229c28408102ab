import pytest

pytestmark = pytest.mark.anyio


@pytest.fixture
async def fleet(api, two_schools):
    token = two_schools["a_token"]
    driver = (await api.post("/drivers", token, json={
        "name": "Dan Driver", "email": "dan@people.example.com", "license_number": "DL-001"
    })).json()
    vehicle = await api.post("/transportation", token, json={
        "bus_number": "KBX 123", "capacity": 1, "driver_id": driver["id"]
    })
    assert vehicle.status_code == 201
    return {"token": token, "driver": driver, "vehicle": vehicle.json()}


async def test_driver_and_vehicle_agree(api, fleet):
    assert fleet["vehicle"]["driver_id"] == fleet["driver"]["id"]
    driver = await api.get(f"/drivers/{fleet['driver']['id']}", fleet["token"])
    assert driver.json()["vehicle_ids"] == [fleet["vehicle"]["id"]]


async def test_bus_numbers_are_unique_per_school(api, fleet, two_schools):
    again = await api.post("/transportation", fleet["token"], json={"bus_number": "KBX 123", "capacity": 10})
    assert again.status_code == 400
    assert again.json()["message"] == "Vehicle with this bus number already exists"

    elsewhere = await api.post("/transportation", two_schools["b_token"], json={"bus_number": "KBX 123", "capacity": 10})
    assert elsewhere.status_code == 201


async def test_vehicle_capacity(api, fleet):
    vehicle_id = fleet["vehicle"]["id"]
    first, _ = await api.member(fleet["token"], "/students", None, "Rider One")
    second, _ = await api.member(fleet["token"], "/students", None, "Rider Two")

    assert (await api.post(f"/transportation/{vehicle_id}/students", fleet["token"], json={"student_id": first["id"]})).status_code == 200
    full = await api.post(f"/transportation/{vehicle_id}/students", fleet["token"], json={"student_id": second["id"]})
    assert full.status_code == 400
    assert full.json()["message"] == "Transportation is at maximum capacity"

    rider = await api.get(f"/students/{first['id']}", fleet["token"])
    assert rider.json()["transportation_id"] == vehicle_id


async def test_guard_assigns_accompaniments(api, fleet):
    _, guard_token = await api.member(fleet["token"], "/guards", "guard", "Gate Guard")
    helper = (await api.post("/accompaniments", guard_token, json={
        "name": "Bus Helper", "email": "helper@people.example.com"
    })).json()

    response = await api.post(
        f"/transportation/{fleet['vehicle']['id']}/accompaniments", guard_token,
        json={"accompaniment_id": helper["id"]}
    )
    assert response.status_code == 200
    assert response.json()["accompaniment_ids"] == [helper["id"]]

    mirrored = await api.get(f"/accompaniments/{helper['id']}", guard_token)
    assert mirrored.json()["transportation_ids"] == [fleet["vehicle"]["id"]]

    # Guards do not manage the vehicles themselves
    assert (await api.delete(f"/transportation/{fleet['vehicle']['id']}", guard_token)).status_code == 403


async def test_deleting_the_driver_leaves_the_vehicle(api, fleet):
    assert (await api.delete(f"/drivers/{fleet['driver']['id']}", fleet["token"])).status_code == 200
    vehicle = await api.get(f"/transportation/{fleet['vehicle']['id']}", fleet["token"])
    assert vehicle.status_code == 200
    assert vehicle.json()["driver_id"] is None


async def test_accompaniment_search(api, two_schools):
    token = two_schools["a_token"]
    _, guard_token = await api.member(token, "/guards", "guard", "Gate Guard")
    for name in ("Bus Helper", "Lunch Monitor"):
        await api.member(token, "/accompaniments", None, name)
    await api.member(two_schools["b_token"], "/accompaniments", None, "Other Helper")

    found = await api.get("/accompaniments/search", guard_token, params={"query": "HELPER"})
    assert found.status_code == 200
    assert [row["name"] for row in found.json()] == ["Bus Helper"]

    by_email = await api.get("/accompaniments/search", token, params={"query": "lunch.monitor@"})
    assert [row["name"] for row in by_email.json()] == ["Lunch Monitor"]

    missing = await api.get("/accompaniments/search", token)
    assert missing.status_code == 400
    assert missing.json()["message"] == "Search query is required"

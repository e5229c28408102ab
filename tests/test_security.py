from datetime import timedelta

import pytest
from jose import jwt

from school_saas.core.config import settings
from school_saas.core.errors import TokenError
from school_saas.core.security import (
    AuthContext, create_access_token, create_token, decode_access_token,
    get_password_hash, verify_password,
)
from school_saas.schemas.role import Role


def test_access_token_carries_subject_and_role():
    token = create_access_token(42, Role.TEACHER)
    assert decode_access_token(token) == AuthContext(subject_id=42, role=Role.TEACHER)


def test_expired_token_is_rejected():
    token = create_access_token(1, Role.SCHOOL, expires_delta=timedelta(seconds=-5))
    with pytest.raises(TokenError):
        decode_access_token(token)


def test_token_signed_with_another_key_is_rejected():
    forged = jwt.encode({"sub": "1", "role": "admin", "type": "access"}, "other-key", algorithm=settings.ALGORITHM)
    with pytest.raises(TokenError):
        decode_access_token(forged)


def test_token_of_another_type_is_rejected():
    token = create_token({"sub": "1", "role": "admin"}, "refresh")
    with pytest.raises(TokenError):
        decode_access_token(token)


def test_unknown_role_is_rejected():
    token = create_token({"sub": "1", "role": "janitor"}, "access")
    with pytest.raises(TokenError):
        decode_access_token(token)


def test_password_hashing():
    hashed = get_password_hash("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("secret123", None)


@pytest.mark.anyio
async def test_missing_token_is_401(api):
    response = await api.get("/students")
    assert response.status_code == 401
    assert response.json()["message"] == "You are not authenticated!"


@pytest.mark.anyio
async def test_invalid_token_is_403(api):
    response = await api.get("/students", token="not-a-jwt")
    assert response.status_code == 403
    assert response.json()["message"] == "Token is not valid!"


@pytest.mark.anyio
async def test_login_with_wrong_password(api):
    await api.admin()
    response = await api.post("/admin/login", json={"email": "admin@platform.example.com", "password": "nope-nope"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


@pytest.mark.anyio
async def test_login_checks_the_role_table(api, two_schools):
    # A school account cannot log in through the teacher door
    response = await api.post("/teacher/login", json={"email": "north.high@school.example.com", "password": "secret123"})
    assert response.status_code == 401


@pytest.mark.anyio
async def test_second_admin_needs_an_admin(api):
    admin_token = await api.admin()
    payload = {"name": "Second Admin", "email": "second@platform.example.com", "password": "secret123"}

    anonymous = await api.post("/admin/register", json=payload)
    assert anonymous.status_code == 403

    response = await api.post("/admin/register", admin_token, json=payload)
    assert response.status_code == 201
    assert response.json()["role"] == "admin"


@pytest.mark.anyio
async def test_profile_round_trip(api, two_schools):
    token = two_schools["a_token"]
    response = await api.get("/school/profile", token)
    assert response.status_code == 200
    assert response.json()["name"] == "North High"

    response = await api.put("/school/profile", token, json={"phone": "0712345678"})
    assert response.status_code == 200
    assert response.json()["phone"] == "0712345678"

    # The path role must match the token
    response = await api.get("/teacher/profile", token)
    assert response.status_code == 403


@pytest.mark.anyio
async def test_emails_ignore_letter_case(api, two_schools):
    token = two_schools["a_token"]
    payload = {"name": "Ann Teacher", "email": "Ann@people.example.com", "password": "secret123"}
    created = await api.post("/teachers", token, json=payload)
    assert created.status_code == 201
    assert created.json()["email"] == "ann@people.example.com"

    clash = await api.post("/teachers", token, json={**payload, "email": "ann@people.example.com"})
    assert clash.status_code == 400

    response = await api.post("/teacher/login", json={"email": "ANN@people.example.com", "password": "secret123"})
    assert response.status_code == 200

import pytest

from school_saas.core.errors import NotFoundError, PermissionDenied
from school_saas.core.permissions import (
    PERMISSIONS, AccessGrant, AccessPolicy, Action, PolicyChecker, Resource, Scope, resolve_tenant,
)
from school_saas.core.security import AuthContext
from school_saas.models import Class, Guard, School
from school_saas.schemas.role import Role


def ctx(role: Role, subject_id: int = 1) -> AuthContext:
    return AuthContext(subject_id=subject_id, role=role)


@pytest.mark.parametrize("resource, action, role, scope", [
    (Resource.SCHOOL, Action.CREATE, Role.ADMIN, Scope.GLOBAL),
    (Resource.SCHOOL, Action.READ, Role.SCHOOL, Scope.SELF),
    (Resource.STUDENT, Action.READ, Role.PARENT, Scope.OWN),
    (Resource.ACCOMPANIMENT, Action.CREATE, Role.GUARD, Scope.TENANT),
    (Resource.ATTENDANCE, Action.CREATE, Role.TEACHER, Scope.OWN),
    (Resource.ACTIVITY_PARTICIPANT, Action.CREATE, Role.STUDENT, Scope.SELF),
    (Resource.PROFILE, Action.UPDATE, Role.DRIVER, Scope.SELF),
])
def test_allowed_cells(resource, action, role, scope):
    assert AccessPolicy.check(ctx(role), resource, action) is scope


@pytest.mark.parametrize("resource, action, role", [
    (Resource.SCHOOL, Action.CREATE, Role.SCHOOL),
    (Resource.TEACHER, Action.CREATE, Role.GUARD),
    (Resource.DRIVER, Action.CREATE, Role.GUARD),
    (Resource.CLASS, Action.DELETE, Role.GUARD),
    (Resource.EXAM, Action.CREATE, Role.GUARD),
    (Resource.STUDENT, Action.CREATE, Role.ADMIN),
    (Resource.ATTENDANCE, Action.READ, Role.STUDENT),
])
def test_denied_cells(resource, action, role):
    with pytest.raises(PermissionDenied):
        AccessPolicy.check(ctx(role), resource, action)


def test_every_profile_cell_covers_every_role():
    assert set(PERMISSIONS[(Resource.PROFILE, Action.READ)]) == set(Role)


def test_checker_refuses_unknown_cells():
    with pytest.raises(ValueError):
        PolicyChecker(Resource.PROFILE, Action.DELETE)


def test_grant_tenant_helpers():
    tenant = AccessGrant(context=ctx(Role.GUARD), scope=Scope.TENANT, school_id=7)
    assert tenant.owns(7)
    assert not tenant.owns(8)
    assert not tenant.owns(None)
    assert len(tenant.tenant_filter(Class)) == 1

    everywhere = AccessGrant(context=ctx(Role.ADMIN), scope=Scope.GLOBAL, school_id=None)
    assert everywhere.owns(8)
    assert everywhere.tenant_filter(Class) == []


@pytest.mark.anyio
async def test_effective_tenant_of_each_role(db):
    school = School(name="North High", email="north@school.example.com")
    db.add(school)
    await db.flush()
    guard = Guard(name="Gate Guard", email="gate@people.example.com", school_id=school.id)
    db.add(guard)
    await db.commit()

    assert await resolve_tenant(db, ctx(Role.SCHOOL, school.id)) == school.id
    assert await resolve_tenant(db, ctx(Role.GUARD, guard.id)) == school.id


@pytest.mark.anyio
async def test_token_for_a_deleted_principal_gets_no_tenant(db):
    with pytest.raises(NotFoundError):
        await resolve_tenant(db, ctx(Role.TEACHER, 999))


@pytest.mark.anyio
async def test_authorize_combines_scope_and_tenant(db):
    school = School(name="North High", email="north@school.example.com")
    db.add(school)
    await db.commit()

    grant = await AccessPolicy(db).authorize(ctx(Role.SCHOOL, school.id), Resource.CLASS, Action.CREATE)
    assert grant.scope is Scope.TENANT
    assert grant.school_id == school.id
    assert grant.role is Role.SCHOOL

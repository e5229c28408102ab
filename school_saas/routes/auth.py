from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.dependencies import get_db, get_optional_auth_context
from school_saas.core.errors import PermissionDenied
from school_saas.core.permissions import AccessGrant, Action, Resource, require
from school_saas.core.security import AuthContext
from school_saas.routes import ERROR_RESPONSES
from school_saas.schemas.auth import AdminRegisterRequest, LoginRequest, ProfileUpdateRequest, TokenResponse
from school_saas.schemas.common import PrincipalResponse
from school_saas.schemas.role import Role
from school_saas.services.auth_service import AuthService

router = APIRouter(tags=["Authentication"], responses=ERROR_RESPONSES)


def _ensure_same_role(role: Role, grant: AccessGrant) -> None:
    if grant.role is not role:
        raise PermissionDenied(f"This profile belongs to the {role.value} role")


@router.post(
    "/admin/register",
    response_model=PrincipalResponse,
    status_code=status.HTTP_201_CREATED
)
async def register_admin(
    data: AdminRegisterRequest,
    db: AsyncSession = Depends(get_db),
    context: Optional[AuthContext] = Depends(get_optional_auth_context)
):
    """Register an admin. Open until the first admin exists."""
    return await AuthService(db).register_admin(data, context)


@router.post("/{role}/login", response_model=TokenResponse)
async def login(
    role: Role,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """Exchange email and password for a bearer token"""
    return await AuthService(db).login(role, credentials.email, credentials.password)


@router.get("/{role}/profile", response_model=PrincipalResponse)
async def get_profile(
    role: Role,
    grant: AccessGrant = Depends(require(Resource.PROFILE, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    _ensure_same_role(role, grant)
    return await AuthService(db).get_profile(grant)


@router.put("/{role}/profile", response_model=PrincipalResponse)
async def update_profile(
    role: Role,
    data: ProfileUpdateRequest,
    grant: AccessGrant = Depends(require(Resource.PROFILE, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    _ensure_same_role(role, grant)
    return await AuthService(db).update_profile(grant, data)

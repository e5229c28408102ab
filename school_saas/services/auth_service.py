# school_saas/services/auth_service.py
from typing import Optional

from sqlalchemy import select, func

from school_saas.core.config import settings
from school_saas.core.errors import InvalidCredentialsException, PermissionDenied, NotFoundError
from school_saas.core.logging import log_function_call, logger
from school_saas.core.permissions import AccessGrant, AccessPolicy, Action, Resource
from school_saas.core.security import AuthContext, create_access_token, get_password_hash, verify_password
from school_saas.models import Admin, PRINCIPAL_MODELS
from school_saas.schemas.auth import AdminRegisterRequest, ProfileUpdateRequest, TokenResponse
from school_saas.schemas.role import Role
from school_saas.services.base_service import BaseService


class AuthService(BaseService):
    """Login, admin bootstrap and self-service profiles for every role"""

    @log_function_call(logger)
    async def login(self, role: Role, email: str, password: str) -> TokenResponse:
        model = PRINCIPAL_MODELS[role]
        result = await self.db.execute(select(model).where(func.lower(model.email) == email.lower()))
        principal = result.scalar_one_or_none()

        if principal is None or not verify_password(password, principal.password_hash):
            logger.warning(f"Failed {role.value} login for {email}")
            raise InvalidCredentialsException()

        logger.info(f"{role.value} {principal.id} logged in")
        return TokenResponse(
            access_token=create_access_token(principal.id, role),
            id=principal.id,
            role=role,
            name=principal.name,
        )

    async def admin_exists(self) -> bool:
        count = (await self.db.execute(select(func.count()).select_from(Admin))).scalar_one()
        return count > 0

    async def register_admin(
        self,
        data: AdminRegisterRequest,
        context: Optional[AuthContext] = None
    ) -> Admin:
        """
        The first admin registers freely. Once one exists, only an
        authenticated admin may add another.
        """
        if await self.admin_exists():
            if context is None:
                raise PermissionDenied("Only an admin can register another admin")
            await AccessPolicy(self.db).authorize(context, Resource.ADMIN, Action.CREATE)

        async with self.transaction():
            await self.ensure_email_free(Admin, data.email)
            admin = Admin(
                name=data.name,
                email=data.email.lower(),
                password_hash=get_password_hash(data.password),
            )
            self.db.add(admin)
            await self.db.flush()
        logger.info(f"Admin {admin.id} registered")
        return admin

    async def ensure_bootstrap_admin(self) -> None:
        """Create the admin named in settings when none exists yet"""
        if not (settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD):
            return
        if await self.admin_exists():
            logger.info("Admin already exists")
            return
        async with self.transaction():
            self.db.add(Admin(
                name="Administrator",
                email=settings.ADMIN_EMAIL.lower(),
                password_hash=get_password_hash(settings.ADMIN_PASSWORD),
            ))
        logger.info("Bootstrap admin created")

    async def _principal(self, grant: AccessGrant):
        model = PRINCIPAL_MODELS[grant.role]
        principal = await self.db.get(model, grant.subject_id, populate_existing=True)
        if principal is None:
            raise NotFoundError(f"{grant.role.value.capitalize()} not found")
        return principal

    async def get_profile(self, grant: AccessGrant):
        return await self._principal(grant)

    async def update_profile(self, grant: AccessGrant, data: ProfileUpdateRequest):
        principal = await self._principal(grant)
        changes = data.model_dump(exclude_unset=True)
        model = type(principal)

        async with self.transaction():
            if changes.get("email") and changes["email"] != principal.email:
                await self.ensure_email_free(model, changes["email"], exclude_id=principal.id)
            fields = [
                field for field in ("name", "email", "password", "phone", "address")
                if field == "password" or hasattr(model, field)
            ]
            self.apply_fields(principal, changes, fields)
        logger.info(f"{grant.role.value} {principal.id} updated their profile")
        return principal

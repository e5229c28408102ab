# school_saas/core/permissions.py
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple
import logging

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from school_saas.core.dependencies import get_auth_context, get_db
from school_saas.core.errors import NotFoundError, PermissionDenied
from school_saas.core.security import AuthContext
from school_saas.models import PRINCIPAL_MODELS
from school_saas.schemas.role import Role

logger = logging.getLogger(__name__)


class Resource(str, Enum):
    ADMIN = "admin"
    SCHOOL = "school"
    STUDENT = "student"
    TEACHER = "teacher"
    PARENT = "parent"
    GUARD = "guard"
    DRIVER = "driver"
    ACCOMPANIMENT = "accompaniment"
    TRANSPORTATION = "transportation"
    CLASS = "class"
    SUBJECT = "subject"
    CYCLE = "cycle"
    SCHEDULE = "schedule"
    ATTENDANCE = "attendance"
    STAFF_ATTENDANCE = "staff attendance"
    EXAM = "exam"
    ACTIVITY = "activity"
    ACTIVITY_PARTICIPANT = "activity participant"
    PROFILE = "profile"

class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"

class Scope(str, Enum):
    GLOBAL = "global"   # every school
    TENANT = "tenant"   # everything in the caller's school
    OWN = "own"         # rows tied to the caller inside its school
    SELF = "self"       # the caller's own record


A, S, T, ST, P, G, D, AC = (
    Role.ADMIN, Role.SCHOOL, Role.TEACHER, Role.STUDENT,
    Role.PARENT, Role.GUARD, Role.DRIVER, Role.ACCOMPANIMENT,
)
TENANT, OWN, SELF, GLOBAL = Scope.TENANT, Scope.OWN, Scope.SELF, Scope.GLOBAL

_SCHOOL_ONLY = {S: TENANT}
_SCHOOL_AND_GUARD = {S: TENANT, G: TENANT}
_ACADEMIC_READ = {S: TENANT, T: OWN, G: TENANT}
_EVERYONE_SELF = {role: SELF for role in Role}

# The single source of truth for who may do what, and how far it reaches.
PERMISSIONS: Dict[Tuple[Resource, Action], Dict[Role, Scope]] = {
    (Resource.ADMIN, Action.CREATE): {A: GLOBAL},

    (Resource.SCHOOL, Action.CREATE): {A: GLOBAL},
    (Resource.SCHOOL, Action.READ): {A: GLOBAL, S: SELF},
    (Resource.SCHOOL, Action.DELETE): {A: GLOBAL},

    (Resource.STUDENT, Action.CREATE): _SCHOOL_ONLY,
    (Resource.STUDENT, Action.READ): {S: TENANT, G: TENANT, T: OWN, P: OWN, A: GLOBAL},
    (Resource.STUDENT, Action.UPDATE): _SCHOOL_AND_GUARD,
    (Resource.STUDENT, Action.DELETE): {S: TENANT, A: GLOBAL},

    (Resource.TEACHER, Action.CREATE): _SCHOOL_ONLY,
    (Resource.TEACHER, Action.READ): {S: TENANT, G: TENANT, A: GLOBAL},
    (Resource.TEACHER, Action.UPDATE): _SCHOOL_ONLY,
    (Resource.TEACHER, Action.DELETE): _SCHOOL_ONLY,

    (Resource.PARENT, Action.CREATE): _SCHOOL_ONLY,
    (Resource.PARENT, Action.READ): _SCHOOL_AND_GUARD,
    (Resource.PARENT, Action.UPDATE): _SCHOOL_ONLY,
    (Resource.PARENT, Action.DELETE): _SCHOOL_ONLY,

    (Resource.GUARD, Action.CREATE): _SCHOOL_ONLY,
    (Resource.GUARD, Action.READ): _SCHOOL_AND_GUARD,
    (Resource.GUARD, Action.UPDATE): _SCHOOL_AND_GUARD,
    (Resource.GUARD, Action.DELETE): _SCHOOL_AND_GUARD,

    (Resource.ACCOMPANIMENT, Action.CREATE): _SCHOOL_AND_GUARD,
    (Resource.ACCOMPANIMENT, Action.READ): _SCHOOL_AND_GUARD,
    (Resource.ACCOMPANIMENT, Action.UPDATE): _SCHOOL_AND_GUARD,
    (Resource.ACCOMPANIMENT, Action.DELETE): _SCHOOL_AND_GUARD,

    (Resource.DRIVER, Action.CREATE): _SCHOOL_ONLY,
    (Resource.DRIVER, Action.READ): _SCHOOL_ONLY,
    (Resource.DRIVER, Action.UPDATE): _SCHOOL_ONLY,
    (Resource.DRIVER, Action.DELETE): _SCHOOL_ONLY,

    (Resource.TRANSPORTATION, Action.CREATE): _SCHOOL_ONLY,
    (Resource.TRANSPORTATION, Action.READ): _SCHOOL_ONLY,
    (Resource.TRANSPORTATION, Action.UPDATE): _SCHOOL_ONLY,
    (Resource.TRANSPORTATION, Action.DELETE): _SCHOOL_ONLY,

    (Resource.CLASS, Action.CREATE): _SCHOOL_AND_GUARD,
    (Resource.CLASS, Action.READ): _ACADEMIC_READ,
    (Resource.CLASS, Action.UPDATE): _SCHOOL_AND_GUARD,
    (Resource.CLASS, Action.DELETE): _SCHOOL_ONLY,

    (Resource.SUBJECT, Action.CREATE): _SCHOOL_AND_GUARD,
    (Resource.SUBJECT, Action.READ): _ACADEMIC_READ,
    (Resource.SUBJECT, Action.UPDATE): _SCHOOL_AND_GUARD,
    (Resource.SUBJECT, Action.DELETE): _SCHOOL_ONLY,

    (Resource.CYCLE, Action.CREATE): _SCHOOL_AND_GUARD,
    (Resource.CYCLE, Action.READ): _ACADEMIC_READ,
    (Resource.CYCLE, Action.UPDATE): _SCHOOL_AND_GUARD,
    (Resource.CYCLE, Action.DELETE): _SCHOOL_ONLY,

    (Resource.SCHEDULE, Action.CREATE): _SCHOOL_AND_GUARD,
    (Resource.SCHEDULE, Action.READ): _ACADEMIC_READ,
    (Resource.SCHEDULE, Action.UPDATE): _SCHOOL_AND_GUARD,
    (Resource.SCHEDULE, Action.DELETE): _SCHOOL_AND_GUARD,

    (Resource.ATTENDANCE, Action.CREATE): {T: OWN, S: TENANT, G: TENANT},
    (Resource.ATTENDANCE, Action.READ): {T: OWN, S: TENANT, G: TENANT, P: OWN},
    (Resource.ATTENDANCE, Action.UPDATE): {T: OWN, S: TENANT, G: TENANT},
    (Resource.ATTENDANCE, Action.DELETE): {T: OWN, S: TENANT, G: TENANT},

    (Resource.STAFF_ATTENDANCE, Action.CREATE): _SCHOOL_AND_GUARD,
    (Resource.STAFF_ATTENDANCE, Action.READ): _SCHOOL_AND_GUARD,
    (Resource.STAFF_ATTENDANCE, Action.UPDATE): _SCHOOL_AND_GUARD,
    (Resource.STAFF_ATTENDANCE, Action.DELETE): _SCHOOL_AND_GUARD,

    (Resource.EXAM, Action.CREATE): {T: OWN, S: TENANT},
    (Resource.EXAM, Action.READ): {T: OWN, S: TENANT, G: TENANT, P: OWN},
    (Resource.EXAM, Action.UPDATE): {T: OWN, S: TENANT},
    (Resource.EXAM, Action.DELETE): {T: OWN, S: TENANT},

    # Anonymous reads go through the public routes; this cell covers a school's own listing
    (Resource.ACTIVITY, Action.CREATE): _SCHOOL_ONLY,
    (Resource.ACTIVITY, Action.READ): {S: TENANT, A: GLOBAL},
    (Resource.ACTIVITY, Action.UPDATE): _SCHOOL_ONLY,
    (Resource.ACTIVITY, Action.DELETE): {S: TENANT, A: GLOBAL},

    (Resource.ACTIVITY_PARTICIPANT, Action.CREATE): {S: TENANT, ST: SELF, P: OWN, A: GLOBAL},
    (Resource.ACTIVITY_PARTICIPANT, Action.DELETE): {S: TENANT, ST: SELF, P: OWN, A: GLOBAL},

    (Resource.PROFILE, Action.READ): _EVERYONE_SELF,
    (Resource.PROFILE, Action.UPDATE): _EVERYONE_SELF,
}

@dataclass(frozen=True)
class AccessGrant:
    """Outcome of a successful authorization"""
    context: AuthContext
    scope: Scope
    school_id: Optional[int]

    @property
    def role(self) -> Role:
        return self.context.role

    @property
    def subject_id(self) -> int:
        return self.context.subject_id

    @property
    def is_global(self) -> bool:
        return self.scope is Scope.GLOBAL

    def owns(self, school_id: Optional[int]) -> bool:
        """Whether a row stamped with school_id falls inside this grant's tenant"""
        return self.is_global or (school_id is not None and school_id == self.school_id)

    def tenant_filter(self, model) -> List:
        """WHERE clauses confining a query on model to the effective tenant"""
        if self.is_global:
            return []
        return [model.school_id == self.school_id]


def allowed_roles(resource: Resource, action: Action) -> Dict[Role, Scope]:
    return PERMISSIONS.get((resource, action), {})


async def resolve_tenant(db: AsyncSession, context: AuthContext) -> Optional[int]:
    """
    Effective school of the caller.

    Admins have none; a school is its own tenant; everybody else belongs to
    the school stamped on their record. A token whose principal no longer
    exists never falls back to an unscoped view.
    """
    model = PRINCIPAL_MODELS[context.role]
    principal = await db.get(model, context.subject_id)
    if principal is None:
        logger.warning(f"Token subject {context.subject_id} has no {context.role.value} record")
        raise NotFoundError(f"{context.role.value.capitalize()} not found")
    return principal.school_id


class AccessPolicy:
    """Maps an authenticated caller and an operation to a grant or a denial"""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def check(context: AuthContext, resource: Resource, action: Action) -> Scope:
        scope = allowed_roles(resource, action).get(context.role)
        if scope is None:
            logger.warning(
                f"Permission denied: {context.role.value} {context.subject_id} "
                f"attempted to {action.value} {resource.value}"
            )
            raise PermissionDenied(
                f"Role '{context.role.value}' is not allowed to {action.value} {resource.value} records"
            )
        return scope

    async def authorize(self, context: AuthContext, resource: Resource, action: Action) -> AccessGrant:
        scope = self.check(context, resource, action)
        school_id = await resolve_tenant(self.db, context)
        return AccessGrant(context=context, scope=scope, school_id=school_id)


class PolicyChecker:
    """FastAPI dependency resolving the grant for one (resource, action) cell"""

    def __init__(self, resource: Resource, action: Action):
        if (resource, action) not in PERMISSIONS:
            raise ValueError(f"No permission entry for {action.value} {resource.value}")
        self.resource = resource
        self.action = action

    async def __call__(
        self,
        context: AuthContext = Depends(get_auth_context),
        db: AsyncSession = Depends(get_db)
    ) -> AccessGrant:
        return await AccessPolicy(db).authorize(context, self.resource, self.action)


def require(resource: Resource, action: Action) -> PolicyChecker:
    return PolicyChecker(resource, action)

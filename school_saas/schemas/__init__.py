# school_saas/schemas/__init__.py

from .role import Role, StaffType
from .common import MessageResponse, ErrorResponse, PrincipalResponse

__all__ = [
    "Role",
    "StaffType",
    "MessageResponse",
    "ErrorResponse",
    "PrincipalResponse",
]

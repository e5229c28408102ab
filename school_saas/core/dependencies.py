from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from school_saas.core.database import get_db
from school_saas.core.errors import AuthenticationError
from school_saas.core.security import AuthContext, decode_access_token

# auto_error is off so a missing header maps to our 401 body, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)

__all__ = ["get_db", "get_auth_context", "get_optional_auth_context", "bearer_scheme"]


async def get_auth_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> AuthContext:
    """
    Authenticate the caller from the Authorization header.

    No header, or one that is not a Bearer credential, is a 401; a token that
    fails verification is a 403.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    context = decode_access_token(credentials.credentials)
    request.state.auth = context
    return context


async def get_optional_auth_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Optional[AuthContext]:
    """Like get_auth_context, but anonymous callers get None"""
    if credentials is None or not credentials.credentials:
        return None
    context = decode_access_token(credentials.credentials)
    request.state.auth = context
    return context

# school_saas/core/security.py

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import secrets
from typing import Dict, Optional, Any, Union
from jose import JWTError, jwt
from passlib.context import CryptContext

from school_saas.core.config import settings, get_jwt_settings, get_token_expires_delta
from school_saas.core.errors import TokenError
from school_saas.core.logging import logger
from school_saas.schemas.role import Role

ACCESS_TOKEN_TYPE = "access"

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__default_rounds=settings.BCRYPT_ROUNDS
)


@dataclass(frozen=True)
class AuthContext:
    """Verified identity carried by a bearer token"""
    subject_id: int
    role: Role


def create_token(
    data: Dict[str, Any],
    token_type: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create JWT token with specified type and expiration"""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or get_token_expires_delta())

    to_encode.update({
        "iat": now,
        "exp": expire,
        "type": token_type,
        "jti": secrets.token_urlsafe(16)
    })

    jwt_settings = get_jwt_settings()
    return jwt.encode(
        to_encode,
        jwt_settings["secret_key"],
        algorithm=jwt_settings["algorithm"]
    )

def verify_token(token: str, token_type: Optional[str] = None) -> Dict[str, Any]:
    """
    Verify JWT signature and expiry, optionally checking the token type.

    Raises TokenError for anything that is not a valid token of that type.
    """
    jwt_settings = get_jwt_settings()
    try:
        payload = jwt.decode(
            token,
            jwt_settings["secret_key"],
            algorithms=[jwt_settings["algorithm"]]
        )
    except JWTError as e:
        logger.warning(f"Token verification failed: {str(e)}")
        raise TokenError()

    if token_type and payload.get("type") != token_type:
        logger.warning(f"Rejected token of type {payload.get('type')!r}")
        raise TokenError()

    return payload

def create_access_token(
    subject_id: Union[int, str],
    role: Role,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create access token embedding subject id and role"""
    data = {
        "sub": str(subject_id),
        "role": Role(role).value
    }
    return create_token(data, ACCESS_TOKEN_TYPE, expires_delta)

def decode_access_token(token: str) -> AuthContext:
    """Verify an access token and return the identity it carries"""
    payload = verify_token(token, ACCESS_TOKEN_TYPE)
    try:
        return AuthContext(subject_id=int(payload["sub"]), role=Role(payload["role"]))
    except (KeyError, TypeError, ValueError):
        logger.warning("Token payload missing subject or carrying an unknown role")
        raise TokenError()

def get_password_hash(password: str) -> str:
    """Hash password using bcrypt"""
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password against hash"""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)

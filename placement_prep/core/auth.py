"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- FastAPI dependencies for protected routes (identity, role, ownership)

Order of checks on every protected route:
1. No/invalid token or unknown user      -> 401
2. Wrong role for the operation           -> 403
3. Caller does not own the target record  -> 401
All of them run before any write.
"""

from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from placement_prep.core.config import get_settings
from placement_prep.core.errors import ForbiddenError, UnauthorizedError
from placement_prep.services.mongo_service import PersistenceGateway, get_gateway

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor; a missing header is our 401, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    gateway: PersistenceGateway = Depends(get_gateway)
) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    if credentials is None:
        raise UnauthorizedError()

    payload = decode_token(credentials.credentials)
    if not payload:
        raise UnauthorizedError("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid or expired token")

    # Verify user exists
    user = gateway.users.get_by_id(user_id)
    if user is None:
        raise UnauthorizedError("Invalid or expired token")

    return {"user_id": user.id, "email": user.email, "name": user.name, "role": user.role}


async def get_current_student(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require student role."""
    if user["role"] != "student":
        raise ForbiddenError("Only students can perform this action")
    return user


async def get_current_alumni(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require alumni role."""
    if user["role"] != "alumni":
        raise ForbiddenError("Only alumni can perform this action")
    return user


def ensure_owner(user: dict, owner_id: str) -> None:
    """The caller must be the owner of the record being changed."""
    if str(owner_id) != str(user["user_id"]):
        raise UnauthorizedError()

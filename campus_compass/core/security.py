"""
Password hashing, JWT issuance and the request authentication dependencies.

Write endpoints depend on `get_current_user` (fail-closed: any problem is a
401). The event listing depends on `get_optional_user_id` (fail-open: any
problem means "anonymous").
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from campus_compass.core.config import get_settings
from campus_compass.core.errors import UnauthorizedError
from campus_compass.core.logging import get_logger
from campus_compass.db.session import get_db
from campus_compass.models.user import User

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    rounds = get_settings().BCRYPT_ROUNDS
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> int:
    """Return the user id bound to a token, or raise UnauthorizedError."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return int(payload["sub"])
    except (jwt.PyJWTError, KeyError, TypeError, ValueError) as e:
        raise UnauthorizedError() from e


async def authenticate(db: AsyncSession, token: Optional[str]) -> User:
    """Resolve a bearer token to an active user."""
    if not token:
        raise UnauthorizedError("Authentication required")

    user_id = decode_access_token(token)
    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise UnauthorizedError("User not found or account deactivated")
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    token = credentials.credentials if credentials else None
    return await authenticate(db, token)


async def get_current_user_id(user: User = Depends(get_current_user)) -> int:
    return user.id


async def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[int]:
    if credentials is None:
        return None
    try:
        user = await authenticate(db, credentials.credentials)
    except UnauthorizedError:
        logger.info("optional_auth_ignored", reason="invalid_token")
        return None
    return user.id

"""
Authentication service handling signup, login and profile updates.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campus_compass.core.config import get_settings
from campus_compass.core.errors import ConflictError, ForbiddenError, InvalidInputError, UnauthorizedError
from campus_compass.models.user import User
from campus_compass.schemas.user import UserCreate, UserLogin
from campus_compass.core.security import hash_password, verify_password, create_access_token
from campus_compass.core.logging import get_logger
from campus_compass.services.university_service import get_university

logger = get_logger(__name__)


def issue_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.id)})


async def register_user(db: AsyncSession, user_data: UserCreate) -> User:
    """
    Create an account for an institutional email address.
    Raises 400 for non-institutional email, 404 for unknown university,
    409 if the email is already registered.
    """
    suffix = get_settings().ALLOWED_EMAIL_SUFFIX
    email = user_data.email.lower()
    if not email.endswith(suffix):
        logger.warning("registration_failed", reason="email_domain", email=email)
        raise InvalidInputError(f"Please use your university email address ({suffix} domain)")

    await get_university(db, user_data.university_id)

    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        logger.warning("registration_failed", reason="email_exists", email=email)
        raise ConflictError("An account with this email already exists")

    user = User(
        email=email,
        hashed_password=hash_password(user_data.password),
        university_id=user_data.university_id,
        interests=[],
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        logger.warning("registration_failed", reason="email_race", email=email)
        raise ConflictError("An account with this email already exists")

    logger.info("user_registered", user_id=user.id, university_id=user.university_id)
    return user


async def authenticate_user(db: AsyncSession, login_data: UserLogin) -> User:
    """
    Check email/password.
    Raises 401 if credentials are invalid, 403 if the account is deactivated.
    """
    result = await db.execute(select(User).where(User.email == login_data.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed", email=login_data.email)
        raise UnauthorizedError("Invalid email or password")

    if not user.is_active:
        raise ForbiddenError("Account has been deactivated")

    logger.info("user_logged_in", user_id=user.id)
    return user


async def update_interests(db: AsyncSession, user: User, interests: list[str]) -> User:
    cleaned = list(dict.fromkeys(tag.strip() for tag in interests if tag and tag.strip()))
    user.interests = cleaned
    await db.flush()
    logger.info("user_interests_updated", user_id=user.id, count=len(cleaned))
    return user

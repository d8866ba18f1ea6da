"""
Authentication endpoints: signup, login and the current user's profile.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from campus_compass.db.session import get_db
from campus_compass.core.security import get_current_user
from campus_compass.models.user import User
from campus_compass.schemas.user import UserCreate, UserLogin, UserResponse, InterestsUpdate, AuthResponse
from campus_compass.services.auth_service import register_user, authenticate_user, issue_token, update_interests

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Create an account with a university email and receive a JWT."""
    user = await register_user(db, user_data)
    return AuthResponse(access_token=issue_token(user), user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(login_data: UserLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate and receive a JWT access token."""
    user = await authenticate_user(db, login_data)
    return AuthResponse(access_token=issue_token(user), user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    """Verify the bearer token and return the user it belongs to."""
    return user


@router.put("/me/interests", response_model=UserResponse)
async def replace_interests(
    payload: InterestsUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await update_interests(db, user, payload.interests)

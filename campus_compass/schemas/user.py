"""
Pydantic schemas for signup, login and profile responses.
"""

from datetime import datetime
from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    email: EmailStr
    # bcrypt only reads the first 72 bytes
    password: str = Field(..., min_length=8, max_length=72)
    university_id: str = Field(..., min_length=1, max_length=64)


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    id: int
    email: str
    university_id: str
    interests: list[str]
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class InterestsUpdate(BaseModel):
    interests: list[str] = Field(default_factory=list, max_length=50)


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

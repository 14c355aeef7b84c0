"""
User Models - accounts, profiles and tokens.
"""

from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    """Signup form."""
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    """Login form."""
    email: EmailStr
    password: str = Field(..., min_length=6)


class UserProfile(BaseModel):
    """Profile document (users/{uid})."""
    uid: str
    name: str
    email: str
    age: Optional[int] = None
    gender: Optional[str] = None
    profile_image_url: Optional[str] = Field(None, alias="profileImageUrl")

    class Config:
        populate_by_name = True


class ProfileUpdate(BaseModel):
    """Profile update - all fields optional, email is not updatable."""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    age: Optional[int] = Field(None, ge=1, le=120)
    gender: Optional[str] = None
    profile_image_url: Optional[str] = Field(None, alias="profileImageUrl")

    class Config:
        populate_by_name = True
        extra = "ignore"


class Token(BaseModel):
    """JWT token response model."""
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    """Token payload data."""
    user_id: Optional[str] = None
    email: Optional[str] = None

"""
Authentication API endpoints.
"""

import logging
from fastapi import APIRouter, HTTPException, status, Depends
from datetime import timedelta

from ..models import UserCreate, LoginRequest, Token, UserProfile
from ..utils.auth import (
    UserContext,
    create_access_token,
    get_current_user,
    get_password_hash,
    verify_password,
)
from ..config import settings
from ..storage import AccountStorage, DocumentStore
from .deps import get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, store: DocumentStore = Depends(get_store)):
    """
    Register a new user.

    Args:
        user_data: Name, email and password

    Returns:
        UserProfile: The created profile

    Raises:
        HTTPException: If an account with this email already exists
    """
    accounts = AccountStorage(store)
    if await accounts.get_account(user_data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="An account with this email already exists. Please log in."
        )

    profile = await accounts.create_account(
        name=user_data.name,
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
    )
    logger.info("User registered", extra={"extra_fields": {"user_id": profile["uid"]}})
    return UserProfile.model_validate(profile)


@router.post("/login", response_model=Token)
async def login(credentials: LoginRequest, store: DocumentStore = Depends(get_store)):
    """
    Login and get access token.

    Raises:
        HTTPException: If authentication fails
    """
    account = await AccountStorage(store).get_account(credentials.email)
    if not account or not verify_password(credentials.password, account["hashedPassword"]):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(
        data={"sub": account["uid"], "email": account["email"]},
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes)
    )
    return Token(access_token=access_token, token_type="bearer")


@router.get("/me", response_model=UserProfile)
async def get_me(
    user: UserContext = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """
    Get the current user's profile.

    Raises:
        HTTPException: If the profile is not found
    """
    profile = await store.get_document("users", user.user_id)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserProfile.model_validate(profile)

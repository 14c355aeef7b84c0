"""
Profile API endpoints.
"""

from fastapi import APIRouter, HTTPException, Depends, status

from ..core import RecordManager
from ..models import UserProfile, ProfileUpdate
from .deps import get_records

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=UserProfile)
async def get_profile(records: RecordManager = Depends(get_records)):
    """Get the current user's profile."""
    profile = await records.get_profile()
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserProfile.model_validate(profile)


@router.put("", response_model=UserProfile)
async def update_profile(
    profile_update: ProfileUpdate,
    records: RecordManager = Depends(get_records),
):
    """
    Update name, age, gender or profile image URL.
    The email address cannot be changed and is ignored if sent.
    """
    profile = await records.update_profile(profile_update.model_dump(by_alias=True, exclude_none=True))
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserProfile.model_validate(profile)

"""
Common dependencies for API endpoints.
"""

from fastapi import Depends, Query, HTTPException

from nutrivibe.models.profiles import UserProfile
from nutrivibe.services.supabase import get_profile_row


async def get_current_user_id(user_id: str = Query(..., description="User ID")) -> str:
    """
    Extract user_id from query parameter.

    In this architecture, the frontend authenticates via Supabase
    and passes the authenticated user_id directly to API calls.
    """
    if not user_id:
        raise HTTPException(status_code=400, detail="user_id is required")
    return user_id


async def get_user_profile(user_id: str = Depends(get_current_user_id)) -> UserProfile:
    """Load the caller's profile; generation needs one."""
    try:
        row = await get_profile_row(user_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not row:
        raise HTTPException(status_code=404, detail=f"Profile for user {user_id} not found")
    return UserProfile.model_validate(row)

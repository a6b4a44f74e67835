"""Profile icon API routes."""
from typing import Optional
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from stocktracker.core.config import settings
from stocktracker.core.database import get_db
from stocktracker.core.auth import get_current_user
from stocktracker.models.user import User
from stocktracker.services.profile_service import ProfileService

router = APIRouter(prefix="/api", tags=["profile"])


@router.post("/updateProfileIcon")
async def update_profile_icon(
    icon: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Upload a new profile icon (multipart field ``icon``).

    Requires authentication.
    """
    if icon is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded"
        )

    # Read one byte past the limit so oversize uploads are detected without
    # buffering the whole file
    data = await icon.read(settings.max_icon_bytes + 1)
    content_type = icon.content_type or ""

    try:
        await ProfileService.update_icon(
            current_user, content_type, data, db, settings.max_icon_bytes
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return {
        "message": "Profile icon updated successfully",
        "mimetype": content_type,
        "size": len(data)
    }


@router.get("/getProfileIcon")
async def get_profile_icon(current_user: User = Depends(get_current_user)):
    """
    Get the current user's profile icon as a data URL.

    Requires authentication.
    """
    return {
        "message": "Profile icon retrieved successfully",
        "icon": ProfileService.get_icon(current_user)
    }

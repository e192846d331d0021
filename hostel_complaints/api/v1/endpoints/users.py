"""
User endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_complaints.core.database import get_db
from hostel_complaints.core.security import get_current_user
from hostel_complaints.models.user import User
from hostel_complaints.schemas.user import UserResponse, UserUpdate

router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    """Profile of the current user"""
    return UserResponse.model_validate(current_user)


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    update_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Update the current user's profile

    The room is the default location of new complaints.
    """
    if update_data.name is not None:
        current_user.name = update_data.name.strip()
    if update_data.student_id is not None:
        current_user.student_id = update_data.student_id
    if update_data.room is not None:
        current_user.room = update_data.room.strip() or None

    await db.flush()
    await db.refresh(current_user)

    return UserResponse.model_validate(current_user)

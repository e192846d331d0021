"""
User schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from hostel_complaints.models.user import UserRole


class UserBase(BaseModel):
    """Common user fields"""
    name: str = Field(..., min_length=2, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    student_id: Optional[str] = None
    room: Optional[str] = None


class UserCreate(UserBase):
    """Student sign-up"""
    password: str = Field(..., min_length=6)


class UserLogin(BaseModel):
    """Login payload"""
    email: str
    password: str


class UserResponse(BaseModel):
    """User response"""
    id: int
    name: str
    email: str
    student_id: Optional[str] = None
    room: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class UserUpdate(BaseModel):
    """Profile update"""
    name: Optional[str] = None
    student_id: Optional[str] = None
    room: Optional[str] = None


class Token(BaseModel):
    """JWT token response"""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

"""
Authentication endpoints

Email + password login

Flow:
1. Student: can sign up and log in
2. Admin: log in only (accounts are created with scripts/create_admin.py)
"""
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from hostel_complaints.core.database import get_db
from hostel_complaints.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    get_current_user
)
from hostel_complaints.models.user import User, UserRole
from hostel_complaints.schemas.user import UserCreate, UserLogin, UserResponse, Token

router = APIRouter()


def _token_for(user: User) -> Token:
    access_token = create_access_token(
        data={"sub": str(user.id), "role": user.role.value}
    )
    return Token(
        access_token=access_token,
        user=UserResponse.model_validate(user)
    )


async def _authenticate(credentials: UserLogin, db: AsyncSession) -> User:
    result = await db.execute(
        select(User).where(User.email == credentials.email.strip().lower())
    )
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account has been disabled"
        )
    return user


# ============================================
# Student endpoints
# ============================================

@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Student sign-up

    - name, email, password (min 6 characters)
    - student_id, room: optional; room is used as the default complaint location
    """
    email = user_data.email.strip().lower()
    result = await db.execute(
        select(User).where(User.email == email)
    )
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This email is already registered"
        )

    new_user = User(
        email=email,
        hashed_password=get_password_hash(user_data.password),
        name=user_data.name.strip(),
        student_id=user_data.student_id,
        room=(user_data.room or "").strip() or None,
        role=UserRole.STUDENT,
        is_active=True
    )

    db.add(new_user)
    await db.flush()
    await db.refresh(new_user)

    return _token_for(new_user)


@router.post("/login", response_model=Token)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Student login"""
    user = await _authenticate(credentials, db)

    user.last_login = datetime.utcnow()
    await db.flush()

    return _token_for(user)


# ============================================
# Admin endpoints
# ============================================

@router.post("/admin/login", response_model=Token)
async def admin_login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """
    Admin login

    Valid credentials of a non-admin account are rejected.
    """
    user = await _authenticate(credentials, db)

    if user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin privileges required."
        )

    user.last_login = datetime.utcnow()
    await db.flush()

    return _token_for(user)


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    """Currently logged in user"""
    return UserResponse.model_validate(current_user)

"""
Password hashing, bearer tokens and the user dependencies

A token only identifies the account. The student's name, room and role are
re-read from the users table on every request, so a complaint is always
stamped with the current profile and a deleted or disabled account loses
access immediately.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_complaints.core.config import settings
from hostel_complaints.core.database import get_db
from hostel_complaints.core.exceptions import NotAuthenticated
from hostel_complaints.models.user import User, UserRole

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Sign `data` (expects "sub" = user id) with an expiry claim"""
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {**data, "exp": datetime.utcnow() + lifetime}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def _user_id_from(token: str) -> int:
    claims = decode_token(token)
    subject = claims.get("sub") if claims else None
    if subject is None or not str(subject).isdigit():
        raise NotAuthenticated()
    return int(subject)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    user = await db.get(User, _user_id_from(credentials.credentials))

    if user is None:
        logger.info("Token presented for a deleted account")
        raise NotAuthenticated("Account not found. Please login again")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account has been disabled. Contact the hostel office.",
        )

    return user


async def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    """Hostel staff only"""
    if current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required"
        )
    return current_user

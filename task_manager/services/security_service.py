from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from task_manager.models.user import User
from task_manager.core import get_settings

# Get application settings
settings = get_settings()

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

SESSION_TOKEN_TYPE = "session"


class SecurityService:
    """Password hashing and signed session tokens"""

    @staticmethod
    def create_password_hash(password: str) -> str:
        """Create a hashed password"""
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash, unknown hash formats never match"""
        if not hashed_password:
            return False
        try:
            return pwd_context.verify(plain_password, hashed_password)
        except ValueError:
            return False

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
        """Get a user by email"""
        query = select(User).where(User.email == email).order_by(User.id)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
        """Get a user by ID"""
        query = select(User).where(User.id == user_id)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def authenticate_user(
        db: AsyncSession,
        email: str,
        password: str
    ) -> Optional[User]:
        """Authenticate a user by email and password"""
        user = await SecurityService.get_user_by_email(db, email.strip())
        if not user:
            return None

        if not SecurityService.verify_password(password, user.password_digest):
            return None

        return user

    @staticmethod
    def create_session_token(
        user_id: int,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """Create a signed session token for the session cookie"""
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.SESSION_EXPIRE_MINUTES)

        to_encode = {
            "sub": str(user_id),
            "exp": datetime.utcnow() + expires_delta,
            "type": SESSION_TOKEN_TYPE,
        }
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def verify_session_token(token: str) -> Optional[Dict[str, Any]]:
        """Verify a session token and return its payload if valid"""
        try:
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM]
            )
        except JWTError:
            return None

        if payload.get("type") != SESSION_TOKEN_TYPE:
            return None

        return payload

    @staticmethod
    async def get_session_user(
        db: AsyncSession,
        token: Optional[str]
    ) -> Optional[User]:
        """Resolve the user behind a session token"""
        if not token:
            return None

        payload = SecurityService.verify_session_token(token)
        if not payload:
            return None

        user_id = payload.get("sub")
        if user_id is None or not str(user_id).isdigit():
            return None

        return await SecurityService.get_user_by_id(db, int(user_id))

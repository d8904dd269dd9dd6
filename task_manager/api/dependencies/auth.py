from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from task_manager.core import get_settings
from task_manager.db.database import get_async_session
from task_manager.services.security_service import SecurityService
from task_manager.models.user import User

settings = get_settings()


class NotAuthenticatedError(Exception):
    """Raised when an anonymous visitor reaches a page that needs a signed-in user"""


# Dependency to get current user
async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_async_session)
) -> Optional[User]:
    """
    Resolve the user behind the session cookie.

    Returns:
        User or None for anonymous visitors, also stored on ``request.state``
        so templates can show it
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    user = await SecurityService.get_session_user(db, token)
    request.state.current_user = user
    return user


# Dependency for pages that need a signed-in user
async def require_user(
    current_user: Optional[User] = Depends(get_current_user),
) -> User:
    """
    Get the signed-in user

    Raises:
        NotAuthenticatedError: turned into a redirect to the sign-in page
    """
    if current_user is None:
        raise NotAuthenticatedError()
    return current_user

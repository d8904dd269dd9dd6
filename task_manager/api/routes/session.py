from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from task_manager.api.dependencies.auth import get_current_user
from task_manager.core import get_settings
from task_manager.core.flash import redirect_with_flash
from task_manager.core.templating import render
from task_manager.db.database import get_async_session
from task_manager.models.user import User
from task_manager.schemas.forms import form_value
from task_manager.schemas.user import SessionCreate
from task_manager.services.security_service import SecurityService
from task_manager.logs import api_logger

settings = get_settings()

router = APIRouter(prefix="/session", tags=["session"])

INVALID_CREDENTIALS = "Invalid email or password"


@router.get("/new")
async def new_session(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user),
):
    """Sign-in form"""
    return render(request, "session/new.html", {"values": {"email": ""}})


@router.get("")
async def session_root():
    return RedirectResponse(url="/session/new", status_code=status.HTTP_302_FOUND)


@router.post("")
async def create_session(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: Optional[User] = Depends(get_current_user),
):
    """Sign in with email and password"""
    form = await request.form()
    credentials = SessionCreate(email=form_value(form, "email"), password=form_value(form, "password"))

    user = await SecurityService.authenticate_user(db, credentials.email, credentials.password)
    if not user:
        api_logger.info(f"Failed sign-in attempt for {credentials.email!r}")
        return render(
            request,
            "session/new.html",
            {"values": {"email": credentials.email}, "errors": {"email": INVALID_CREDENTIALS}, "flash": None},
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    response = redirect_with_flash("/", "success", "You are logged in")
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        SecurityService.create_session_token(user.id),
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        path="/",
        httponly=True,
        samesite="lax",
    )
    return response


@router.delete("")
@router.post("/delete")
async def delete_session():
    """Sign out"""
    response = redirect_with_flash("/", "info", "You are logged out")
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return response

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Request, status
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from task_manager.api.dependencies.auth import get_current_user
from task_manager.api.dependencies.permissions import can_manage_user
from task_manager.core import get_settings
from task_manager.core.flash import redirect_with_flash
from task_manager.core.templating import render
from task_manager.db.database import get_async_session
from task_manager.models.user import User
from task_manager.schemas.forms import MAX_ID, collect_errors, form_value
from task_manager.schemas.user import UserCreate, UserUpdate
from task_manager.services.user_service import UserService
from task_manager.logs import api_logger

settings = get_settings()

# Create router
router = APIRouter(prefix="/users", tags=["users"])

EMAIL_TAKEN = "Email already in use"


def _user_values(form) -> dict:
    return {
        "first_name": form_value(form, "firstName"),
        "last_name": form_value(form, "lastName"),
        "email": form_value(form, "email"),
        "password": form_value(form, "password"),
    }


@router.get("")
async def list_users(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: Optional[User] = Depends(get_current_user),
):
    """
    List all users
    """
    users = await UserService.get_all(db)
    return render(request, "users/index.html", {"users": users})


@router.get("/new")
async def new_user(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user),
):
    """
    Registration form
    """
    return render(request, "users/new.html", {"values": {}})


@router.post("")
async def create_user(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: Optional[User] = Depends(get_current_user),
):
    """
    Register a new user
    """
    values = _user_values(await request.form())

    def render_form(errors: dict):
        shown = {key: value for key, value in values.items() if key != "password"}
        return render(
            request,
            "users/new.html",
            {
                "values": shown,
                "errors": errors,
                "flash": {"type": "danger", "message": "Could not register the user"},
            },
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    try:
        user_data = UserCreate(**values)
    except ValidationError as e:
        return render_form(collect_errors(e))

    # Check if email already exists
    if await UserService.get_by_email(db, user_data.email):
        return render_form({"email": EMAIL_TAKEN})

    await UserService.create(
        db,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        email=user_data.email,
        password=user_data.password,
    )
    return redirect_with_flash("/", "success", "User registered successfully")


@router.get("/{user_id}/edit")
async def edit_user(
    user_id: Annotated[int, Path(ge=1, le=MAX_ID)],
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: Optional[User] = Depends(get_current_user),
):
    """
    Edit form, only for the user themselves
    """
    user = await UserService.get_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if not can_manage_user(current_user, user_id):
        return redirect_with_flash("/users", "danger", "You cannot edit another user")

    values = {"first_name": user.first_name, "last_name": user.last_name, "email": user.email}
    return render(request, "users/edit.html", {"user": user, "values": values})


@router.patch("/{user_id}")
@router.post("/{user_id}")
async def update_user(
    user_id: Annotated[int, Path(ge=1, le=MAX_ID)],
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: Optional[User] = Depends(get_current_user),
):
    """
    Update a user, blank fields keep their current values
    """
    if not can_manage_user(current_user, user_id):
        return redirect_with_flash("/users", "danger", "You cannot edit another user")

    user = await UserService.get_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    values = _user_values(await request.form())

    def render_form(errors: dict):
        shown = {key: value for key, value in values.items() if key != "password"}
        return render(
            request,
            "users/edit.html",
            {"user": user, "values": shown, "errors": errors},
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    try:
        user_data = UserUpdate(**values)
    except ValidationError as e:
        return render_form(collect_errors(e))

    # Check if new email already exists
    new_email = user_data.email if user_data.email and user_data.email != user.email else None
    if new_email:
        existing_user = await UserService.get_by_email(db, new_email)
        if existing_user and existing_user.id != user_id:
            return render_form({"email": EMAIL_TAKEN})

    await UserService.update(
        db,
        user_id,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        email=new_email,
        password=user_data.password,
    )
    api_logger.info(f"User {user_id} updated")
    return redirect_with_flash("/users", "success", "User updated successfully")


@router.delete("/{user_id}")
@router.post("/{user_id}/delete")
async def delete_user(
    user_id: Annotated[int, Path(ge=1, le=MAX_ID)],
    db: AsyncSession = Depends(get_async_session),
    current_user: Optional[User] = Depends(get_current_user),
):
    """
    Delete a user, refused while they create or execute tasks
    """
    if not can_manage_user(current_user, user_id):
        return redirect_with_flash("/users", "danger", "You cannot delete another user")

    deleted = await UserService.delete(db, user_id)
    if not deleted:
        return redirect_with_flash("/users", "danger", "Cannot delete a user with assigned tasks")

    response: RedirectResponse = redirect_with_flash("/users", "success", "User deleted successfully")
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return response

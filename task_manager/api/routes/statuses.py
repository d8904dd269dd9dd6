from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Request, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from task_manager.api.dependencies.auth import get_current_user, require_user
from task_manager.core.flash import redirect_with_flash
from task_manager.core.templating import render
from task_manager.db.database import get_async_session
from task_manager.models.user import User
from task_manager.schemas.forms import MAX_ID, collect_errors, form_value
from task_manager.schemas.status import StatusForm
from task_manager.services.status_service import StatusService

router = APIRouter(
    prefix="/statuses",
    tags=["statuses"],
)


@router.get("")
async def list_statuses(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: Optional[User] = Depends(get_current_user),
):
    """Список статусов"""
    statuses = await StatusService.get_all(db)
    return render(request, "statuses/index.html", {"statuses": statuses})


@router.get("/new")
async def new_status(
    request: Request,
    current_user: User = Depends(require_user),
):
    """Форма создания статуса"""
    return render(request, "statuses/new.html", {"values": {}})


@router.post("")
async def create_status(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_user),
):
    """Создание статуса"""
    name = form_value(await request.form(), "name")

    try:
        status_form = StatusForm(name=name)
    except ValidationError as e:
        return render(
            request,
            "statuses/new.html",
            {
                "values": {"name": name},
                "errors": collect_errors(e),
                "flash": {"type": "danger", "message": "Could not create the status"},
            },
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    await StatusService.create(db=db, name=status_form.name)
    return redirect_with_flash("/statuses", "success", "Status created successfully")


@router.get("/{status_id}/edit")
async def edit_status(
    status_id: Annotated[int, Path(ge=1, le=MAX_ID)],
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_user),
):
    """Форма редактирования статуса"""
    task_status = await StatusService.get_by_id(db=db, status_id=status_id)
    if not task_status:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Status not found"
        )

    return render(
        request,
        "statuses/edit.html",
        {"status": task_status, "values": {"name": task_status.name}},
    )


@router.patch("/{status_id}")
@router.post("/{status_id}")
async def update_status(
    status_id: Annotated[int, Path(ge=1, le=MAX_ID)],
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_user),
):
    """Переименование статуса"""
    task_status = await StatusService.get_by_id(db=db, status_id=status_id)
    if not task_status:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Status not found"
        )

    name = form_value(await request.form(), "name")
    try:
        status_form = StatusForm(name=name)
    except ValidationError as e:
        return render(
            request,
            "statuses/edit.html",
            {"status": task_status, "values": {"name": name}, "errors": collect_errors(e)},
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    await StatusService.update(db=db, status_id=status_id, name=status_form.name)
    return redirect_with_flash("/statuses", "success", "Status updated successfully")


@router.delete("/{status_id}")
@router.post("/{status_id}/delete")
async def delete_status(
    status_id: Annotated[int, Path(ge=1, le=MAX_ID)],
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_user),
):
    """Удаление статуса (запрещено, пока на него ссылаются задачи)"""
    task_status = await StatusService.get_by_id(db=db, status_id=status_id)
    if not task_status:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Status not found"
        )

    deleted = await StatusService.delete(db=db, status_id=status_id)
    if not deleted:
        return redirect_with_flash("/statuses", "danger", "Cannot delete a status that is used by tasks")

    return redirect_with_flash("/statuses", "success", "Status deleted successfully")

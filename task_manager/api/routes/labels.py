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
from task_manager.schemas.label import LabelForm
from task_manager.services.label_service import LabelService

router = APIRouter(
    prefix="/labels",
    tags=["labels"],
)


@router.get("")
async def list_labels(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: Optional[User] = Depends(get_current_user),
):
    """Список меток"""
    labels = await LabelService.get_all(db)
    return render(request, "labels/index.html", {"labels": labels})


@router.get("/new")
async def new_label(
    request: Request,
    current_user: User = Depends(require_user),
):
    """Форма создания метки"""
    return render(request, "labels/new.html", {"values": {}})


@router.post("")
async def create_label(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_user),
):
    """Создание метки"""
    name = form_value(await request.form(), "name")

    try:
        label_form = LabelForm(name=name)
    except ValidationError as e:
        return render(
            request,
            "labels/new.html",
            {
                "values": {"name": name},
                "errors": collect_errors(e),
                "flash": {"type": "danger", "message": "Could not create the label"},
            },
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    await LabelService.create(db=db, name=label_form.name)
    return redirect_with_flash("/labels", "success", "Label created successfully")


@router.get("/{label_id}/edit")
async def edit_label(
    label_id: Annotated[int, Path(ge=1, le=MAX_ID)],
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_user),
):
    """Форма редактирования метки"""
    label = await LabelService.get_by_id(db=db, label_id=label_id)
    if not label:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Label not found"
        )

    return render(request, "labels/edit.html", {"label": label, "values": {"name": label.name}})


@router.patch("/{label_id}")
@router.post("/{label_id}")
async def update_label(
    label_id: Annotated[int, Path(ge=1, le=MAX_ID)],
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_user),
):
    """Переименование метки"""
    label = await LabelService.get_by_id(db=db, label_id=label_id)
    if not label:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Label not found"
        )

    name = form_value(await request.form(), "name")
    try:
        label_form = LabelForm(name=name)
    except ValidationError as e:
        return render(
            request,
            "labels/edit.html",
            {"label": label, "values": {"name": name}, "errors": collect_errors(e)},
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    await LabelService.update(db=db, label_id=label_id, name=label_form.name)
    return redirect_with_flash("/labels", "success", "Label updated successfully")


@router.delete("/{label_id}")
@router.post("/{label_id}/delete")
async def delete_label(
    label_id: Annotated[int, Path(ge=1, le=MAX_ID)],
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_user),
):
    """Удаление метки (запрещено, пока она назначена задачам)"""
    label = await LabelService.get_by_id(db=db, label_id=label_id)
    if not label:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Label not found"
        )

    deleted = await LabelService.delete(db=db, label_id=label_id)
    if not deleted:
        return redirect_with_flash("/labels", "danger", "Cannot delete a label that is assigned to tasks")

    return redirect_with_flash("/labels", "success", "Label deleted successfully")

from typing import Annotated, Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import FormData

from task_manager.api.dependencies.auth import get_current_user, require_user
from task_manager.api.dependencies.permissions import can_delete_task
from task_manager.core.flash import redirect_with_flash
from task_manager.core.templating import render
from task_manager.db.database import get_async_session
from task_manager.models.user import User
from task_manager.schemas.forms import MAX_ID, collect_errors, form_list, form_value
from task_manager.schemas.task import TaskFilter, TaskForm, parse_flag
from task_manager.services.label_service import LabelService
from task_manager.services.status_service import StatusService
from task_manager.services.task_service import TaskService
from task_manager.services.user_service import UserService
from task_manager.logs import debug_logger

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
)


async def _form_choices(db: AsyncSession) -> Dict[str, Any]:
    """Статусы, пользователи и метки для выпадающих списков"""
    return {
        "statuses": await StatusService.get_all(db),
        "users": await UserService.get_all(db),
        "labels": await LabelService.get_all(db),
    }


def _task_values(form: FormData) -> Dict[str, Any]:
    return {
        "name": form_value(form, "name"),
        "description": form_value(form, "description"),
        "status_id": form_value(form, "statusId"),
        "executor_id": form_value(form, "executorId"),
        "label_ids": form_list(form, "labels"),
    }


async def validate_task_form(
    db: AsyncSession,
    values: Dict[str, Any]
) -> Tuple[Optional[TaskForm], Dict[str, str]]:
    """
    Проверка формы задачи: поля формы, затем существование статуса,
    исполнителя и меток в БД
    """
    try:
        task_form = TaskForm(**values)
    except ValidationError as e:
        return None, collect_errors(e)

    errors: Dict[str, str] = {}
    if not await StatusService.get_by_id(db, task_form.status_id):
        errors["status_id"] = "must be selected"
    if task_form.executor_id is not None and not await UserService.get_by_id(db, task_form.executor_id):
        errors["executor_id"] = "unknown user"
    existing_label_ids = await LabelService.get_existing_ids(db, task_form.label_ids)
    if set(existing_label_ids) != set(task_form.label_ids):
        errors["label_ids"] = "unknown label"

    if errors:
        return None, errors
    return task_form, {}


@router.get("")
async def list_tasks(
    request: Request,
    status_id: Optional[str] = Query(None, alias="statusId"),
    executor_id: Optional[str] = Query(None, alias="executorId"),
    label_id: Optional[str] = Query(None, alias="labelId"),
    only_my: Optional[str] = Query(None, alias="onlyMy"),
    has_label: Optional[str] = Query(None, alias="hasLabel"),
    db: AsyncSession = Depends(get_async_session),
    current_user: Optional[User] = Depends(get_current_user),
):
    """Список задач с фильтрами"""
    only_mine = parse_flag(only_my) and current_user is not None
    filters = TaskFilter(
        status_id=status_id,
        executor_id=executor_id,
        label_id=label_id,
        creator_id=current_user.id if only_mine else None,
        has_label=parse_flag(has_label),
    )
    debug_logger.debug(f"Фильтры списка задач: {filters.model_dump()}")

    tasks = await TaskService.get_all(db, filters)
    context = await _form_choices(db)
    context.update({
        "tasks": tasks,
        "filters": {
            "status_id": filters.status_id,
            "executor_id": filters.executor_id,
            "label_id": filters.label_id,
            "only_my": only_mine,
            "has_label": filters.has_label,
        },
    })
    return render(request, "tasks/index.html", context)


@router.get("/new")
async def new_task(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_user),
):
    """Форма создания задачи"""
    context = await _form_choices(db)
    context["values"] = {"label_ids": []}
    return render(request, "tasks/new.html", context)


@router.post("")
async def create_task(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_user),
):
    """Создание задачи, автор — текущий пользователь"""
    values = _task_values(await request.form())
    task_form, errors = await validate_task_form(db, values)

    if task_form is None:
        context = await _form_choices(db)
        context.update({
            "values": values,
            "errors": errors,
            "flash": {"type": "danger", "message": "Could not create the task"},
        })
        return render(request, "tasks/new.html", context, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)

    await TaskService.create(
        db=db,
        name=task_form.name,
        description=task_form.description,
        status_id=task_form.status_id,
        creator_id=current_user.id,
        executor_id=task_form.executor_id,
        label_ids=task_form.label_ids,
    )
    return redirect_with_flash("/tasks", "success", "Task created successfully")


@router.get("/{task_id}")
async def show_task(
    task_id: Annotated[int, Path(ge=1, le=MAX_ID)],
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: Optional[User] = Depends(get_current_user),
):
    """Страница задачи"""
    task = await TaskService.get_by_id(db=db, task_id=task_id)
    if not task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found"
        )

    return render(request, "tasks/show.html", {"task": task})


@router.get("/{task_id}/edit")
async def edit_task(
    task_id: Annotated[int, Path(ge=1, le=MAX_ID)],
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_user),
):
    """Форма редактирования задачи"""
    task = await TaskService.get_by_id(db=db, task_id=task_id)
    if not task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found"
        )

    context = await _form_choices(db)
    context.update({
        "task": task,
        "values": {
            "name": task.name,
            "description": task.description or "",
            "status_id": task.status_id,
            "executor_id": task.executor_id or "",
            "label_ids": task.label_ids,
        },
    })
    return render(request, "tasks/edit.html", context)


@router.patch("/{task_id}")
@router.post("/{task_id}")
async def update_task(
    task_id: Annotated[int, Path(ge=1, le=MAX_ID)],
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(require_user),
):
    """
    Обновление задачи. Выбранные метки полностью заменяют прежние,
    пустой выбор снимает все метки.
    """
    task = await TaskService.get_by_id(db=db, task_id=task_id)
    if not task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found"
        )

    values = _task_values(await request.form())
    task_form, errors = await validate_task_form(db, values)

    if task_form is None:
        context = await _form_choices(db)
        context.update({"task": task, "values": values, "errors": errors})
        return render(request, "tasks/edit.html", context, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)

    await TaskService.update(
        db=db,
        task_id=task_id,
        name=task_form.name,
        description=task_form.description or "",
        status_id=task_form.status_id,
        executor_id=task_form.executor_id,
        clear_executor=task_form.executor_id is None,
        label_ids=task_form.label_ids,
    )
    return redirect_with_flash("/tasks", "success", "Task updated successfully")


@router.delete("/{task_id}")
@router.post("/{task_id}/delete")
async def delete_task(
    task_id: Annotated[int, Path(ge=1, le=MAX_ID)],
    db: AsyncSession = Depends(get_async_session),
    current_user: Optional[User] = Depends(get_current_user),
):
    """Удаление задачи (только автор)"""
    task = await TaskService.get_by_id(db=db, task_id=task_id)
    if not task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found"
        )

    if not can_delete_task(current_user, task):
        return redirect_with_flash("/tasks", "danger", "Only the creator can delete the task")

    await TaskService.delete(db=db, task_id=task_id)
    return redirect_with_flash("/tasks", "success", "Task deleted successfully")

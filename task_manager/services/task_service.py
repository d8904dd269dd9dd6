from typing import List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from task_manager.models.task import Task, tasks_labels
from task_manager.schemas.task import TaskFilter
from task_manager.logs import debug_logger, log_function


def _unique_ids(ids: Optional[Sequence[int]]) -> List[int]:
    """Сохраняем порядок, выбрасываем пустые и повторы"""
    result: List[int] = []
    for value in ids or []:
        if value and int(value) not in result:
            result.append(int(value))
    return result


def _with_relations(query: Select) -> Select:
    # populate_existing: связи могли поменяться в обход ORM (tasks_labels)
    return query.options(
        selectinload(Task.status),
        selectinload(Task.creator),
        selectinload(Task.executor),
        selectinload(Task.labels),
    ).execution_options(populate_existing=True)


def build_filter_query(filters: TaskFilter) -> Select:
    """
    Запрос списка задач с независимыми, комбинируемыми фильтрами.

    Фильтры по меткам присоединяют tasks_labels через LEFT JOIN и группируют
    по tasks.id, чтобы задача с несколькими метками попадала в выборку один раз.
    Если задан и label_id, и has_label, решает label_id.
    """
    query = select(Task)

    if filters.status_id:
        query = query.where(Task.status_id == filters.status_id)
    if filters.executor_id:
        query = query.where(Task.executor_id == filters.executor_id)
    if filters.creator_id:
        query = query.where(Task.creator_id == filters.creator_id)

    if filters.needs_label_join:
        query = query.outerjoin(tasks_labels, Task.id == tasks_labels.c.task_id)
        if filters.label_id:
            query = query.where(tasks_labels.c.label_id == filters.label_id)
        else:
            query = query.where(tasks_labels.c.label_id.is_not(None))
        query = query.group_by(Task.id)

    return query.order_by(Task.id)


class TaskService:
    """CRUD operations service for Task model"""

    @staticmethod
    async def get_all(
        db: AsyncSession,
        filters: Optional[TaskFilter] = None
    ) -> List[Task]:
        """Список задач с фильтрами и загруженными связями"""
        query = _with_relations(build_filter_query(filters or TaskFilter()))
        result = await db.execute(query)
        return list(result.scalars().unique().all())

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        task_id: int
    ) -> Optional[Task]:
        """Задача по ID со статусом, автором, исполнителем и метками"""
        query = _with_relations(select(Task).where(Task.id == task_id))
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def _insert_labels(
        db: AsyncSession,
        task_id: int,
        label_ids: List[int]
    ) -> None:
        if label_ids:
            await db.execute(
                tasks_labels.insert(),
                [{"task_id": task_id, "label_id": label_id} for label_id in label_ids],
            )

    @staticmethod
    @log_function()
    async def create(
        db: AsyncSession,
        name: str,
        status_id: int,
        creator_id: int,
        description: Optional[str] = None,
        executor_id: Optional[int] = None,
        label_ids: Optional[Sequence[int]] = None
    ) -> Task:
        """Создание задачи вместе со связями с метками"""
        task = Task(
            name=name,
            description=description,
            status_id=status_id,
            creator_id=creator_id,
            executor_id=executor_id or None,
        )

        db.add(task)
        await db.flush()  # Получаем ID задачи

        await TaskService._insert_labels(db, task.id, _unique_ids(label_ids))
        await db.commit()

        debug_logger.info(f"Создана задача {task.id} пользователем {creator_id}")
        return await TaskService.get_by_id(db, task.id)

    @staticmethod
    @log_function()
    async def update(
        db: AsyncSession,
        task_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        status_id: Optional[int] = None,
        executor_id: Optional[int] = None,
        label_ids: Optional[Sequence[int]] = None,
        clear_executor: bool = False
    ) -> Optional[Task]:
        """
        Обновление задачи.

        label_ids=None оставляет метки как есть; список (в том числе пустой)
        полностью заменяет прежние связи: delete, затем insert, один commit.
        """
        current_task = await TaskService.get_by_id(db, task_id)
        if not current_task:
            debug_logger.warning(f"Задача {task_id} не найдена при попытке обновления")
            return None

        update_data = {}
        if name is not None:
            update_data["name"] = name
        if description is not None:
            update_data["description"] = description
        if status_id is not None:
            update_data["status_id"] = status_id
        if executor_id is not None:
            update_data["executor_id"] = executor_id
        elif clear_executor:
            update_data["executor_id"] = None

        if update_data:
            debug_logger.debug(f"Обновляемые поля задачи {task_id}: {update_data}")
            await db.execute(update(Task).where(Task.id == task_id).values(**update_data))

        if label_ids is not None:
            new_label_ids = _unique_ids(label_ids)
            debug_logger.debug(f"Замена меток задачи {task_id}: {new_label_ids}")
            await db.execute(delete(tasks_labels).where(tasks_labels.c.task_id == task_id))
            await TaskService._insert_labels(db, task_id, new_label_ids)

        await db.commit()
        return await TaskService.get_by_id(db, task_id)

    @staticmethod
    async def delete(
        db: AsyncSession,
        task_id: int
    ) -> bool:
        """Удаление задачи вместе с её связями с метками"""
        await db.execute(delete(tasks_labels).where(tasks_labels.c.task_id == task_id))
        result = await db.execute(delete(Task).where(Task.id == task_id))
        await db.commit()

        deleted = result.rowcount > 0
        if deleted:
            debug_logger.info(f"Задача {task_id} удалена")
        return deleted

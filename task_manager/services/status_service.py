from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func

from task_manager.models.status import Status
from task_manager.models.task import Task
from task_manager.logs import debug_logger


class StatusService:
    """Сервис для работы со статусами задач"""

    @staticmethod
    async def create(
        db: AsyncSession,
        name: str
    ) -> Status:
        """Создание нового статуса"""
        status = Status(name=name)

        db.add(status)
        await db.commit()
        await db.refresh(status)
        return status

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        status_id: int
    ) -> Optional[Status]:
        """Получение статуса по ID"""
        query = select(Status).where(Status.id == status_id)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_all(db: AsyncSession) -> List[Status]:
        """Получение всех статусов"""
        query = select(Status).order_by(Status.id)
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def update(
        db: AsyncSession,
        status_id: int,
        name: str
    ) -> Optional[Status]:
        """Переименование статуса"""
        stmt = update(Status).where(Status.id == status_id).values(name=name)
        await db.execute(stmt)
        await db.commit()

        status = await StatusService.get_by_id(db, status_id)
        if status is not None:
            await db.refresh(status)
        return status

    @staticmethod
    async def count_tasks(
        db: AsyncSession,
        status_id: int
    ) -> int:
        """Количество задач в статусе"""
        query = select(func.count(Task.id)).where(Task.status_id == status_id)
        result = await db.execute(query)
        return result.scalar() or 0

    @staticmethod
    async def delete(
        db: AsyncSession,
        status_id: int
    ) -> bool:
        """Удаление статуса, если на него не ссылается ни одна задача"""
        if await StatusService.count_tasks(db, status_id) > 0:
            debug_logger.warning(f"Статус {status_id} используется задачами, удаление отклонено")
            return False

        try:
            result = await db.execute(delete(Status).where(Status.id == status_id))
            await db.commit()
        except IntegrityError:
            await db.rollback()
            debug_logger.warning(f"Удаление статуса {status_id} нарушает ссылочную целостность")
            return False

        return result.rowcount > 0

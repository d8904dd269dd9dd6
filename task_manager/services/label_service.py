from typing import List, Optional, Sequence
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func

from task_manager.models.label import Label
from task_manager.models.task import tasks_labels
from task_manager.logs import debug_logger


class LabelService:
    """Сервис для работы с метками задач"""

    @staticmethod
    async def create(
        db: AsyncSession,
        name: str
    ) -> Label:
        """Создание новой метки"""
        label = Label(name=name)

        db.add(label)
        await db.commit()
        await db.refresh(label)
        return label

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        label_id: int
    ) -> Optional[Label]:
        """Получение метки по ID"""
        query = select(Label).where(Label.id == label_id)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_all(db: AsyncSession) -> List[Label]:
        """Получение всех меток"""
        query = select(Label).order_by(Label.id)
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_existing_ids(
        db: AsyncSession,
        label_ids: Sequence[int]
    ) -> List[int]:
        """Какие из переданных ID меток существуют"""
        if not label_ids:
            return []
        query = select(Label.id).where(Label.id.in_(list(label_ids)))
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def update(
        db: AsyncSession,
        label_id: int,
        name: str
    ) -> Optional[Label]:
        """Переименование метки"""
        stmt = update(Label).where(Label.id == label_id).values(name=name)
        await db.execute(stmt)
        await db.commit()

        label = await LabelService.get_by_id(db, label_id)
        if label is not None:
            await db.refresh(label)
        return label

    @staticmethod
    async def count_tasks(
        db: AsyncSession,
        label_id: int
    ) -> int:
        """Количество задач с этой меткой"""
        query = select(func.count(tasks_labels.c.task_id)).where(tasks_labels.c.label_id == label_id)
        result = await db.execute(query)
        return result.scalar() or 0

    @staticmethod
    async def delete(
        db: AsyncSession,
        label_id: int
    ) -> bool:
        """Удаление метки, если она не назначена ни одной задаче"""
        if await LabelService.count_tasks(db, label_id) > 0:
            debug_logger.warning(f"Метка {label_id} назначена задачам, удаление отклонено")
            return False

        try:
            result = await db.execute(delete(Label).where(Label.id == label_id))
            await db.commit()
        except IntegrityError:
            await db.rollback()
            debug_logger.warning(f"Удаление метки {label_id} нарушает ссылочную целостность")
            return False

        return result.rowcount > 0

from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, or_

from task_manager.models.user import User
from task_manager.models.task import Task
from task_manager.services.security_service import SecurityService
from task_manager.logs import debug_logger


class UserService:
    """CRUD operations service for User model"""

    @staticmethod
    async def create(
        db: AsyncSession,
        first_name: str,
        last_name: str,
        email: str,
        password: str
    ) -> User:
        """Create a new user"""
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_digest=SecurityService.create_password_hash(password),
        )

        db.add(user)
        await db.commit()
        await db.refresh(user)
        debug_logger.info(f"Зарегистрирован пользователь {user.id}")
        return user

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        user_id: int
    ) -> Optional[User]:
        """Get user by id"""
        query = select(User).where(User.id == user_id)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_by_email(
        db: AsyncSession,
        email: str
    ) -> Optional[User]:
        """Get user by email"""
        return await SecurityService.get_user_by_email(db, email)

    @staticmethod
    async def get_all(db: AsyncSession) -> List[User]:
        """Get all users ordered by id"""
        query = select(User).order_by(User.id)
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def update(
        db: AsyncSession,
        user_id: int,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None
    ) -> Optional[User]:
        """Update a user's details, None keeps the current value"""
        update_data = {}
        if first_name is not None:
            update_data["first_name"] = first_name
        if last_name is not None:
            update_data["last_name"] = last_name
        if email is not None:
            update_data["email"] = email
        if password is not None:
            update_data["password_digest"] = SecurityService.create_password_hash(password)

        if not update_data:
            return await UserService.get_by_id(db, user_id)

        stmt = update(User).where(User.id == user_id).values(**update_data)
        await db.execute(stmt)
        await db.commit()

        user = await UserService.get_by_id(db, user_id)
        if user is not None:
            await db.refresh(user)
        return user

    @staticmethod
    async def count_tasks(
        db: AsyncSession,
        user_id: int
    ) -> int:
        """Number of tasks the user created or executes"""
        query = select(func.count(Task.id)).where(
            or_(Task.creator_id == user_id, Task.executor_id == user_id)
        )
        result = await db.execute(query)
        return result.scalar() or 0

    @staticmethod
    async def delete(
        db: AsyncSession,
        user_id: int
    ) -> bool:
        """Delete a user unless they are creator or executor of any task"""
        if await UserService.count_tasks(db, user_id) > 0:
            debug_logger.warning(f"Пользователь {user_id} связан с задачами, удаление отклонено")
            return False

        try:
            result = await db.execute(delete(User).where(User.id == user_id))
            await db.commit()
        except IntegrityError:
            await db.rollback()
            debug_logger.warning(f"Удаление пользователя {user_id} нарушает ссылочную целостность")
            return False

        return result.rowcount > 0

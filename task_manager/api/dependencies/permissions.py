from typing import Optional

from task_manager.models.task import Task
from task_manager.models.user import User


def can_manage_user(current_user: Optional[User], user_id: int) -> bool:
    """
    Users may edit or delete only their own account

    Args:
        current_user: Signed-in user (None for anonymous visitors)
        user_id: Account being changed
    """
    return current_user is not None and current_user.id == user_id


def can_delete_task(current_user: Optional[User], task: Task) -> bool:
    """Only the creator of a task may delete it"""
    return current_user is not None and current_user.id == task.creator_id

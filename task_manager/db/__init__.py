from task_manager.db.database import init_db, get_async_session

__all__ = ["init_db", "get_async_session"]

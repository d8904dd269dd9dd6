from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime

from task_manager.db.base import Base


class Status(Base):
    """Статус задачи (этап рабочего процесса)"""

    __tablename__ = "statuses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

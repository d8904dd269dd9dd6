from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime

from task_manager.db.base import Base


class User(Base):
    """Пользователь: автор и исполнитель задач"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(255), nullable=False, default="")
    last_name = Column(String(255), nullable=False, default="")
    # Уникальность email снята последней миграцией, проверяется при регистрации
    email = Column(String(255), nullable=False, index=True)
    password_digest = Column(String(255), nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

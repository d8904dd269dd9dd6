from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Table, Text
from sqlalchemy.orm import relationship

from task_manager.db.base import Base


# Ассоциативная таблица many-to-many между задачами и метками.
# Удаление задачи уносит её связи, метку со связями удалить нельзя.
tasks_labels = Table(
    "tasks_labels",
    Base.metadata,
    Column("task_id", Integer, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("label_id", Integer, ForeignKey("labels.id", ondelete="RESTRICT"), primary_key=True),
)


class Task(Base):
    """Модель задачи"""

    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status_id = Column(Integer, ForeignKey("statuses.id", ondelete="RESTRICT"), nullable=False)
    creator_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    executor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    status = relationship("Status")
    creator = relationship("User", foreign_keys=[creator_id])
    executor = relationship("User", foreign_keys=[executor_id])

    # Связи ведутся сервисом через tasks_labels, отношение только для чтения
    labels = relationship("Label", secondary=tasks_labels, order_by="Label.id", viewonly=True)

    @property
    def label_ids(self) -> list[int]:
        return [label.id for label in self.labels]

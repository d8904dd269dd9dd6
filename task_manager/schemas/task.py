from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from task_manager.schemas.forms import MAX_ID, blank_to_none

TRUTHY_FLAGS = ("1", "true", "on")


def id_in_range(value: int) -> bool:
    return 1 <= value <= MAX_ID


class TaskForm(BaseModel):
    """Форма создания и редактирования задачи"""
    name: str = Field(..., max_length=255)
    description: Optional[str] = None
    status_id: int
    executor_id: Optional[int] = None
    label_ids: List[int] = []

    @field_validator("name", mode="before")
    @classmethod
    def not_blank(cls, value):
        if not isinstance(value, str) or not value.strip():
            raise ValueError("can't be blank")
        return value.strip()

    @field_validator("description", "executor_id", mode="before")
    @classmethod
    def empty_as_none(cls, value):
        return blank_to_none(value)

    @field_validator("status_id", mode="before")
    @classmethod
    def status_selected(cls, value):
        if blank_to_none(value) is None:
            raise ValueError("must be selected")
        return value

    @field_validator("status_id")
    @classmethod
    def status_in_range(cls, value: int) -> int:
        if not id_in_range(value):
            raise ValueError("must be selected")
        return value

    @field_validator("executor_id")
    @classmethod
    def executor_in_range(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and not id_in_range(value):
            raise ValueError("unknown user")
        return value

    @field_validator("label_ids", mode="before")
    @classmethod
    def drop_empty_labels(cls, value):
        if value is None:
            return []
        if isinstance(value, (str, int)):
            value = [value]
        return [item for item in value if blank_to_none(item) is not None]

    @field_validator("label_ids")
    @classmethod
    def unique_labels(cls, value: List[int]) -> List[int]:
        if not all(id_in_range(item) for item in value):
            raise ValueError("unknown label")
        # Повторный выбор одной метки сводится к одной связи
        return list(dict.fromkeys(value))


def parse_flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in TRUTHY_FLAGS


class TaskFilter(BaseModel):
    """Фильтры списка задач, каждый предикат независим"""
    status_id: Optional[int] = None
    executor_id: Optional[int] = None
    creator_id: Optional[int] = None
    label_id: Optional[int] = None
    has_label: bool = False

    @field_validator("status_id", "executor_id", "creator_id", "label_id", mode="before")
    @classmethod
    def ignore_malformed_ids(cls, value):
        # Мусор в query string равносилен отсутствию фильтра
        if isinstance(value, str):
            value = value.strip()
            if not (value.isascii() and value.isdigit()):
                return None
            value = int(value)
        if isinstance(value, int) and not id_in_range(value):
            return None
        return value

    @property
    def needs_label_join(self) -> bool:
        return bool(self.label_id) or self.has_label

from pydantic import BaseModel, Field, field_validator


class StatusForm(BaseModel):
    """Форма создания и редактирования статуса"""
    name: str = Field(..., max_length=255)

    @field_validator("name", mode="before")
    @classmethod
    def not_blank(cls, value):
        if not isinstance(value, str) or not value.strip():
            raise ValueError("can't be blank")
        return value.strip()

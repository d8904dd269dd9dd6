from typing import Optional
from pydantic import BaseModel, EmailStr, field_validator

PASSWORD_MIN_LENGTH = 3


class UserCreate(BaseModel):
    """Форма регистрации"""
    first_name: str
    last_name: str
    email: EmailStr
    password: str

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def not_blank(cls, value):
        if not isinstance(value, str) or not value.strip():
            raise ValueError("can't be blank")
        return value.strip()

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value):
        if not isinstance(value, str) or not value.strip():
            raise ValueError("can't be blank")
        return value.strip()

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        if len(value) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"must be at least {PASSWORD_MIN_LENGTH} characters")
        return value


class UserUpdate(BaseModel):
    """Форма редактирования: пустые поля оставляют текущие значения"""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None

    @field_validator("first_name", "last_name", "email", mode="before")
    @classmethod
    def blank_as_missing(cls, value):
        if isinstance(value, str):
            value = value.strip()
        return value or None

    @field_validator("password", mode="before")
    @classmethod
    def empty_password_as_missing(cls, value):
        return value or None

    @field_validator("password")
    @classmethod
    def password_length(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and len(value) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"must be at least {PASSWORD_MIN_LENGTH} characters")
        return value


class SessionCreate(BaseModel):
    """Форма входа"""
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def strip_email(cls, value: str) -> str:
        return value.strip()

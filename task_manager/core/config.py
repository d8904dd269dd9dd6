from pydantic_settings import BaseSettings
import os
from dotenv import load_dotenv
import secrets

load_dotenv()


class Settings(BaseSettings):
    # Database settings
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./data/app.sqlite3")
    RUN_MIGRATIONS: bool = os.getenv("RUN_MIGRATIONS", "True").lower() in ("true", "1", "t")

    # Application settings
    DEBUG: bool = os.getenv("DEBUG", "False").lower() in ("true", "1", "t")
    PROJECT_NAME: str = "Task Manager"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_DIR: str = os.getenv("LOG_DIR", "")

    # Session settings
    SECRET_KEY: str = os.getenv("SECRET_KEY", secrets.token_urlsafe(32))
    ALGORITHM: str = "HS256"
    SESSION_EXPIRE_MINUTES: int = int(os.getenv("SESSION_EXPIRE_MINUTES", str(60 * 24 * 7)))
    SESSION_COOKIE_NAME: str = "session"
    FLASH_COOKIE_NAME: str = "flash"

    # Error reporting
    ROLLBAR_ACCESS_TOKEN: str = os.getenv("ROLLBAR_ACCESS_TOKEN", "")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()

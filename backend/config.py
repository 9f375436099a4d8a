# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./faculty_portal.db"

    # Seconds to wait for a pooled connection before giving up
    DB_POOL_TIMEOUT: int = 30

    BCRYPT_ROUNDS: int = 12
    LOG_LEVEL: str = "INFO"
    FRONTEND_URL: Optional[str] = None

    # Bootstrap admin created by seed_db.py
    ADMIN_TEACHER_ID: str = "A001"
    ADMIN_NAME: str = "Administrator"
    ADMIN_PASSWORD: Optional[str] = None

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()

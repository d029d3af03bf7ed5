from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./feedback.db"
    PORT: int = 10000
    LOG_LEVEL: str = "INFO"

    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    # Cloudinary credentials. Text-only submissions work without them.
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None
    CLOUDINARY_BASE_URL: str = "https://api.cloudinary.com"
    UPLOAD_FOLDER: str = "ishow_feedback"
    UPLOAD_TIMEOUT: float = 30.0
    UPLOAD_MAX_CONNECTIONS: int = 10
    MAX_IMAGE_BYTES: int = 10 * 1024 * 1024

    # No password configured means every admin login is rejected.
    ADMIN_PASSWORD: Optional[str] = None

    # "null" is what browsers send for file:// pages.
    CORS_ALLOWED_ORIGINS: List[str] = [
        "null",
        "http://127.0.0.1:5500",
        "http://localhost:5500",
        "http://localhost",
        "https://ishow-feedback-frontend.vercel.app",
        "https://nicowillyx.github.io",
        "https://nicowillyx.github.io/ishow-feedback-frontend/",
    ]

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def upload_configured(self) -> bool:
        return bool(
            self.CLOUDINARY_CLOUD_NAME
            and self.CLOUDINARY_API_KEY
            and self.CLOUDINARY_API_SECRET
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()

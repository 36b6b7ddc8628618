# app/core/config.py
"""Configuration settings for the Repforge API."""
import os
from typing import List, Literal

from dotenv import load_dotenv

load_dotenv()

ExecutionStoreType = Literal["memory", "redis"]


class Settings:
    """Application settings, read once from the environment."""

    DATABASE_URL: str = ""
    LOG_LEVEL: str = "INFO"

    # Photo storage
    PHOTO_STORAGE_PATH: str = "photos"
    MAX_PHOTO_SIZE_MB: int = 5
    ALLOWED_PHOTO_TYPES: List[str] = ["image/jpeg", "image/png", "image/webp"]

    # Live workout executions
    EXECUTION_STORE: ExecutionStoreType = "memory"
    REDIS_URL: str = "redis://localhost:6379/0"
    EXECUTION_TTL_SECONDS: int = 6 * 60 * 60

    CORS_ORIGINS: List[str] = ["*"]

    def __init__(self):
        database_url = os.getenv("DATABASE_URL")
        if not database_url:
            raise RuntimeError(
                "Environment variable DATABASE_URL is not set. "
                "Please add a .env file with:\n"
                "    DATABASE_URL=postgresql://<your_user>@localhost:5432/repforge_db"
            )
        # Convert old-style "postgres://" URIs if necessary
        if database_url.startswith("postgres://"):
            database_url = database_url.replace("postgres://", "postgresql://", 1)
        self.DATABASE_URL = database_url

        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

        self.PHOTO_STORAGE_PATH = os.getenv(
            "PHOTO_STORAGE_PATH", os.path.join(os.getcwd(), "photos")
        )
        self.MAX_PHOTO_SIZE_MB = int(os.getenv("MAX_PHOTO_SIZE_MB", "5"))

        store = os.getenv("EXECUTION_STORE", "memory").lower()
        if store in ("memory", "redis"):
            self.EXECUTION_STORE = store  # type: ignore
        else:
            self.EXECUTION_STORE = "memory"
        self.REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
        self.EXECUTION_TTL_SECONDS = int(os.getenv("EXECUTION_TTL_SECONDS", str(6 * 60 * 60)))

        origins = os.getenv("CORS_ORIGINS", "*")
        self.CORS_ORIGINS = [o.strip() for o in origins.split(",") if o.strip()] or ["*"]

    @property
    def max_photo_size_bytes(self) -> int:
        return self.MAX_PHOTO_SIZE_MB * 1024 * 1024


settings = Settings()

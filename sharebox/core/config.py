# sharebox/core/config.py
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ALLOWED_EXTENSIONS = (
    "jpeg", "jpg", "png", "gif", "pdf", "doc", "docx", "txt", "zip", "rar",
    "7z", "mp4", "webm", "ogg", "mp3", "wav", "flac", "csv", "json", "xml",
    "pptx", "xlsx", "ppt", "xls",
)


class Settings(BaseSettings):
    database_url: str = "sqlite:///./sharebox.db"

    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60

    # "local" keeps bytes under storage_dir, "s3" uses the bucket below
    storage_backend: str = "local"
    storage_dir: str = "./storage"

    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_region: str | None = None
    aws_s3_bucket_name: str | None = None

    # seeded once at first boot
    admin_username: str = "admin"
    admin_email: str = "admin@example.com"
    admin_password: str = "adminpassword"

    max_upload_bytes: int = 50 * 1024 * 1024
    allowed_extensions: tuple[str, ...] = DEFAULT_ALLOWED_EXTENSIONS

    log_level: str = "INFO"

    # Tell pydantic-settings to load from .env at project root
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SHAREBOX_",
        extra="ignore",  # ignore any extra stuff in .env
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()

"""
Configuration settings for the YouTube auto-upload backend
"""
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # YouTube OAuth app credentials
    youtube_client_id: str = ""
    youtube_client_secret: str = ""
    youtube_redirect_uri: str = "http://localhost:8000/api/auth/callback"
    youtube_default_playlist_id: Optional[str] = None

    # Storage Paths
    upload_dir: str = "./uploads"
    tokens_path: str = "./.youtube-tokens.json"

    # Upload Limits
    max_video_size_mb: int = 2048
    max_thumbnail_size_mb: int = 2
    upload_chunk_size_mb: int = 8
    max_upload_retries: int = 3
    category_id: str = "24"  # Entertainment

    # Scheduling
    schedule_timezone: str = "Asia/Kolkata"
    schedule_hour: int = 18

    # Cleanup Settings
    cleanup_interval_minutes: int = 30
    file_ttl_hours: int = 2

    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    log_level: str = "INFO"

    @property
    def max_video_size_bytes(self) -> int:
        return self.max_video_size_mb * 1024 * 1024

    @property
    def max_thumbnail_size_bytes(self) -> int:
        return self.max_thumbnail_size_mb * 1024 * 1024

    @property
    def upload_chunk_size_bytes(self) -> int:
        return self.upload_chunk_size_mb * 1024 * 1024

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def ensure_directories(self):
        """Ensure the upload directory exists"""
        Path(self.upload_dir).mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()

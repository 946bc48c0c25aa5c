from pydantic_settings import BaseSettings
from typing import List, Optional
from pathlib import Path


class Settings(BaseSettings):
    # MongoDB
    mongodb_url: str = "mongodb://localhost:27017"
    database_name: str = "fuel_tracker_db"

    # JWT
    secret_key: str = "your-super-secret-key-change-this-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # CORS
    cors_origins: List[str] = ["*"]

    # Server
    debug: bool = True

    # Web Push (VAPID)
    vapid_public_key: Optional[str] = None
    vapid_private_key: Optional[str] = None
    vapid_claims_email: str = "mailto:admin@example.com"
    push_timeout_seconds: Optional[float] = None
    default_notification_icon: str = "/icon-192x192.png"

    # Reminder notifications
    urgency_threshold_km: int = 1000
    urgency_threshold_days: int = 15
    notification_cooldown_hours: float = 1
    cache_ttl_seconds: int = 600

    class Config:
        env_file = str(Path(__file__).parent.parent / ".env")
        env_file_encoding = 'utf-8'
        extra = 'ignore'  # Ignore extra fields from .env


settings = Settings()

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings

BACKEND_DIR = Path(__file__).resolve().parents[2]  # .../apps/backend


class Settings(BaseSettings):
    app_name: str = "Storefront Tracker"
    database_url: str = ""

    retention_days: int = 60
    sweep_interval_hours: int = 24

    summary_window: int = 500
    events_default_limit: int = 500
    events_max_limit: int = 2000
    export_default_days: int = 30

    storage_quota_bytes: int = 1024 * 1024 * 1024  # 1GB free plan
    max_body_bytes: int = 100 * 1024

    cors_origins: List[str] = ["*"]
    public_dir: Path = BACKEND_DIR / "public"

    log_level: str = "INFO"
    log_json: bool = False

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()

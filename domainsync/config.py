import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

_config_logger = logging.getLogger(__name__)

_PROJECT_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _PROJECT_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "NetServa Domain Sync"
    app_version: str = "0.1.0"
    app_env: str = "production"
    database_url: str = "sqlite:///data/domains.db"
    cors_origins: list[str] = ["http://localhost:8000"]

    # Synergy Wholesale registrar
    sw_api_url: str = "https://api.synergywholesale.com/api"
    sw_reseller_id: str = ""
    sw_api_key: str = ""
    sw_timeout_seconds: float = 30.0

    # Domains expiring within this many days are flagged in listings
    expiry_warning_days: int = 30

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine — SQL queries
    log_level_http: str = "WARNING"          # httpx / httpcore — outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_sync: str = "INFO"             # DomainSyncService pipeline
    log_level_registrar: str = "INFO"        # Registrar API client

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def registrar_configured(self) -> bool:
        return bool(self.sw_reseller_id.strip() and self.sw_api_key.strip())

    def model_post_init(self, __context: object) -> None:
        """Ensure the directory of a file-backed SQLite database exists."""
        if self.database_url.startswith("sqlite:///") and ":memory:" not in self.database_url:
            db_path = Path(self.database_url.removeprefix("sqlite:///"))
            try:
                db_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                _config_logger.warning("Could not create database directory %s: %s", db_path.parent, exc)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()

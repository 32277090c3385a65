"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


MIDTRANS_SANDBOX_URL = "https://app.sandbox.midtrans.com"
MIDTRANS_PRODUCTION_URL = "https://app.midtrans.com"


class Settings(BaseSettings):
    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "jobboard_user"
    postgres_password: str = "password"
    postgres_db: str = "jobboard_db"

    # Full SQLAlchemy URL, overrides the postgres_* fields when set
    database_url: Optional[str] = None

    # MongoDB (payment history log)
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "jobboard_docs"

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # Midtrans Snap
    midtrans_server_key: str = ""
    midtrans_client_key: str = ""
    midtrans_is_production: bool = False
    midtrans_timeout_seconds: float = 30.0
    midtrans_verify_signature: bool = False

    # Premium
    payment_expiry_hours: int = 1
    upgrade_url: str = "/premium/upgrade"

    # App
    debug: bool = True
    log_level: str = "INFO"

    @property
    def sqlalchemy_url(self) -> str:
        """Construct the database connection URL"""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def midtrans_base_url(self) -> str:
        return MIDTRANS_PRODUCTION_URL if self.midtrans_is_production else MIDTRANS_SANDBOX_URL

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()

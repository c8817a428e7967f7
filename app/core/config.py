from pathlib import Path
from typing import Any, Optional, Union

from pydantic import AliasChoices, Field, PostgresDsn, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TEMPLATES_PATH = Path(__file__).resolve().parents[1] / "data" / "character_templates.json"


class Settings(BaseSettings):
    PROJECT_NAME: str = "Saga CMS"
    VERSION: str = "0.4.0"
    LOG_LEVEL: str = "INFO"

    # Database (elevated tier, bypasses row-level security)
    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "changethis"
    POSTGRES_DB: str = "saga"
    POSTGRES_PORT: int = 5432
    SQLALCHEMY_DATABASE_URI: Optional[Union[PostgresDsn, str]] = Field(default=None, validate_default=True)

    # User-scoped tier; falls back to the admin URI when unset
    SQLALCHEMY_USER_DATABASE_URI: Optional[str] = None

    @field_validator("SQLALCHEMY_DATABASE_URI", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info) -> Any:
        if isinstance(v, str):
            return v
        data = info.data if hasattr(info, "data") else {}
        if not data.get("POSTGRES_SERVER"):
            return "sqlite+aiosqlite:///./data/saga.db"

        return f"postgresql+asyncpg://{data.get('POSTGRES_USER')}:{data.get('POSTGRES_PASSWORD')}@{data.get('POSTGRES_SERVER')}:{data.get('POSTGRES_PORT')}/{data.get('POSTGRES_DB') or ''}"

    # Identity provider
    AUTH_URL: str = "http://localhost:54321"
    AUTH_API_KEY: Optional[str] = None
    AUTH_TIMEOUT_SECONDS: float = 5.0

    # Beta program
    BETA_ENABLED: bool = Field(
        default=False,
        validation_alias=AliasChoices("BETA_ENABLED", "NEXT_PUBLIC_BETA_ENABLED"),
    )
    BETA_MAX_APPLICATIONS: int = 1000
    BETA_AUTO_APPROVE: bool = False

    # Content
    CHARACTER_TEMPLATES_PATH: str = str(DEFAULT_TEMPLATES_PATH)
    DEFAULT_BOOK_AUTHOR: str = "Anonymous"
    EASTER_EGGS_ENABLED: bool = True

    # App Settings
    AUTO_MIGRATE: bool = False
    ENABLE_LATENCY_LOGS: bool = Field(
        default=False,
        validation_alias=AliasChoices("ENABLE_LATENCY_LOGS", "LOG_LATENCY_ENABLED"),
    )

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def user_database_uri(self) -> str:
        return self.SQLALCHEMY_USER_DATABASE_URI or str(self.SQLALCHEMY_DATABASE_URI)


settings = Settings()

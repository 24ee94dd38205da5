from typing import List, Optional
from pydantic import Field
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    level: str = Field(default="INFO")
    json_format: bool = Field(default=False)
    format: str = Field(default="%(asctime)s - %(levelname)s - %(name)s - %(message)s")
    file_path: Optional[str] = Field(default=None)
    max_bytes: int = Field(default=10 * 1024 * 1024)
    backup_count: int = Field(default=5)

    model_config = SettingsConfigDict(env_prefix="LOG_", env_file=".env", extra="ignore")


class CelerySettings(BaseSettings):
    """Celery configuration settings."""

    broker_url: str = Field(default="redis://localhost:6379/0")
    result_backend: str = Field(default="redis://localhost:6379/1")
    task_serializer: str = Field(default="json")
    accept_content: List[str] = Field(default=["json"])
    result_serializer: str = Field(default="json")
    timezone: str = Field(default="UTC")
    enable_utc: bool = Field(default=True)
    task_always_eager: bool = Field(default=False)

    model_config = SettingsConfigDict(env_prefix="CELERY_", env_file=".env", extra="ignore")


class ValidationSettings(BaseSettings):
    """Record validation behaviour."""

    # Reject select values outside the declared options
    strict_select: bool = Field(default=False)
    # Reject text in email fields that does not look like an address
    strict_email: bool = Field(default=False)

    model_config = SettingsConfigDict(env_prefix="VALIDATION_", env_file=".env", extra="ignore")


class ImportSettings(BaseSettings):
    """Bulk import limits."""

    max_rows: int = Field(default=50000)
    # Rows sampled for type inference, 0 means every row
    sample_rows: int = Field(default=0)
    # Imports with more rows than this are dispatched to the worker
    background_threshold: int = Field(default=1000)
    # Natural key used for duplicate detection, empty means every field
    dedup_key_fields: List[str] = Field(default_factory=list)

    model_config = SettingsConfigDict(env_prefix="IMPORT_", env_file=".env", extra="ignore")


class ExportSettings(BaseSettings):
    """Export formatting settings."""

    date_format: str = Field(default="%d/%m/%Y, %H:%M:%S")
    currency_symbol: str = Field(default="$")
    created_at_label: str = Field(default="Fecha de Creación")
    true_label: str = Field(default="Sí")
    false_label: str = Field(default="No")

    model_config = SettingsConfigDict(env_prefix="EXPORT_", env_file=".env", extra="ignore")


class Settings(BaseSettings):
    project_name: str = Field(default="Dynamic Tables")
    version: str = Field(default="1.0.0")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    database_url: str = Field(default="sqlite:///./dyntables.db")
    database_echo: bool = Field(default=False)
    # memory | sql
    store_backend: str = Field(default="sql")

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    celery_settings: CelerySettings = Field(default_factory=CelerySettings)
    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    imports: ImportSettings = Field(default_factory=ImportSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)

    # Pagination
    default_page_size: int = Field(default=10)
    max_page_size: int = Field(default=100)

    # Window used by table statistics
    recent_days: int = Field(default=7)

    model_config = SettingsConfigDict(env_file=".env", extra="allow", env_file_encoding="utf-8")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_testing(self) -> bool:
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

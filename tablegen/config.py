"""Application settings loaded from .env file."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Source database (catalog + distinct-value probes)
    DB_DIALECT: str = "mysql"
    DB_HOST: str = "localhost"
    DB_PORT: Optional[int] = None  # dialect default (3306 / 5432) when unset
    DB_USER: str = "root"
    DB_PASSWORD: str = ""

    # Generated code
    OUTPUT_DIR: str = "."
    MODELS_PACKAGE: str = "models"
    FORMATTER_COMMAND: str = "black --quiet"
    WORKERS: int = 8

    # Connection used by generated modules at runtime; {database} is filled per call
    RUNTIME_DATABASE_URL: str = "mysql+pymysql://root:@localhost:3306/{database}"

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def formatter_argv(self) -> list[str]:
        return [p for p in self.FORMATTER_COMMAND.split() if p.strip()]


settings = Settings()

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="Licenseptium", alias="APP_NAME")
    database_url: str = Field(
        default="postgresql+psycopg://postgres@localhost:5432/licenseptium", alias="DATABASE_URL"
    )
    database_timeout_seconds: int = Field(default=30, alias="DATABASE_TIMEOUT_SECONDS")
    require_checksum: bool = Field(default=True, alias="REQUIRE_CHECKSUM")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


@lru_cache
def get_settings() -> Settings:
    return Settings()

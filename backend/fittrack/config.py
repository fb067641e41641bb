import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data"


class Settings(BaseSettings):
    openai_api_key: Optional[str] = Field(None, alias="OPENAI_API_KEY")
    exercise_model: str = Field("gpt-4o-mini", alias="FITTRACK_EXERCISE_MODEL")
    exercise_timeout: float = Field(20.0, alias="FITTRACK_EXERCISE_TIMEOUT")
    database_url: Optional[str] = Field(None, alias="FITTRACK_DATABASE_URL")
    database_pool_size: int = Field(5, alias="FITTRACK_DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(5, alias="FITTRACK_DATABASE_MAX_OVERFLOW")
    database_echo: bool = Field(False, alias="FITTRACK_DATABASE_ECHO")
    persistence_mode: Literal["database", "legacy", "hybrid"] = Field(
        "legacy",
        alias="FITTRACK_PERSISTENCE_MODE",
    )
    data_dir: Path = Field(DEFAULT_DATA_DIR, alias="FITTRACK_DATA_DIR")
    storage_namespace: str = Field("fitness", alias="FITTRACK_STORAGE_NAMESPACE")

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()  # type: ignore[arg-type]
    except ValidationError as exc:
        raise RuntimeError(f"Invalid backend configuration: {exc}") from exc

"""Process settings loaded from environment variables (AML_ prefix)."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="AML_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    data_dir: Path = Field(
        default=Path(__file__).parent.parent / "data",
        description="Directory holding sanctions_lists.json and aml_config.json",
    )
    log_level: str = Field(default="INFO", description="Root logging level")


settings = Settings()

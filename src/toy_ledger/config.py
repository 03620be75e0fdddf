from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Logging settings
    log_level: str = "WARNING"

    # What to do with a row that cannot be normalized: stop the run or drop the row
    malformed_record_policy: Literal["abort", "skip"] = "abort"

    # "strict" ignores every transaction addressed to a locked account
    locked_account_policy: Literal["permissive", "strict"] = "permissive"

    model_config = SettingsConfigDict(
        env_prefix="TOY_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

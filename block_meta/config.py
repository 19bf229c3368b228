import logging

from pydantic import validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Changelog
    TABLE_NAME: str = "block_meta"

    # Bucket tracking
    TRACK_END_BUCKETS: bool = False  # Also keep last-write-wins rows under day:last / month:last keys

    # Monitoring
    LOG_LEVEL: str = "INFO"

    # Error handling
    STOP_ON_ERROR: bool = True  # Re-raise on the first failing block instead of skipping it

    @validator("LOG_LEVEL")
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()

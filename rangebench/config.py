"""
Application Settings

Environment-driven defaults for the benchmark CLI, logging and the DynamoDB
connector. Values are read from ``RANGEBENCH_*`` environment variables or a
local ``.env`` file.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide settings for rangebench."""

    # Logging
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    LOG_FORMAT: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="logging.Formatter format string",
    )
    LOG_FILE: Optional[str] = Field(None, description="Optional log file path")

    # AWS / DynamoDB
    AWS_REGION: str = Field("us-west-2", description="Default AWS region")
    AWS_PROFILE: Optional[str] = Field(None, description="Named AWS profile")
    DYNAMODB_ENDPOINT_URL: Optional[str] = Field(
        None, description="Override endpoint (e.g. DynamoDB Local)"
    )
    DYNAMODB_CONNECT_TIMEOUT_SECONDS: float = Field(5.0, gt=0)
    DYNAMODB_READ_TIMEOUT_SECONDS: float = Field(30.0, gt=0)

    # Benchmark defaults (CLI flags override these)
    DEFAULT_NUM_QUERIES: int = Field(100, ge=0)
    DEFAULT_WARMUP_QUERIES: int = Field(10, ge=0)
    DEFAULT_QPS: float = Field(10.0, ge=0)
    DEFAULT_PARALLELISM: int = Field(1, ge=1)
    DEFAULT_POOL_SIZE: int = Field(10, ge=1)
    DEFAULT_PROGRESS_EVERY: int = Field(10, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="RANGEBENCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

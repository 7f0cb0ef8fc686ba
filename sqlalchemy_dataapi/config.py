"""
Configuration Management

Driver settings loaded from the environment (prefix ``DATAAPI_``) or a
``.env`` file using Pydantic Settings. AWS credentials are never read here;
they come from the boto3 session's default chain.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DataAPISettings(BaseSettings):
    """Driver settings."""

    model_config = SettingsConfigDict(
        env_prefix="DATAAPI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # boto3 session / client
    region_name: Optional[str] = Field(default=None, description="AWS region of the cluster")
    profile_name: Optional[str] = Field(default=None, description="Named AWS profile")
    endpoint_url: Optional[str] = Field(default=None, description="Override for local emulators")

    # Diagnostics
    log_statements: bool = Field(default=False, description="Log SQL text at DEBUG level")


@lru_cache()
def get_settings() -> DataAPISettings:
    """Return the process-wide settings, read once."""
    return DataAPISettings()

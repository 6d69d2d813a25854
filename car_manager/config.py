"""
Configuration module for the car manager service.

This module provides centralized configuration management using Pydantic settings.
All configuration values can be overridden via environment variables or .env file.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings for the car manager service.

    All settings can be configured via environment variables.
    Settings are validated on instantiation to ensure correct configuration.

    Attributes:
        APP_NAME: Title shown on the listing page
        SERVICE_NAME: Name used in logs and health responses
        DEBUG: Enable debug mode (shows API docs)
        HOST: Server bind address
        PORT: Server port number
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_JSON: Render logs as JSON instead of console lines
        STORAGE_BACKEND: "file" for durable JSON storage, "memory" for ephemeral
        STORAGE_PATH: Path of the JSON document holding the storage slots
        STORAGE_KEY: Name of the slot holding the car collection
        STORAGE_CORRUPT_POLICY: What to do when the stored collection is malformed
        SLOW_REQUEST_THRESHOLD_MS: Requests slower than this are logged as warnings
        ENABLE_TRACING: Enable OpenTelemetry tracing
        OTLP_ENDPOINT: OTLP collector endpoint used when tracing is enabled
    """

    # Application configuration
    APP_NAME: str = Field(
        default="Car Manager",
        description="Title shown on the listing page",
    )
    SERVICE_NAME: str = Field(default="car-manager")
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # Server configuration
    HOST: str = Field(
        default="127.0.0.1",
        description="Server bind address",
    )
    PORT: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Server port number",
    )

    # Logging configuration
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Render structured logs as JSON",
    )

    # Storage configuration
    STORAGE_BACKEND: Literal["file", "memory"] = Field(
        default="file",
        description="Key-value storage backend for the car collection",
    )
    STORAGE_PATH: str = Field(
        default="data/car_storage.json",
        description="Path of the JSON document holding the storage slots",
    )
    STORAGE_KEY: str = Field(
        default="carsList",
        description="Name of the storage slot holding the car collection",
    )
    STORAGE_CORRUPT_POLICY: Literal["reset", "fail"] = Field(
        default="reset",
        description="Start empty ('reset') or refuse to start ('fail') on malformed data",
    )

    SLOW_REQUEST_THRESHOLD_MS: float = Field(
        default=1000.0,
        gt=0,
        description="Threshold in milliseconds for slow request warnings",
    )

    # Tracing
    ENABLE_TRACING: bool = Field(default=False)
    OTLP_ENDPOINT: str = Field(default="localhost:4317")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("STORAGE_KEY")
    @classmethod
    def validate_storage_key(cls, value: str) -> str:
        """
        Validate that the storage slot name is usable.

        Args:
            value: The slot name to validate

        Returns:
            The slot name without surrounding whitespace

        Raises:
            ValueError: If the slot name is empty
        """
        value = value.strip()
        if not value:
            raise ValueError("Storage key cannot be empty")
        return value


# Global settings instance
settings = Settings()

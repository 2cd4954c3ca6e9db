#!/usr/bin/env python3
"""
Configuration Settings
Centralized configuration for the knowledge graph analytics engine.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


@dataclass
class AnalyticsConfig:
    """Analytics engine configuration."""
    max_workers: int = int(os.getenv("ANALYTICS_MAX_WORKERS", "4"))
    timeout_seconds: float = float(os.getenv("ANALYTICS_TIMEOUT_SECONDS", "30"))
    central_nodes_limit: int = int(os.getenv("ANALYTICS_CENTRAL_NODES", "10"))
    similar_documents_limit: int = int(os.getenv("ANALYTICS_SIMILAR_LIMIT", "5"))
    disconnect_poll_seconds: float = float(os.getenv("ANALYTICS_DISCONNECT_POLL", "0.25"))


@dataclass
class StoreConfig:
    """Record store configuration."""
    data_file: Optional[str] = os.getenv("KB_DATA_FILE", None)


@dataclass
class APIConfig:
    """API configuration."""
    host: str = os.getenv("API_HOST", "0.0.0.0")
    port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list = None

    def __post_init__(self):
        origins = os.getenv("CORS_ORIGINS", "*")
        self.cors_origins = origins.split(",") if origins else ["*"]


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = os.getenv(
        "LOG_FORMAT", "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )


class Settings:
    """Main settings container."""

    def __init__(self):
        self.analytics = AnalyticsConfig()
        self.store = StoreConfig()
        self.api = APIConfig()
        self.logging = LoggingConfig()

    @classmethod
    def from_env(cls, env_file: str = ".env") -> "Settings":
        """Load settings from environment file."""
        load_dotenv(env_file, override=True)
        instance = cls()
        # Dataclass defaults are bound at import time, so re-read them here
        instance.analytics = AnalyticsConfig(
            max_workers=int(os.getenv("ANALYTICS_MAX_WORKERS", "4")),
            timeout_seconds=float(os.getenv("ANALYTICS_TIMEOUT_SECONDS", "30")),
            central_nodes_limit=int(os.getenv("ANALYTICS_CENTRAL_NODES", "10")),
            similar_documents_limit=int(os.getenv("ANALYTICS_SIMILAR_LIMIT", "5")),
            disconnect_poll_seconds=float(os.getenv("ANALYTICS_DISCONNECT_POLL", "0.25")),
        )
        instance.store = StoreConfig(data_file=os.getenv("KB_DATA_FILE", None))
        instance.api = APIConfig(
            host=os.getenv("API_HOST", "0.0.0.0"),
            port=int(os.getenv("API_PORT", "8000"))
        )
        instance.logging = LoggingConfig(
            level=os.getenv("LOG_LEVEL", "INFO"),
            format=os.getenv("LOG_FORMAT", LoggingConfig.format),
        )
        return instance


def configure_logging(config: LoggingConfig = None) -> None:
    """Configure root logging for an entry point (API app, CLI)."""
    config = config or settings.logging
    logging.basicConfig(
        level=getattr(logging, config.level.upper(), logging.INFO),
        format=config.format
    )


settings = Settings()

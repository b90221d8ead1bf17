# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

# Report Data Service Configuration
"""
Configuration management for Report Data Service.
"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Report Data Service settings."""

    # Service settings
    service_name: str = "Report Data Service"
    service_version: str = "1.0.0"
    log_level: str = "INFO"

    # Upstream platform-integrations boundary (reached through the API gateway)
    api_gateway_url: str = "http://localhost:3000"
    auth_token: Optional[str] = None

    # Acquisition settings
    route_timeout: float = 30.0  # seconds, per route attempt
    parallel_routes: bool = False

    class Config:
        env_prefix = "REPORT_DATA_"
        env_file = ".env"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Apply the service logging format at the configured level."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

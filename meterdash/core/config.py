#!/usr/bin/env python3
"""
meterdash Configuration Management

Lookup order for the YAML file:
1. Explicit path
2. METERDASH_CONFIG environment variable
3. ./config.yaml
4. Defaults

The polling cadence can also be overridden with METER_POLL_INTERVAL.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from ..dashboard.config import TIME_RANGES

load_dotenv()

logger = logging.getLogger("meterdash.server")


class DashboardConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    # Metering API
    base_url: str = "https://emoncms.org"
    api_key: Optional[str] = None    # Falls back to METER_API_KEY
    request_timeout: float = 10.0
    # Session behavior
    poll_interval: float = Field(10.0, gt=0)
    default_range: str = "Day"
    align_window: bool = False       # Floor fetch time to bucket boundary

    @field_validator("default_range")
    @classmethod
    def check_default_range(cls, value: str) -> str:
        if value not in TIME_RANGES:
            raise ValueError(f"unknown time range '{value}', expected one of {list(TIME_RANGES)}")
        return value


def apply_env_overrides(cfg: DashboardConfig) -> DashboardConfig:
    """Apply METER_POLL_INTERVAL if set and valid."""
    env_interval = os.getenv("METER_POLL_INTERVAL")
    if not env_interval:
        return cfg
    try:
        interval = float(env_interval)
        if interval <= 0:
            raise ValueError(env_interval)
    except ValueError:
        logger.warning(f"invalid METER_POLL_INTERVAL '{env_interval}', using {cfg.poll_interval}s")
        return cfg
    logger.info(f"using poll interval from env: {interval}s")
    return cfg.model_copy(update={"poll_interval": interval})


def load_config_from(path: str) -> DashboardConfig:
    """Load dashboard configuration from YAML file."""
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    return apply_env_overrides(DashboardConfig(**data))


def load_config(config_path: Optional[str] = None) -> DashboardConfig:
    """Load configuration with simple fallbacks, see module docstring."""
    candidates = [config_path] if config_path else [os.environ.get("METERDASH_CONFIG"), "./config.yaml"]

    for candidate in candidates:
        if not candidate:
            continue
        if Path(candidate).exists():
            logger.info(f"Loading configuration from: {candidate}")
            return load_config_from(candidate)
        if config_path:
            raise FileNotFoundError(candidate)

    logger.info("Using default configuration")
    return apply_env_overrides(DashboardConfig())

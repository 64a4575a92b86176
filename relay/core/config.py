#!/usr/bin/env python3
"""
Relay Configuration Management

The relay serves the CSV export, accepts webhook calls and, optionally,
watches the CSV file on disk. Any trigger broadcasts the invalidation token.
"""

import logging
from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger("tiles.relay")


class RelayConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(4000, ge=1, le=65535)
    log_level: str = "INFO"
    # CSV served at GET /data and watched when watch_csv is on
    csv_path: str = "./data.csv"
    watch_csv: bool = False
    webhook_path: str = "/webhook"
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    def resolved_csv_path(self) -> Path:
        return Path(self.csv_path).expanduser().resolve()


def load_config_from(path: str) -> RelayConfig:
    """Load relay configuration from YAML file; a missing file means defaults."""
    config_file = Path(path)
    if not config_file.exists():
        logger.info(f"Config file not found: {config_file}, using defaults")
        return RelayConfig()

    with open(config_file, "r") as f:
        data = yaml.safe_load(f) or {}
    logger.info(f"Loading configuration from: {config_file}")
    return RelayConfig(**data)

import argparse
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml
from dotenv import load_dotenv

from .extractor import ExtractionSchema
from .fetcher import storage_public_url

logger = logging.getLogger("tiles.dashboard")


@dataclass
class DashboardConfig:
    """Dashboard consumer configuration with defaults"""
    csv_url: str = ""
    relay_url: str = ""
    fetch_timeout: float = 10.0
    cache_bust: bool = True
    reconnect_delay: float = 10.0
    log_level: str = "INFO"
    once: bool = False
    schema: Dict[str, Any] = None

    def __post_init__(self):
        if self.schema is None:
            self.schema = {}

        # Environment fills whatever the YAML left unset
        if not self.csv_url:
            self.csv_url = os.getenv("TILES_CSV_URL") or self._storage_url_from_env()
        if not self.relay_url:
            self.relay_url = os.getenv("TILES_RELAY_URL", "ws://localhost:4000/ws")

    @staticmethod
    def _storage_url_from_env() -> str:
        base = os.getenv("TILES_STORAGE_URL")
        if not base:
            return "http://localhost:4000/data"
        bucket = os.getenv("TILES_STORAGE_BUCKET", "csv-bucket")
        name = os.getenv("TILES_STORAGE_OBJECT", "data.csv")
        return storage_public_url(base, bucket, name)

    def extraction_schema(self) -> ExtractionSchema:
        return ExtractionSchema(**self.schema)

    @classmethod
    def from_file(cls, config_path: Path) -> "DashboardConfig":
        """Load configuration from YAML file"""
        load_dotenv()
        if not config_path.exists():
            logger.debug(f"Config file not found: {config_path}, using defaults")
            return cls()

        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}, using defaults")
            return cls()

        known_fields = set(cls.__dataclass_fields__)
        unknown = set(data) - known_fields
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
        logger.debug(f"Loaded config from {config_path}: {data}")
        return cls(**{k: v for k, v in data.items() if k in known_fields})

    def override_with_args(self, args: argparse.Namespace) -> "DashboardConfig":
        """Override config with command line arguments if provided"""
        self.csv_url = args.csv_url if args.csv_url is not None else self.csv_url
        self.relay_url = args.relay_url if args.relay_url is not None else self.relay_url
        self.log_level = args.log_level if args.log_level is not None else self.log_level
        self.once = args.once
        return self

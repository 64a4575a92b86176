#!/usr/bin/env python3
"""
interactive-tiles dashboard consumer

Flow:
- Fetch the CSV export once on start-up and extract the signal table and
  time series (a consumer connecting after a broadcast relies on this fetch)
- Connect to the relay WebSocket; every "csv_updated" token re-runs
  fetch -> extract and replaces the dataset as a whole
- With --once, print the extracted dataset as JSON and exit
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from .config import DashboardConfig
from .controller import RefreshController
from .fetcher import CsvFetcher
from .listener import listen_for_updates

logger = logging.getLogger("tiles.dashboard")


def resolve_log_level(name: str) -> int:
    """Map a config level name (any case) to a logging level, INFO if unknown."""
    level = getattr(logging, str(name).upper(), logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def build_controller(config: DashboardConfig) -> RefreshController:
    fetcher = CsvFetcher(config.csv_url, timeout=config.fetch_timeout, cache_bust=config.cache_bust)
    return RefreshController(fetcher, config.extraction_schema())


async def run_dashboard(config: DashboardConfig) -> int:
    """Main consumer orchestration. Returns the process exit code."""
    controller = build_controller(config)
    logger.info(f"fetching CSV from {config.csv_url}")
    await controller.refresh()

    if config.once:
        if controller.error is not None:
            logger.error(f"Error: {controller.error_message}")
            return 1
        print(json.dumps(controller.dataset.to_dict(), indent=2))
        return 0

    try:
        await listen_for_updates(config.relay_url, controller, config.reconnect_delay)
    finally:
        controller.close()
    return 0


def main():
    parser = argparse.ArgumentParser(description="interactive-tiles dashboard consumer")
    parser.add_argument("--config", "-c", type=Path, default=Path("dashboard.yaml"),
                        help="YAML configuration file (default: dashboard.yaml)")
    parser.add_argument("--csv-url", dest="csv_url",
                        help="URL of the CSV export (relay /data or object storage)")
    parser.add_argument("--relay-url", dest="relay_url",
                        help="relay WebSocket URL (e.g., ws://localhost:4000/ws)")
    parser.add_argument("--once", action="store_true",
                        help="fetch and extract once, print JSON and exit")
    parser.add_argument("--log-level", dest="log_level",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="logging level")
    args = parser.parse_args()

    # Load config: YAML first, then CLI overrides
    config = DashboardConfig.from_file(args.config).override_with_args(args)

    logging.basicConfig(level=resolve_log_level(config.log_level))
    logger.info(f"dashboard starting: csv={config.csv_url}, relay={config.relay_url}")

    try:
        sys.exit(asyncio.run(run_dashboard(config)))
    except KeyboardInterrupt:
        print("\nInterrupted. Bye!")


if __name__ == "__main__":
    main()

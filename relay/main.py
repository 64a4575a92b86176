#!/usr/bin/env python3
"""
interactive-tiles relay

Serves the CSV export, accepts repository push webhooks, optionally watches
the CSV on disk, and pushes "csv_updated" to every connected dashboard.
"""

import argparse
import logging

import uvicorn

from .core.config import load_config_from
from .core.server import create_app


def main():
    """Main entry point for the relay."""
    parser = argparse.ArgumentParser(description="interactive-tiles relay")
    parser.add_argument("-c", "--config", help="Path to YAML config", default="relay.yaml")
    args = parser.parse_args()

    config = load_config_from(args.config)
    logging.basicConfig(level=getattr(logging, config.log_level.upper(), logging.INFO))

    app = create_app(config)

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        reload=False,
        access_log=False,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()

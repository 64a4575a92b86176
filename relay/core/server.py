#!/usr/bin/env python3
"""
Relay application factory

Wires the broadcaster into the webhook, WebSocket and data routes and runs
the optional file watcher for the lifetime of the app.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import RelayConfig
from ..api.routes.data_routes import create_data_routes
from ..api.routes.notify_routes import create_notify_routes
from ..api.routes.webhook_routes import create_webhook_routes
from ..notifier import Broadcaster
from ..watcher import CsvFileWatcher

logger = logging.getLogger("tiles.relay")


def create_app(config: RelayConfig) -> FastAPI:
    """Create the relay FastAPI app for the given configuration."""
    broadcaster = Broadcaster()
    csv_path = config.resolved_csv_path()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        watcher = None
        if config.watch_csv:
            watcher = CsvFileWatcher(csv_path, broadcaster, asyncio.get_running_loop())
            watcher.start()
        app.state.watcher = watcher
        try:
            yield
        finally:
            if watcher:
                watcher.stop()

    app = FastAPI(title="interactive-tiles relay", lifespan=lifespan)
    app.state.broadcaster = broadcaster
    app.state.watcher = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_webhook_routes(broadcaster, config.webhook_path))
    app.include_router(create_notify_routes(broadcaster))
    app.include_router(create_data_routes(csv_path))

    logger.info(f"relay configured: csv={csv_path}, watch_csv={config.watch_csv}")
    return app

#!/usr/bin/env python3
"""
Update listener for the dashboard consumer.

Keeps a WebSocket connection to the relay and turns every invalidation token
into a refresh of the consumer's dataset.
"""

import asyncio
import logging

import websockets

from .controller import RefreshController

logger = logging.getLogger("tiles.dashboard")

UPDATE_TOKEN = "csv_updated"

# Strong references to scheduled refreshes until they finish
_refresh_tasks = set()


async def handle_message(message, controller: RefreshController) -> bool:
    """
    React to one relay message.

    Returns:
        True if the message was the invalidation token and a refresh was scheduled
    """
    if message != UPDATE_TOKEN:
        logger.debug(f"ignoring relay message: {message!r}")
        return False

    logger.info("CSV updated, refetching...")
    # Keep receiving while the cycle runs; overlapping triggers are dropped by the controller
    task = asyncio.create_task(controller.refresh())
    _refresh_tasks.add(task)
    task.add_done_callback(_refresh_tasks.discard)
    return True


async def listen_for_updates(relay_url: str, controller: RefreshController, reconnect_delay: float = 10.0):
    """Connect to the relay and dispatch tokens until cancelled."""
    logger.info(f"Connecting to relay: {relay_url}")
    connected_before = False

    while True:
        try:
            async with websockets.connect(relay_url) as websocket:
                logger.info("WebSocket connected")
                if connected_before:
                    # Broadcasts sent while disconnected are not replayed
                    await handle_message(UPDATE_TOKEN, controller)
                connected_before = True
                async for message in websocket:
                    await handle_message(message, controller)
            logger.warning("WebSocket connection closed by relay")
        except asyncio.CancelledError:
            raise
        except (OSError, asyncio.TimeoutError, websockets.exceptions.WebSocketException) as e:
            logger.error(f"WebSocket connection failed: {e}")

        logger.info(f"Reconnecting in {reconnect_delay:g} seconds...")
        await asyncio.sleep(reconnect_delay)

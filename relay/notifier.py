#!/usr/bin/env python3
"""
Broadcaster - fan-out of the invalidation token to connected consumers.

Delivery is at-most-once and best-effort: no acknowledgment, no backlog.
A consumer connecting after a broadcast never sees it and relies on its own
initial fetch.
"""

import logging
from typing import Set

from fastapi import WebSocket
from starlette.websockets import WebSocketState

logger = logging.getLogger("tiles.relay")

UPDATE_TOKEN = "csv_updated"


class Broadcaster:
    """Owns the set of connected consumer WebSockets."""

    def __init__(self):
        self._clients: Set[WebSocket] = set()
        self.broadcast_count = 0
        self.delivered_count = 0

    @property
    def connection_count(self) -> int:
        return len(self._clients)

    async def connect(self, websocket: WebSocket) -> None:
        # Registered before accept; broadcast skips it until the handshake completes
        self._clients.add(websocket)
        try:
            await websocket.accept()
        except Exception:
            self._clients.discard(websocket)
            raise
        logger.info(f"consumer connected, active connections: {self.connection_count}")

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self._clients:
            self._clients.discard(websocket)
            logger.info(f"consumer disconnected, active connections: {self.connection_count}")

    async def broadcast(self, message: str = UPDATE_TOKEN) -> int:
        """
        Send message to every connected consumer.

        Clients that are gone or fail mid-send are dropped; the rest still
        receive the message. Clients still in the handshake are skipped but
        stay registered.

        Returns:
            Number of consumers the message was delivered to
        """
        self.broadcast_count += 1
        delivered = 0

        for websocket in list(self._clients):
            states = (websocket.client_state, websocket.application_state)
            if WebSocketState.DISCONNECTED in states:
                self.disconnect(websocket)
                continue
            if WebSocketState.CONNECTING in states:
                continue
            try:
                await websocket.send_text(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"dropping consumer after failed send: {e}")
                self.disconnect(websocket)

        self.delivered_count += delivered
        logger.info(f"broadcast {message!r} to {delivered} consumer(s)")
        return delivered

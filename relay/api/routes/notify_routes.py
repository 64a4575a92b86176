#!/usr/bin/env python3
"""
Notification Routes - consumer WebSocket endpoint and relay status
"""

import logging

from fastapi import APIRouter, Request, WebSocket

from ...notifier import Broadcaster

logger = logging.getLogger("tiles.relay")


def create_notify_routes(broadcaster: Broadcaster) -> APIRouter:
    """Create the consumer WebSocket routes and status endpoints."""
    router = APIRouter()

    @router.websocket("/")
    @router.websocket("/ws")
    async def consumer_websocket(websocket: WebSocket):
        """Consumers only listen; whatever they send is ignored."""
        await broadcaster.connect(websocket)
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
        except Exception as e:
            logger.error(f"consumer WebSocket error: {e}")
        finally:
            broadcaster.disconnect(websocket)

    @router.get("/health")
    def health(request: Request):
        watcher = getattr(request.app.state, "watcher", None)
        return {
            "status": "ok",
            "connections": broadcaster.connection_count,
            "watching": bool(watcher and watcher.running),
        }

    @router.get("/api/notifier/status")
    def notifier_status():
        return {
            "type": "websocket",
            "active_connections": broadcaster.connection_count,
            "broadcasts": broadcaster.broadcast_count,
            "delivered": broadcaster.delivered_count,
        }

    return router

#!/usr/bin/env python3
"""
Webhook Routes - repository push trigger

Any POST broadcasts the invalidation token and answers 200; the payload is
only parsed for logging.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from ..schemas import PushEvent
from ...core.audit import audit_logger
from ...notifier import Broadcaster

logger = logging.getLogger("tiles.relay")


async def read_push_event(request: Request) -> PushEvent:
    """Parse the push payload leniently; anything unreadable yields an empty event."""
    try:
        body = await request.json()
    except ValueError:
        logger.warning("webhook body is not valid JSON")
        return PushEvent()

    try:
        return PushEvent.model_validate(body)
    except ValidationError as e:
        logger.warning(f"webhook body is not a push event: {e.error_count()} validation error(s)")
        return PushEvent()


def create_webhook_routes(broadcaster: Broadcaster, webhook_path: str = "/webhook") -> APIRouter:
    """Create the webhook trigger route."""
    router = APIRouter()

    @router.post(webhook_path)
    async def webhook(request: Request):
        """Repository push hook: notify every connected consumer."""
        event = await read_push_event(request)
        logger.info(f"Push to {event.repository_name}: {event.commit_message}")

        delivered = await broadcaster.broadcast()

        audit_logger.webhook_received(
            repository=event.repository_name,
            commit_message=event.commit_message,
            delivered=delivered,
            request=request
        )
        return PlainTextResponse("OK", status_code=200)

    return router

#!/usr/bin/env python3
"""
Trigger Audit Logger

Structured logging of every trigger that causes a broadcast. The webhook is
unauthenticated, so this log is the only record of who asked for a refresh.
"""

import json
import logging
import time
from typing import Any, Dict, Optional

from fastapi import Request


class AuditLogger:
    """Centralized audit logging for relay triggers."""

    def __init__(self):
        self.logger = logging.getLogger("tiles.audit")

    def _log_event(self, event_type: str, details: Dict[str, Any], request: Optional[Request] = None):
        """Log a structured audit event."""
        audit_record = {
            "timestamp": int(time.time()),
            "event_type": event_type,
            "details": details
        }

        if request:
            audit_record.update({
                "client_ip": request.client.host if request.client else "unknown",
                "user_agent": request.headers.get("user-agent", "unknown"),
                "method": request.method,
                "url": str(request.url)
            })

        self.logger.info(json.dumps(audit_record))

    def webhook_received(self, repository: Optional[str], commit_message: Optional[str],
                         delivered: int, request: Optional[Request] = None):
        self._log_event(
            event_type="webhook",
            details={
                "repository": repository,
                "commit_message": commit_message,
                "delivered": delivered
            },
            request=request
        )

    def file_changed(self, path: str, event: str, delivered: int):
        self._log_event(
            event_type="file_watch",
            details={"path": path, "event": event, "delivered": delivered}
        )


# Global audit logger instance
audit_logger = AuditLogger()

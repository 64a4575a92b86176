"""
interactive-tiles relay

Push-on-webhook notification service for dashboard consumers.
"""

from .core.server import create_app
from .notifier import Broadcaster, UPDATE_TOKEN

__all__ = ["create_app", "Broadcaster", "UPDATE_TOKEN"]

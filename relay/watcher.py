#!/usr/bin/env python3
"""
CSV file watcher - broadcast trigger for file-watch mode.

Watchdog delivers events on its observer thread; they are handed to the
relay's event loop, where the broadcast runs.
"""

import asyncio
import concurrent.futures
import logging
import os
import time
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .core.audit import audit_logger
from .notifier import Broadcaster

logger = logging.getLogger("tiles.relay")


class CsvChangeHandler(FileSystemEventHandler):
    """Calls on_change(event_type) for events that touch the watched file."""

    def __init__(self, csv_path: Path, on_change: Callable[[str], None], debounce_seconds: float = 0.5):
        super().__init__()
        self.csv_path = Path(os.path.abspath(csv_path))
        self.on_change = on_change
        self.debounce_seconds = debounce_seconds
        self._last_fired: Optional[float] = None

    def _matches(self, path) -> bool:
        if not path:
            return False
        return Path(os.path.abspath(os.fsdecode(path))) == self.csv_path

    def _fire(self, event_type: str) -> None:
        now = time.monotonic()
        # One save often produces several events
        if self._last_fired is not None and now - self._last_fired < self.debounce_seconds:
            return
        self._last_fired = now
        self.on_change(event_type)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._fire("modified")

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._fire("created")

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors and uploaders often write a temp file and rename it over the target
        if not event.is_directory and self._matches(event.dest_path):
            self._fire("moved")


class CsvFileWatcher:
    """Watches the CSV path and broadcasts the invalidation token on change."""

    def __init__(self, csv_path: Path, broadcaster: Broadcaster, loop: asyncio.AbstractEventLoop):
        self.csv_path = Path(csv_path)
        self.broadcaster = broadcaster
        self.loop = loop
        self.handler = CsvChangeHandler(self.csv_path, self._schedule_broadcast)
        self._observer: Optional[Observer] = None

    @property
    def running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def start(self) -> None:
        watch_dir = self.csv_path.parent
        if not watch_dir.is_dir():
            raise FileNotFoundError(f"cannot watch {self.csv_path}: {watch_dir} is not a directory")

        self._observer = Observer()
        self._observer.schedule(self.handler, str(watch_dir), recursive=False)
        self._observer.daemon = True
        self._observer.start()
        logger.info(f"watching {self.csv_path} for changes")

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        logger.info("file watcher stopped")

    def _schedule_broadcast(self, event_type: str) -> concurrent.futures.Future:
        # Runs on the observer thread
        return asyncio.run_coroutine_threadsafe(self._notify(event_type), self.loop)

    async def _notify(self, event_type: str) -> int:
        logger.info(f"CSV file {event_type}: {self.csv_path}")
        delivered = await self.broadcaster.broadcast()
        audit_logger.file_changed(str(self.csv_path), event_type, delivered)
        return delivered

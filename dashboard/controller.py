"""
Refresh Controller

Holds one consumer's derived dataset and runs fetch -> decode -> extract
cycles for it. At most one cycle is in flight; a trigger arriving meanwhile
is dropped rather than queued.
"""

import logging
from typing import Any, Dict, Optional

from .decoder import decode_csv
from .errors import DashboardError
from .extractor import Dataset, DatasetExtractor, ExtractionSchema

logger = logging.getLogger("tiles.dashboard")


class RefreshController:
    """Single-slot supervisor for a consumer's fetch/extract cycles."""

    def __init__(self, fetcher, schema: Optional[ExtractionSchema] = None):
        self.fetcher = fetcher
        self.extractor = DatasetExtractor(schema)
        self.dataset: Optional[Dataset] = None
        self.error: Optional[Exception] = None
        self.generation = 0
        self.refresh_count = 0
        self.dropped_count = 0
        self._in_flight = False
        self._closed = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def loading(self) -> bool:
        return self.dataset is None and self.error is None

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        if isinstance(self.error, DashboardError):
            return self.error.user_message
        return "Failed to load data"

    def close(self) -> None:
        """Tear down; results of a cycle still running are discarded."""
        self._closed = True

    def invalidate(self) -> None:
        """Make any cycle currently in flight stale."""
        self.generation += 1

    async def refresh(self) -> bool:
        """
        Run one fetch/extract cycle.

        Returns:
            True if a cycle ran, False if it was dropped because another one
            was in flight or the controller is closed
        """
        if self._closed:
            return False
        if self._in_flight:
            self.dropped_count += 1
            logger.debug("refresh already in flight, dropping trigger")
            return False

        self._in_flight = True
        self.generation += 1
        generation = self.generation
        try:
            text = await self.fetcher.fetch()
            schema = self.extractor.schema
            dataset = self.extractor.extract(decode_csv(text, delimiter=schema.delimiter))
        except DashboardError as e:
            if self._is_current(generation):
                self.error = e
                logger.error(f"refresh failed: {e.detail}")
        except Exception as e:
            if self._is_current(generation):
                self.error = e
                logger.exception(f"unexpected error during refresh: {e}")
        else:
            if self._is_current(generation):
                self.dataset = dataset
                self.error = None
                self.refresh_count += 1
                logger.info(
                    f"dataset refreshed: {len(dataset.signals)} signals, "
                    f"{len(dataset.series)} series points"
                )
            else:
                logger.debug(f"discarding stale refresh result (generation {generation})")
        finally:
            self._in_flight = False
        return True

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self.generation

    def state(self) -> Dict[str, Any]:
        """Snapshot for rendering: loading flag, error message and both views."""
        data = self.dataset.to_dict() if self.dataset else {"signals": [], "series": []}
        return {
            "loading": self.loading,
            "error": self.error_message,
            **data,
        }

"""
interactive-tiles dashboard consumer

Turns the energy-loss CSV export into a per-signal wasted-energy table and a
time series, and keeps them current from relay notifications.
"""

from .controller import RefreshController
from .extractor import Dataset, DatasetExtractor, ExtractionSchema, SignalAggregate, extract_dataset
from .normalizer import normalize_cell

__all__ = [
    "RefreshController",
    "Dataset",
    "DatasetExtractor",
    "ExtractionSchema",
    "SignalAggregate",
    "extract_dataset",
    "normalize_cell",
]

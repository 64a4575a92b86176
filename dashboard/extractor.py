"""
Dataset extraction - per-signal wasted energy and the time series view.

The export has no structural markers for its summary block, so where the
signal letters and wasted-energy values live is described by an explicit
ExtractionSchema instead of row numbers scattered through the code.

Two strategies are supported:

- ``parsed_row``: read the parsed row at ``signal_row_index`` and take every
  ``Signal <letter>`` column from it (default).
- ``raw_lines``: read the letter line and the value line straight from the
  raw text and pair them column by column.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from .decoder import DecodedCsv, RawRow, decode_csv
from .errors import EmptyDatasetError, InsufficientRowsError
from .normalizer import NormalizedRow, normalize_cell, normalize_row, to_number

logger = logging.getLogger("tiles.dashboard")

SIGNAL_LETTERS = "ABCDEFGHIJKLMNOPQRS"


class ExtractionSchema(BaseModel):
    """Where the summary block lives in the export and how to read it."""
    strategy: Literal["parsed_row", "raw_lines"] = "parsed_row"
    # parsed_row: 0-based index among data rows (header excluded, blank lines skipped)
    signal_row_index: int = Field(62, ge=0)
    # raw_lines: 0-based line numbers in the raw text (header is line 0)
    signal_label_line: int = Field(60, ge=0)
    signal_value_line: int = Field(62, ge=0)
    skip_leading_columns: int = Field(1, ge=0)
    skip_trailing_columns: int = Field(2, ge=0)

    time_column: str = "Discrete Time"
    signal_prefix: str = "Signal "
    signal_letters: str = SIGNAL_LETTERS
    delimiter: str = Field(";", min_length=1)

    @field_validator("signal_letters")
    @classmethod
    def check_letters(cls, value: str) -> str:
        if not value or not all(ch.isalpha() and ch.isupper() for ch in value):
            raise ValueError("signal_letters must be non-empty uppercase letters")
        return value

    @model_validator(mode="after")
    def check_line_order(self) -> "ExtractionSchema":
        if self.signal_value_line <= self.signal_label_line:
            raise ValueError("signal_value_line must come after signal_label_line")
        return self


@dataclass(frozen=True)
class SignalAggregate:
    """Wasted energy of one signal channel."""
    signal: str
    wasted_energy: float

    def to_dict(self) -> Dict[str, Any]:
        return {"signal": self.signal, "wastedEnergy": self.wasted_energy}


@dataclass(frozen=True)
class Dataset:
    """Both derived views; replaced as a whole on every refresh."""
    signals: List[SignalAggregate] = field(default_factory=list)
    series: List[NormalizedRow] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "signals": [s.to_dict() for s in self.signals],
            "series": [dict(point) for point in self.series],
        }


class DatasetExtractor:
    """Builds a Dataset from decoded CSV according to an ExtractionSchema."""

    def __init__(self, schema: ExtractionSchema = None):
        self.schema = schema or ExtractionSchema()

    def extract(self, decoded: DecodedCsv) -> Dataset:
        """
        Extract both derived views.

        Raises:
            EmptyDatasetError: If there are no data rows
            InsufficientRowsError: If the summary block lies beyond the data
        """
        if not decoded.rows:
            raise EmptyDatasetError("CSV has a header but no data rows")

        if self.schema.strategy == "raw_lines":
            signals = self.extract_signals_from_lines(decoded.lines)
        else:
            signals = self.extract_signals_from_rows(decoded.rows)

        series = self.extract_series(decoded.rows, decoded.headers)
        logger.debug(f"extracted {len(signals)} signals, {len(series)} series points")
        return Dataset(signals=signals, series=series)

    def is_signal_column(self, header: str) -> bool:
        """True for ``Signal <letter>`` headers with a single allowed letter."""
        prefix = self.schema.signal_prefix
        if not header.startswith(prefix):
            return False
        return self._is_signal_letter(header[len(prefix):])

    def extract_signals_from_rows(self, rows: List[RawRow]) -> List[SignalAggregate]:
        index = self.schema.signal_row_index
        if len(rows) <= index:
            raise InsufficientRowsError(required=index + 1, actual=len(rows))

        summary = rows[index]
        prefix_len = len(self.schema.signal_prefix)
        return [
            SignalAggregate(header[prefix_len:], to_number(normalize_cell(value)))
            for header, value in summary.items()
            if self.is_signal_column(header)
        ]

    def extract_signals_from_lines(self, lines: List[str]) -> List[SignalAggregate]:
        label_line = self.schema.signal_label_line
        value_line = self.schema.signal_value_line
        if len(lines) <= value_line:
            raise InsufficientRowsError(required=value_line + 1, actual=len(lines), unit="lines")

        delimiter = self.schema.delimiter
        labels = lines[label_line].split(delimiter)
        values = lines[value_line].split(delimiter)

        signals = []
        end = len(labels) - self.schema.skip_trailing_columns
        for i in range(self.schema.skip_leading_columns, end):
            letter = labels[i].strip()
            if not self._is_signal_letter(letter) or i >= len(values) or not values[i].strip():
                continue
            signals.append(SignalAggregate(letter, to_number(normalize_cell(values[i]))))
        return signals

    def extract_series(self, rows: List[RawRow], headers: List[str]) -> List[NormalizedRow]:
        """Rows with a non-blank time cell, every cell normalized."""
        time_column = self.schema.time_column
        return [
            normalize_row(row, headers)
            for row in rows
            if (row.get(time_column) or "").strip()
        ]

    def _is_signal_letter(self, suffix: str) -> bool:
        return len(suffix) == 1 and suffix in self.schema.signal_letters


def extract_dataset(text: str, schema: ExtractionSchema = None) -> Dataset:
    """Decode CSV text and extract the Dataset in one step."""
    extractor = DatasetExtractor(schema)
    return extractor.extract(decode_csv(text, delimiter=extractor.schema.delimiter))

"""
CSV decoding for the energy-loss export.

Produces header-trimmed raw rows (blank lines skipped) together with the raw
line list, which the raw-lines extraction strategy reads by line number.
"""

import io
import logging
import warnings
from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd

from .errors import CsvDecodeError, EmptyDatasetError
from .normalizer import normalize_header

logger = logging.getLogger("tiles.dashboard")

RawRow = Dict[str, str]


@dataclass
class DecodedCsv:
    """Decoded CSV: trimmed headers, one RawRow per data line, raw text lines."""
    headers: List[str]
    rows: List[RawRow] = field(default_factory=list)
    lines: List[str] = field(default_factory=list)


def decode_csv(text: str, delimiter: str = ";") -> DecodedCsv:
    """
    Decode CSV text into raw rows.

    Args:
        text: Full CSV text, header row first
        delimiter: Field delimiter

    Returns:
        DecodedCsv with every cell kept as a string ("" for missing cells)

    Raises:
        EmptyDatasetError: If the text has no header row at all
        CsvDecodeError: If the delimiter/quoting structure cannot be parsed,
            a row has more fields than the header, or a header repeats
    """
    text = text.lstrip("\ufeff")
    if not text.strip():
        raise EmptyDatasetError("CSV source is empty")

    options = dict(sep=delimiter, dtype=str, keep_default_na=False, skip_blank_lines=True)
    # pandas only warns when a row is wider than the header and drops the extra fields
    with warnings.catch_warnings():
        warnings.simplefilter("error", pd.errors.ParserWarning)
        try:
            header_row = pd.read_csv(io.StringIO(text), header=None, nrows=1, **options)
            frame = pd.read_csv(io.StringIO(text), index_col=False, **options)
        except pd.errors.EmptyDataError as e:
            raise EmptyDatasetError(f"CSV source has no columns: {e}")
        except (pd.errors.ParserError, pd.errors.ParserWarning, ValueError) as e:
            raise CsvDecodeError(f"malformed CSV: {e}")

    # Checked on the raw header row, pandas renames repeats to "name.1"
    names = [normalize_header(str(name)) for name in header_row.iloc[0]]
    duplicates = sorted({name for name in names if name and names.count(name) > 1})
    if duplicates:
        raise CsvDecodeError(f"duplicate column headers: {', '.join(duplicates)}")

    frame = frame.rename(columns=lambda name: normalize_header(str(name)))
    frame = frame.fillna("")

    headers = list(frame.columns)
    rows = frame.to_dict(orient="records")
    logger.debug(f"decoded CSV: {len(headers)} columns, {len(rows)} rows")

    return DecodedCsv(headers=headers, rows=rows, lines=text.splitlines())

"""
Cell normalization for semicolon-delimited exports with decimal commas.

Every function here is pure and total: any input maps to some output and
nothing raises.
"""

import math
import re
from typing import Dict, Iterable, Optional, Union

CellValue = Union[float, str]
NormalizedRow = Dict[str, CellValue]

# Plain decimal literal, optionally signed, optional exponent.
_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def normalize_cell(raw: Optional[str]) -> CellValue:
    """
    Convert a raw CSV cell into a float or, when not numeric, its trimmed text.

    Blank cells (None, empty, whitespace) become 0.0. The first comma is
    treated as the decimal separator, so "1,5" -> 1.5.
    """
    if raw is None or not raw.strip():
        return 0.0

    text = raw.replace(",", ".", 1).strip()
    if _NUMBER_RE.match(text):
        value = float(text)
        if math.isfinite(value):
            return value
    return text


def normalize_header(raw: str) -> str:
    """Header names are trimmed before being used as row keys."""
    return raw.strip()


def normalize_row(raw_row: Dict[str, Optional[str]], headers: Iterable[str]) -> NormalizedRow:
    """Normalize every header column of a row; missing cells count as blank."""
    return {header: normalize_cell(raw_row.get(header)) for header in headers}


def to_number(value: CellValue) -> float:
    """Coerce a normalized value to float, non-numeric text becoming 0.0."""
    if isinstance(value, str):
        return 0.0
    return float(value)

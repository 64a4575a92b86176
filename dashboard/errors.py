"""Error types raised by the CSV-to-chart pipeline.

All of them are caught at the consumer boundary (RefreshController) and
turned into a displayable error state.
"""

from typing import Optional


class DashboardError(Exception):
    """Base class for pipeline failures with a user-facing message."""

    user_message = "Failed to load data"

    def __init__(self, detail: str, user_message: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        if user_message is not None:
            self.user_message = user_message


class FetchError(DashboardError):
    """The CSV source could not be reached or answered with an error."""

    user_message = "Failed to load data"


class CsvDecodeError(DashboardError):
    """The CSV text has a malformed delimiter or quoting structure."""

    user_message = "Failed to parse CSV data"


class DataShapeError(DashboardError):
    """The CSV decoded fine but does not have the layout we extract from."""

    user_message = "Unexpected CSV layout"


class EmptyDatasetError(DataShapeError):
    user_message = "CSV contains no data rows"


class InsufficientRowsError(DataShapeError):
    """Fewer rows (or lines) than the extraction schema points at."""

    def __init__(self, required: int, actual: int, unit: str = "rows"):
        self.required = required
        self.actual = actual
        self.unit = unit
        super().__init__(
            f"insufficient {unit}: need at least {required}, got {actual}",
            user_message=f"Insufficient {unit} in CSV ({actual} of {required})",
        )

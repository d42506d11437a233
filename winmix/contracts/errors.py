from typing import Any, List, Mapping, Optional


class WinMixError(ValueError):
    """
    Base class for every error raised by the match engine.
    """
    pass


class MalformedRow(WinMixError):
    """
    Raised at the ingestion boundary for a raw row that cannot become a Match:
    missing team name, missing full-time goals, negative or non-numeric goals.
    """

    def __init__(self, reason: str, index: Optional[int] = None, row: Optional[Mapping[str, Any]] = None):
        self.reason = reason
        self.index = index
        self.row = row
        where = f"row {index}: " if index is not None else ""
        super().__init__(f"{where}{reason}")


class InvalidFilterSpec(WinMixError):
    """
    Raised when a filter, sort or page request is structurally invalid.
    Never silently clamped.
    """
    pass


class EmptyExportSet(WinMixError):
    """
    Raised by the export guard when there is nothing to serialize.
    """

    def __init__(self, message: str = "No data to export"):
        super().__init__(message)


class InvalidRequest(WinMixError):
    """
    Raised by the HTTP validators for malformed query parameters or bodies.
    """

    def __init__(self, message: str, details: Optional[List[str]] = None):
        self.details = list(details or [])
        super().__init__(message)

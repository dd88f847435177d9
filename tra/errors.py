class TraError(Exception):
    """Base class for tra errors."""


class MalformedRecordError(TraError, ValueError):
    """Raised when a raw execution record cannot be normalized."""


class ReportLoadError(TraError, ValueError):
    """Raised when a report file cannot be read or parsed."""

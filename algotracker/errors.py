from typing import Optional


class TrackerError(Exception):
    """Base exception for tracker errors."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(TrackerError):
    """A write violates a field-presence or enumerated-value rule."""

    def __init__(self, detail: str = "Validation error", field: Optional[str] = None):
        super().__init__(detail)
        self.field = field


class NotFoundError(TrackerError):
    """A lookup by id matched no row."""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(detail)


class StorageError(TrackerError):
    """Exception for database and file I/O failures."""

    def __init__(self, detail: str = "Database error occurred"):
        super().__init__(detail)

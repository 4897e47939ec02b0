class IngestionError(Exception):
    """Base exception for position ingestion failures."""


class MalformedReport(IngestionError, ValueError):
    """Raised when a report lacks a device id or usable coordinates."""


class StorageFailure(IngestionError):
    """Raised when the vehicle store could not apply a report."""

    def __init__(self, message: str, *, device_id: str | None = None) -> None:
        super().__init__(message)
        self.device_id = device_id

"""Scan failure taxonomy. Every error here is terminal for one scan attempt."""
from __future__ import annotations

from typing import Optional


class ScanError(RuntimeError):
    pass


class LocationUnavailableError(ScanError):
    def __init__(self, message: str = "Could not determine location from the map viewport") -> None:
        super().__init__(message)


class CredentialMissingError(ScanError):
    def __init__(self, message: str = "API key missing") -> None:
        super().__init__(message)


class UpstreamError(ScanError):
    """Non-success response or transport failure from the search endpoint."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ScanInProgressError(ScanError):
    def __init__(self, message: str = "A scan is already awaiting its result") -> None:
        super().__init__(message)

"""
Custom exceptions for the roster status package.

Error philosophy:
  - FetchError        -> NON-FATAL: PageFetcher logs it and returns None.
  - MarkupParseError  -> DEGRADED VERDICT: the parser answers with an
                         "Error: ..." verdict instead of raising.
  - UnknownFilterError -> CALLER ERROR: raised before any work is done.

None of these ever reach a caller of RosterStatusService except
UnknownFilterError, which is raised while translating request input.
"""

from typing import Optional


class RosterStatusError(Exception):
    """Base exception for all roster status errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_response(self) -> dict:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details
        }


class FetchError(RosterStatusError):
    """
    Raised by HttpRetriever when a roster page cannot be retrieved.

    Covers transport errors, non-2xx responses and empty bodies.
    """

    def __init__(
        self,
        message: str,
        url: str,
        status_code: Optional[int] = None,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.url = url
        self.status_code = status_code


class MarkupParseError(RosterStatusError):
    """Raised when no tree builder is able to parse a roster page."""
    pass


class UnknownFilterError(RosterStatusError, ValueError):
    """Raised when a filter name does not correspond to a MarkupFilter."""

    def __init__(self, filter_name: str, known: list[str]):
        super().__init__(
            f"Unknown filter '{filter_name}'",
            details={"known_filters": known}
        )
        self.filter_name = filter_name

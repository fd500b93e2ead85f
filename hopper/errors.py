"""
Hopper error types.

Parse problems never surface as errors from the extraction layer; ParseFailure
is only raised at collaborator boundaries (e.g. a checklist payload) where the
caller catches it and falls back.
"""

from typing import List, Optional


class HopperError(Exception):
    """Base class for hopper errors."""


class ParseFailure(HopperError):
    """Raised when a collaborator payload cannot be validated."""
    def __init__(self, message: str, payload: Optional[str] = None):
        self.message = message
        self.payload = payload
        super().__init__(message)


class IllegalEventError(HopperError):
    """Raised when a verification event does not fit the persisted state."""
    def __init__(self, message: str, key: str = "", details: Optional[List[str]] = None):
        self.message = message
        self.key = key
        self.details = details or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = self.message
        if self.key:
            msg = f"{self.key}: {msg}"
        if self.details:
            msg += "\n  - " + "\n  - ".join(self.details)
        return msg


class SessionNotFoundError(HopperError):
    """Raised when a verification session key has no persisted session."""
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No verification session for '{key}'. Run verify start to begin.")

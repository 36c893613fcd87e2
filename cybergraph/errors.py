"""Typed errors raised across the follow-graph engine."""
from __future__ import annotations

from typing import Optional


class CyberGraphError(Exception):
    """Base class for engine errors."""


class QueryServiceError(CyberGraphError):
    """The remote query service failed (transport, HTTP status or GraphQL error)."""

    def __init__(self, operation: str, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.status_code = status_code


class MutationError(CyberGraphError):
    """A remote follow/unfollow call was rejected or could not be delivered."""

    def __init__(self, intent: str, address: str, cause: Optional[BaseException] = None) -> None:
        reason = str(cause) if cause is not None else "unknown error"
        super().__init__(f"{intent} {address} failed: {reason}")
        self.intent = intent
        self.address = address
        self.cause = cause


class InvalidAddressError(CyberGraphError, ValueError):
    """Raised by strict address validation (CLI input)."""

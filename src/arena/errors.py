"""
Exception types raised by the tournament engine.

Every command works on a copy of its input, so when one of these is raised
the caller's data is unchanged.
"""
from typing import Any, Dict, Optional


class ArenaError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class InvalidInputError(ArenaError):
    """Raised for malformed input: bad scores, missing ids, wrong pair counts."""

    pass


class NotFoundError(InvalidInputError):
    """Raised when a referenced record does not exist."""

    def __init__(self, kind: str, record_id):
        super().__init__(f"{kind} not found: {record_id}", {'kind': kind, 'id': record_id})
        self.kind = kind
        self.record_id = record_id


class PreconditionError(ArenaError):
    """Raised when an operation is not possible in the current state."""

    pass


class ReferentialConflictError(ArenaError):
    """Raised when a record cannot be removed or reused because something references it."""

    pass

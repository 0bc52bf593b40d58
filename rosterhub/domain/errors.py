"""Error taxonomy shared by the roster services."""

from __future__ import annotations


class RosterError(Exception):
    """Base exception for roster and attendance errors."""


class ValidationError(RosterError):
    """Raised when input is malformed (empty role list, negative headcount)."""


class AuthenticationError(RosterError):
    """Raised when no identity was presented or login credentials are wrong."""


class AuthorizationError(RosterError):
    """Raised for rejected tokens, wrong account kind or ownership mismatch."""


class NotFoundError(RosterError):
    """Raised when a referenced id does not exist."""


class ConflictError(RosterError):
    """Raised when a uniqueness rule is violated."""


class PersistenceError(RosterError):
    """Raised when the store fails on a single-row operation."""


class TransactionFailure(PersistenceError):
    """Raised when a multi-row write aborted and was rolled back."""

"""Domain errors raised by the assignment components.

None of these is fatal: callers turn each one into a user-visible notice and
leave the in-memory state unchanged.
"""

from __future__ import annotations


class AssignmentError(Exception):
    """Base class for assignment-domain failures."""


class AssignmentValidationError(AssignmentError):
    """An edit or filter value is not acceptable for the target field."""


class MissingRequiredFieldError(AssignmentValidationError):
    """Pasted client text did not yield a name and an age."""

    def __init__(self, message: str, fields: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.fields = fields


class PermissionDeniedError(AssignmentError):
    """The caller lacks the administrator capability for the operation."""


class AssignmentNotFoundError(AssignmentError):
    """The referenced assignment does not exist in the store."""


class OperationFailedError(AssignmentError):
    """A store read or write failed; the caller may retry."""


class StaleEditError(AssignmentError):
    """The record under edit vanished or changed before the edit was committed."""

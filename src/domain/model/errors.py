"""Domain-level exceptions.

Services raise these errors to express business rule violations.
Every error carries an ErrorKind; route handlers map the kind to an
HTTP status code and never look at the message text.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.model.user import Violation


class ErrorKind(str, Enum):
    """Tag identifying which rule an operation broke."""
    SHAPE_VIOLATION = 'shape_violation'
    AGE_RESTRICTION = 'age_restriction'
    DUPLICATE_EMAIL = 'duplicate_email'
    NOT_FOUND = 'not_found'
    REACTIVATION_FORBIDDEN = 'reactivation_forbidden'
    PERSISTENCE_FAILURE = 'persistence_failure'


class DomainError(Exception):
    """Base class for all domain errors."""
    kind: ErrorKind


class ShapeViolationError(DomainError):
    """Input failed one or more field-level rules."""
    kind = ErrorKind.SHAPE_VIOLATION

    def __init__(self, violations: list[Violation]):
        self.violations = list(violations)
        super().__init__("Validation failed")

    def by_field(self) -> dict[str, list[str]]:
        """Group violation messages by field name, keeping rule order."""
        grouped: dict[str, list[str]] = {}
        for violation in self.violations:
            grouped.setdefault(violation.field, []).append(violation.message)
        return grouped


class AgeRestrictionError(DomainError):
    """User is younger than the minimum registration age."""
    kind = ErrorKind.AGE_RESTRICTION

    def __init__(self, minimum_age: int):
        self.minimum_age = minimum_age
        super().__init__(f"User must be at least {minimum_age} years old")


class DuplicateEmailError(DomainError):
    """Normalized email is already owned by another user."""
    kind = ErrorKind.DUPLICATE_EMAIL

    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already registered")


class UserNotFoundError(DomainError):
    """Requested user does not exist."""
    kind = ErrorKind.NOT_FOUND

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("User not found")


class ReactivationForbiddenError(DomainError):
    """A deactivated user cannot be switched back to active."""
    kind = ErrorKind.REACTIVATION_FORBIDDEN

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("Deactivated users cannot be reactivated")


class PersistenceError(DomainError):
    """The storage backend could not complete a read, write or commit."""
    kind = ErrorKind.PERSISTENCE_FAILURE

"""Field-level validation for user input.

Rules are declared as (field, check, message) entries and evaluated in full,
so callers always receive every violation at once. Values are checked as
the client sent them, wrong JSON types included. Business rules that
need stored data (age policy, email uniqueness) live in user_service.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable

from email_validator import EmailNotValidError, validate_email

from domain.model.errors import ShapeViolationError
from domain.model.user import UserCreate, UserUpdate, Violation

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 6

# (XX) XXXXX-XXXX, with parentheses, separator and hyphen all optional
PHONE_PATTERN = re.compile(r'^\(?\d{2}\)?[\s-]?\d{4,5}-?\d{4}$')


@dataclass(frozen=True)
class Rule:
    field: str
    check: Callable[[Any, date], bool]
    message: str


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


_NAME_RULES = [
    Rule('name', lambda d, _: _text(d.name), "Name is required"),
    Rule(
        'name',
        lambda d, _: not _text(d.name) or NAME_MIN_LENGTH <= len(d.name) <= NAME_MAX_LENGTH,
        f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters",
    ),
]

_EMAIL_RULES = [
    Rule('email', lambda d, _: _text(d.email), "Email is required"),
    Rule('email', lambda d, _: not _text(d.email) or _is_email(d.email), "Email is invalid"),
]

_PASSWORD_RULES = [
    Rule('password', lambda d, _: _text(d.password), "Password is required"),
    Rule(
        'password',
        lambda d, _: not _text(d.password) or len(d.password) >= PASSWORD_MIN_LENGTH,
        f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
    ),
]

_BIRTH_DATE_RULES = [
    Rule('birth_date', lambda d, _: _present(d.birth_date), "Birth date is required"),
    Rule(
        'birth_date',
        lambda d, _: not _present(d.birth_date) or isinstance(d.birth_date, date),
        "Birth date is invalid",
    ),
    Rule(
        'birth_date',
        lambda d, today: not isinstance(d.birth_date, date) or d.birth_date < today,
        "Birth date cannot be in the future",
    ),
]

_PHONE_RULES = [
    Rule(
        'phone',
        lambda d, _: not _present(d.phone) or (isinstance(d.phone, str) and PHONE_PATTERN.match(d.phone) is not None),
        "Phone must match the format (XX) XXXXX-XXXX",
    ),
]

_ACTIVE_RULES = [
    Rule('active', lambda d, _: d.active is None or isinstance(d.active, bool), "Active must be true or false"),
]

CREATE_RULES = _NAME_RULES + _EMAIL_RULES + _PASSWORD_RULES + _BIRTH_DATE_RULES + _PHONE_RULES
UPDATE_RULES = _NAME_RULES + _EMAIL_RULES + _BIRTH_DATE_RULES + _PHONE_RULES + _ACTIVE_RULES


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _evaluate(rules: list[Rule], data: Any, today: date | None) -> list[Violation]:
    if today is None:
        today = _today()
    return [Violation(rule.field, rule.message) for rule in rules if not rule.check(data, today)]


def validate_create(data: UserCreate, today: date | None = None) -> list[Violation]:
    """Return every violation found in registration input."""
    return _evaluate(CREATE_RULES, data, today)


def validate_update(data: UserUpdate, today: date | None = None) -> list[Violation]:
    """Return every violation found in update input."""
    return _evaluate(UPDATE_RULES, data, today)


def ensure_valid_create(data: UserCreate, today: date | None = None) -> None:
    """Raise ShapeViolationError if registration input breaks any rule."""
    violations = validate_create(data, today)
    if violations:
        raise ShapeViolationError(violations)


def ensure_valid_update(data: UserUpdate, today: date | None = None) -> None:
    """Raise ShapeViolationError if update input breaks any rule."""
    violations = validate_update(data, today)
    if violations:
        raise ShapeViolationError(violations)

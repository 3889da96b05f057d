"""User domain models."""

from dataclasses import dataclass
from datetime import date, datetime

MINIMUM_AGE = 18


# ── Input Value Objects ──────────────────────────────────


@dataclass(frozen=True)
class UserCreate:
    """Registration input, carried as received. The validation rules check types."""
    name: str
    email: str
    password: str
    birth_date: date | None
    phone: str | None = None


@dataclass(frozen=True)
class UserUpdate:
    """Update input. ``active=None`` leaves the lifecycle state untouched."""
    name: str
    email: str
    birth_date: date | None
    phone: str | None = None
    active: bool | None = None


@dataclass(frozen=True)
class Violation:
    """A single field-level rule failure."""
    field: str
    message: str


# ── User Domain Model ────────────────────────────────────


@dataclass
class User:
    """Domain model representing a user.

    ``id`` stays None until the repository commits the record.
    """
    name: str
    email: str
    password: str
    birth_date: date
    created_at: datetime
    id: int | None = None
    phone: str | None = None
    active: bool = True
    updated_at: datetime | None = None


@dataclass(frozen=True)
class UserView:
    """Read-only projection of a User. Never carries the password."""
    id: int
    name: str
    email: str
    birth_date: date
    phone: str | None
    active: bool
    created_at: datetime


def project(user: User) -> UserView:
    return UserView(
        id=user.id,
        name=user.name,
        email=user.email,
        birth_date=user.birth_date,
        phone=user.phone,
        active=user.active,
        created_at=user.created_at,
    )


def normalize_email(email: str) -> str:
    """Canonical form used for storage and uniqueness checks."""
    return email.lower()


def calculate_age(birth_date: date, today: date) -> int:
    """Full years elapsed between birth_date and today."""
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age

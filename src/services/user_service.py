"""User service — registration and lifecycle business logic.

Pure business logic with no HTTP dependencies.
Raises domain errors that route handlers map to HTTP status codes.

Every operation accepts an optional ``timeout`` (seconds). The deadline
covers all repository calls of the operation; when it expires, or the
calling task is cancelled, staged changes are rolled back and nothing
becomes visible.
"""

import asyncio
import logging
from datetime import date, datetime, timezone

from domain.model.errors import (
    AgeRestrictionError,
    DomainError,
    DuplicateEmailError,
    PersistenceError,
    ReactivationForbiddenError,
    UserNotFoundError,
)
from domain.model.user import (
    MINIMUM_AGE,
    User,
    UserCreate,
    UserUpdate,
    UserView,
    calculate_age,
    normalize_email,
    project,
)
from port.user_repository import UserRepository
from services.user_validation import ensure_valid_create, ensure_valid_update

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _check_age(birth_date: date, now: datetime) -> None:
    if calculate_age(birth_date, now.date()) < MINIMUM_AGE:
        raise AgeRestrictionError(MINIMUM_AGE)


async def _commit(repo: UserRepository) -> int:
    """Commit the unit of work; on any failure drop what was staged."""
    try:
        return await repo.commit()
    except DomainError:
        repo.rollback()
        raise
    except asyncio.CancelledError:
        repo.rollback()
        raise
    except Exception as e:
        repo.rollback()
        raise PersistenceError("Failed to commit user changes") from e


async def list_users(repo: UserRepository, timeout: float | None = None) -> list[UserView]:
    """Return all users, active and inactive, in repository order."""
    async with asyncio.timeout(timeout):
        users = await repo.get_all()
    return [project(user) for user in users]


async def get_user(repo: UserRepository, user_id: int, timeout: float | None = None) -> UserView | None:
    """Return the user with the given id, or None if it does not exist."""
    async with asyncio.timeout(timeout):
        user = await repo.get_by_id(user_id)
    return project(user) if user else None


async def create_user(repo: UserRepository, data: UserCreate, timeout: float | None = None) -> UserView:
    """Register a new user.

    Returns the projection of the created user, with its assigned id.

    Raises:
        ShapeViolationError: input breaks field-level rules
        AgeRestrictionError: user is younger than MINIMUM_AGE
        DuplicateEmailError: normalized email already registered
        PersistenceError: the repository failed to commit
    """
    now = _utcnow()
    ensure_valid_create(data, today=now.date())
    _check_age(data.birth_date, now)

    email = normalize_email(data.email)

    async with asyncio.timeout(timeout):
        if await repo.exists_by_email(email):
            logger.info("User creation rejected: email already registered", extra={"email": email})
            raise DuplicateEmailError(email)

        user = User(
            name=data.name,
            email=email,
            password=data.password,
            birth_date=data.birth_date,
            phone=data.phone,
            active=True,
            created_at=now,
        )
        repo.add(user)
        await _commit(repo)

    logger.info("User created", extra={"userId": user.id, "email": email})
    return project(user)


async def update_user(
    repo: UserRepository,
    user_id: int,
    data: UserUpdate,
    timeout: float | None = None,
) -> UserView:
    """Replace the editable fields of an existing user.

    ``data.active=False`` deactivates the user; ``data.active=True`` is only
    accepted for users that are still active.

    Raises:
        ShapeViolationError: input breaks field-level rules
        UserNotFoundError: no user with user_id
        AgeRestrictionError: user is younger than MINIMUM_AGE
        DuplicateEmailError: normalized email belongs to a different user
        ReactivationForbiddenError: active=True sent for a deactivated user
        PersistenceError: the repository failed to commit
    """
    now = _utcnow()
    ensure_valid_update(data, today=now.date())

    email = normalize_email(data.email)

    async with asyncio.timeout(timeout):
        user = await repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        _check_age(data.birth_date, now)

        owner = await repo.get_by_email(email)
        if owner is not None and owner.id != user_id:
            logger.info("User update rejected: email owned by another user", extra={
                "userId": user_id,
                "ownerId": owner.id,
            })
            raise DuplicateEmailError(email)

        if data.active and not user.active:
            raise ReactivationForbiddenError(user_id)

        user.name = data.name
        user.email = email
        user.birth_date = data.birth_date
        user.phone = data.phone
        if data.active is not None:
            user.active = data.active
        user.updated_at = now

        repo.update(user)
        await _commit(repo)

    logger.info("User updated", extra={"userId": user_id, "active": user.active})
    return project(user)


async def deactivate_user(repo: UserRepository, user_id: int, timeout: float | None = None) -> bool:
    """Soft-delete a user.

    Returns False if the user does not exist. Deactivating an inactive user
    succeeds again and refreshes updated_at.
    """
    async with asyncio.timeout(timeout):
        user = await repo.get_by_id(user_id)
        if user is None:
            return False

        user.active = False
        user.updated_at = _utcnow()

        repo.update(user)
        await _commit(repo)

    logger.info("User deactivated", extra={"userId": user_id})
    return True


async def email_exists(repo: UserRepository, email: str, timeout: float | None = None) -> bool:
    """Return True if the normalized email is registered to any user."""
    async with asyncio.timeout(timeout):
        return await repo.exists_by_email(normalize_email(email))

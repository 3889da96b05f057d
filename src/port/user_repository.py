from typing import Protocol
from domain.model.user import User


class UserRepository(Protocol):
    """Protocol defining the interface for user data access.

    Writes are staged with add()/update() and only become visible once
    commit() succeeds. Implementations are request-scoped: one instance
    holds the pending changes of a single unit of work.
    """

    async def get_all(self) -> list[User]:
        """Return every stored user, active and inactive."""
        ...

    async def get_by_id(self, user_id: int) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        ...

    async def get_by_email(self, email: str) -> User | None:
        """Find a user by normalized email. Return User or None if not found."""
        ...

    async def exists_by_email(self, email: str) -> bool:
        """Return True if any user (active or not) owns the normalized email."""
        ...

    def add(self, user: User) -> None:
        """Stage a new user for insertion."""
        ...

    def update(self, user: User) -> None:
        """Stage changes to an existing user."""
        ...

    async def commit(self) -> int:
        """Apply all staged changes and return the number of affected users.

        Assigns ids to staged new users. On failure nothing is applied and
        the staging area is cleared.
        """
        ...

    def rollback(self) -> None:
        """Discard staged changes without applying them."""
        ...

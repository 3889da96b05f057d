"""In-memory implementation of UserRepository for testing."""

from dataclasses import replace

from domain.model.errors import DuplicateEmailError, PersistenceError
from domain.model.user import User


class FakeUserRepository:
    def __init__(self):
        self.store: dict[int, User] = {}
        self.commit_count = 0
        self._next_id = 1
        self._pending_adds: list[User] = []
        self._pending_updates: list[User] = []

    # ── unit of work ─────────────────────────────────────────

    def add(self, user: User) -> None:
        self._pending_adds.append(user)

    def update(self, user: User) -> None:
        self._pending_updates.append(user)

    async def commit(self) -> int:
        adds, updates = self._pending_adds, self._pending_updates
        self.rollback()

        staged = dict(self.store)
        for user in updates:
            if user.id not in staged:
                raise PersistenceError(f"User {user.id} does not exist")
            staged[user.id] = replace(user)

        new_ids = list(range(self._next_id, self._next_id + len(adds)))
        for new_id, user in zip(new_ids, adds):
            staged[new_id] = replace(user, id=new_id)

        # unique index on email, same as the MongoDB adapter
        seen: set[str] = set()
        for user in staged.values():
            if user.email in seen:
                raise DuplicateEmailError(user.email)
            seen.add(user.email)

        for new_id, user in zip(new_ids, adds):
            user.id = new_id
        self._next_id += len(adds)
        self.store = staged
        self.commit_count += 1
        return len(adds) + len(updates)

    def rollback(self) -> None:
        self._pending_adds = []
        self._pending_updates = []

    # ── read operations ──────────────────────────────────────

    async def get_all(self) -> list[User]:
        return [replace(user) for user in self.store.values()]

    async def get_by_id(self, user_id: int) -> User | None:
        user = self.store.get(user_id)
        return replace(user) if user else None

    async def get_by_email(self, email: str) -> User | None:
        for user in self.store.values():
            if user.email == email:
                return replace(user)
        return None

    async def exists_by_email(self, email: str) -> bool:
        return any(user.email == email for user in self.store.values())

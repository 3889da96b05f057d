"""MongoDB implementation of UserRepository."""

from datetime import datetime, time, timezone
from logging import getLogger
from pymongo import InsertOne, ReplaceOne, ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import BulkWriteError, PyMongoError
from adapter.mongodb.connection import COUNTERS_COLLECTION_NAME, USERS_COLLECTION_NAME
from domain.model.errors import DuplicateEmailError, PersistenceError
from domain.model.user import User

logger = getLogger(__name__)

DUPLICATE_KEY_CODE = 11000


def _as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes returned by a non tz-aware client."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class MongoUserRepository:
    def __init__(self, db: AsyncDatabase):
        self.collection = db[USERS_COLLECTION_NAME]
        self.counters = db[COUNTERS_COLLECTION_NAME]
        self._pending_adds: list[User] = []
        self._pending_updates: list[User] = []

    async def ensure_indexes(self) -> bool:
        """Create indexes for users collection."""
        from adapter.mongodb.indexes import create_index_safe

        try:
            await create_index_safe(self.collection, [('email', 1)], 'idx_users_email', unique=True)
            await create_index_safe(self.collection, [('created_at', -1)], 'idx_users_created_at')
            return True
        except PyMongoError as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User(
            id=doc['_id'],
            name=doc['name'],
            email=doc['email'],
            password=doc['password'],
            birth_date=doc['birth_date'].date(),
            phone=doc.get('phone'),
            active=doc.get('active', True),
            created_at=_as_utc(doc['created_at']),
            updated_at=_as_utc(doc.get('updated_at')),
        )

    def _to_document(self, user: User, user_id: int) -> dict:
        """Convert User to a MongoDB document. BSON has no date type."""
        return {
            '_id': user_id,
            'name': user.name,
            'email': user.email,
            'password': user.password,
            'birth_date': datetime.combine(user.birth_date, time.min),
            'phone': user.phone,
            'active': user.active,
            'created_at': user.created_at,
            'updated_at': user.updated_at,
        }

    # ── unit of work ─────────────────────────────────────────

    def add(self, user: User) -> None:
        self._pending_adds.append(user)

    def update(self, user: User) -> None:
        self._pending_updates.append(user)

    def rollback(self) -> None:
        self._pending_adds = []
        self._pending_updates = []

    async def _reserve_ids(self, count: int) -> list[int]:
        """Reserve ``count`` sequential integer ids from the counters collection."""
        counter = await self.counters.find_one_and_update(
            {'_id': USERS_COLLECTION_NAME},
            {'$inc': {'seq': count}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        last = counter['seq']
        return list(range(last - count + 1, last + 1))

    async def commit(self) -> int:
        """Apply staged inserts and replacements with one ordered bulk write."""
        adds, updates = self._pending_adds, self._pending_updates
        self.rollback()
        if not adds and not updates:
            return 0

        try:
            new_ids = await self._reserve_ids(len(adds)) if adds else []
            operations = [ReplaceOne({'_id': user.id}, self._to_document(user, user.id)) for user in updates]
            operations += [InsertOne(self._to_document(user, new_id)) for new_id, user in zip(new_ids, adds)]
            result = await self.collection.bulk_write(operations, ordered=True)
        except BulkWriteError as e:
            write_errors = e.details.get('writeErrors', [])
            if write_errors and write_errors[0].get('code') == DUPLICATE_KEY_CODE:
                email = write_errors[0].get('keyValue', {}).get('email', '')
                logger.warning("User commit rejected by unique email index", extra={"email": email})
                raise DuplicateEmailError(email) from e
            logger.error("Failed to commit users", extra={"error": str(e)})
            raise PersistenceError("Failed to commit user changes") from e
        except PyMongoError as e:
            logger.error("Failed to commit users", extra={"error": str(e)})
            raise PersistenceError("Failed to commit user changes") from e

        for new_id, user in zip(new_ids, adds):
            user.id = new_id

        logger.debug("Committed users", extra={
            "inserted": result.inserted_count,
            "matched": result.matched_count,
        })
        return result.inserted_count + result.matched_count

    # ── read operations ──────────────────────────────────────

    async def get_all(self) -> list[User]:
        try:
            docs = await self.collection.find({}).sort('_id', 1).to_list()
        except PyMongoError as e:
            logger.error("Failed to list users", extra={"error": str(e)})
            raise PersistenceError("Failed to list users") from e
        return [self._to_domain(doc) for doc in docs]

    async def get_by_id(self, user_id: int) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        try:
            doc = await self.collection.find_one({'_id': user_id})
        except PyMongoError as e:
            logger.error("Failed to get user by ID", extra={"userId": user_id, "error": str(e)})
            raise PersistenceError("Failed to get user") from e
        return self._to_domain(doc) if doc else None

    async def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        try:
            doc = await self.collection.find_one({'email': email})
        except PyMongoError as e:
            logger.error("Failed to get user by email", extra={"email": email, "error": str(e)})
            raise PersistenceError("Failed to get user") from e
        return self._to_domain(doc) if doc else None

    async def exists_by_email(self, email: str) -> bool:
        try:
            count = await self.collection.count_documents({'email': email}, limit=1)
        except PyMongoError as e:
            logger.error("Failed to check email", extra={"email": email, "error": str(e)})
            raise PersistenceError("Failed to check email") from e
        return count > 0

"""Tests for index creation with conflict resolution."""

import unittest
from unittest.mock import AsyncMock, MagicMock

from pymongo.errors import OperationFailure

from adapter.mongodb.indexes import create_index_safe

EMAIL_KEYS = [('email', 1)]


def _collection(indexes: dict) -> MagicMock:
    collection = MagicMock()
    collection.index_information = AsyncMock(return_value=indexes)
    collection.drop_index = AsyncMock()
    return collection


class TestCreateIndexSafe(unittest.IsolatedAsyncioTestCase):

    async def test_creates_index_without_conflict(self):
        collection = _collection({})
        collection.create_index = AsyncMock(return_value='idx_users_email')

        self.assertTrue(await create_index_safe(collection, EMAIL_KEYS, 'idx_users_email', unique=True))

        collection.create_index.assert_awaited_once_with(EMAIL_KEYS, name='idx_users_email', unique=True)
        collection.drop_index.assert_not_called()

    async def test_replaces_non_unique_email_index_with_unique_one(self):
        collection = _collection({
            '_id_': {'key': [('_id', 1)]},
            'email_1': {'key': [('email', 1)]},
        })
        collection.create_index = AsyncMock(side_effect=[
            OperationFailure("Index already exists with a different name: email_1"),
            'idx_users_email',
        ])

        self.assertTrue(await create_index_safe(collection, EMAIL_KEYS, 'idx_users_email', unique=True))

        collection.drop_index.assert_awaited_once_with('email_1')
        collection.create_index.assert_awaited_with(EMAIL_KEYS, name='idx_users_email', unique=True)

    async def test_replaces_same_name_index_with_different_options(self):
        collection = _collection({'idx_users_email': {'key': [('email', 1)]}})
        collection.create_index = AsyncMock(side_effect=[
            OperationFailure("An existing index has the same name as the requested index. Conflict"),
            'idx_users_email',
        ])

        self.assertTrue(await create_index_safe(collection, EMAIL_KEYS, 'idx_users_email', unique=True))

        collection.drop_index.assert_awaited_once_with('idx_users_email')

    async def test_unrelated_indexes_are_left_alone(self):
        collection = _collection({
            '_id_': {'key': [('_id', 1)]},
            'idx_users_created_at': {'key': [('created_at', -1)]},
        })
        collection.create_index = AsyncMock(side_effect=OperationFailure("Index already exists"))

        self.assertFalse(await create_index_safe(collection, EMAIL_KEYS, 'idx_users_email', unique=True))

        collection.drop_index.assert_not_called()

    async def test_other_errors_propagate(self):
        collection = _collection({})
        collection.create_index = AsyncMock(side_effect=OperationFailure("not authorized"))

        with self.assertRaises(OperationFailure):
            await create_index_safe(collection, EMAIL_KEYS, 'idx_users_email', unique=True)


if __name__ == '__main__':
    unittest.main()

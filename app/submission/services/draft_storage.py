"""
Draft storage port and adapters.

Drafts live under the logical key "draft:{ownerKey}" as
{"payload": ..., "lastSavedAt": ISO-8601}. Adapters translate their
backend failures into DraftPersistenceError; DraftStore decides how to
degrade.
"""

import copy
import logging
from typing import Any, Dict, Optional, Protocol

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.exceptions import DraftPersistenceError

logger = logging.getLogger(__name__)


def draft_key(owner_key: str) -> str:
    return f"draft:{owner_key}"


class DraftStorage(Protocol):
    """Key/value persistence for draft records."""

    async def get(self, key: str) -> Optional[Dict[str, Any]]: ...

    async def put(self, key: str, record: Dict[str, Any]) -> None: ...

    async def delete(self, key: str) -> None: ...


class InMemoryDraftStorage:
    """
    Process-local draft storage.

    Records are deep-copied in and out so callers cannot mutate what is
    stored.
    """

    def __init__(self):
        self._records: Dict[str, Dict[str, Any]] = {}

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        record = self._records.get(key)
        return copy.deepcopy(record) if record is not None else None

    async def put(self, key: str, record: Dict[str, Any]) -> None:
        self._records[key] = copy.deepcopy(record)

    async def delete(self, key: str) -> None:
        self._records.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._records

    def __len__(self) -> int:
        return len(self._records)


class MongoDraftStorage:
    """
    Draft storage backed by a MongoDB collection.
    Documents are keyed by the logical draft key in _id.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "checkinDrafts"):
        """
        Initialize MongoDraftStorage.

        Args:
            db: MongoDB database connection
            collection_name: Collection holding draft documents
        """
        self._drafts_collection = db[collection_name]

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            doc = await self._drafts_collection.find_one({"_id": key})
        except PyMongoError as e:
            raise DraftPersistenceError(f"Failed to read draft {key}: {e}") from e

        if not doc:
            return None
        return {"payload": doc["payload"], "lastSavedAt": doc["lastSavedAt"]}

    async def put(self, key: str, record: Dict[str, Any]) -> None:
        try:
            await self._drafts_collection.replace_one(
                {"_id": key},
                {"_id": key, "payload": record["payload"], "lastSavedAt": record["lastSavedAt"]},
                upsert=True,
            )
            logger.debug(f"Draft written: {key}")
        except PyMongoError as e:
            raise DraftPersistenceError(f"Failed to write draft {key}: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self._drafts_collection.delete_one({"_id": key})
        except PyMongoError as e:
            raise DraftPersistenceError(f"Failed to delete draft {key}: {e}") from e

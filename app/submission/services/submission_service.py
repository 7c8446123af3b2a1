"""
Check-in submission storage.

Stores submitted payloads and serves the submission records that drive
instance status.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.submission.models import CheckInPayload
from app.tracking.models import SubmissionRecord

logger = logging.getLogger(__name__)


class Submitter(Protocol):
    """Submission collaborator consumed by the form session."""

    async def submit(self, owner_key: str, payload: CheckInPayload) -> bool: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionService:
    """
    Persists submitted check-ins.
    Pure storage - validation happens before a payload gets here.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        collection_name: str = "checkinSubmissions",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize SubmissionService.

        Args:
            db: MongoDB database connection
            collection_name: Collection holding submissions
            clock: Returns the current time
        """
        self._submissions_collection = db[collection_name]
        self._clock = clock or _utcnow

    async def submit(self, owner_key: str, payload: CheckInPayload) -> bool:
        """
        Store a submitted payload.

        Args:
            owner_key: Client + template pairing
            payload: Validated form payload

        Returns:
            True on success, False if storage rejected it
        """
        now = self._clock()
        doc = {
            "ownerKey": owner_key,
            "payload": payload.model_dump(mode="json"),
            "submittedAt": now,
            "createdAt": now,
        }

        try:
            result = await self._submissions_collection.insert_one(doc)
        except PyMongoError as e:
            logger.error(f"Failed to store submission for {owner_key}: {e}")
            return False

        logger.info(f"Check-in submitted for {owner_key}: {result.inserted_id}")
        return True

    async def get_latest_submission(
        self,
        owner_key: str,
        since: Optional[datetime] = None,
    ) -> Optional[SubmissionRecord]:
        """
        Get the most recent submission of `owner_key`.

        Args:
            owner_key: Client + template pairing
            since: Only consider submissions at or after this instant

        Returns:
            SubmissionRecord or None
        """
        query = {"ownerKey": owner_key}
        if since is not None:
            query["submittedAt"] = {"$gte": since}

        doc = await self._submissions_collection.find_one(query, sort=[("submittedAt", -1)])
        if not doc:
            return None

        return SubmissionRecord(submittedAt=doc["submittedAt"], submissionId=str(doc["_id"]))

from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from chatpresence.models.chat_notification import ChatNotificationDocument


class ChatNotificationRepository:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db["chat_notifications"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index(
            [("user_id", ASCENDING), ("other_participant_id", ASCENDING)],
            unique=True,
        )
        await self.collection.create_index([("user_id", ASCENDING), ("last_message_at", DESCENDING)])

    async def find_for_pair(self, user_id: str, other_participant_id: str) -> Optional[ChatNotificationDocument]:
        doc = await self.collection.find_one({"user_id": user_id, "other_participant_id": other_participant_id})
        if doc:
            doc["_id"] = str(doc.get("_id"))
        return doc

    async def set_typing(self, user_id: str, other_participant_id: str, is_typing: bool) -> bool:
        # only matches when the stored flag differs, so repeated frames are no-ops
        result = await self.collection.update_one(
            {
                "user_id": user_id,
                "other_participant_id": other_participant_id,
                "is_typing": {"$ne": is_typing},
            },
            {"$set": {"is_typing": is_typing, "updated_at": datetime.now(timezone.utc)}},
        )
        return bool(result.modified_count)

import asyncio
from types import SimpleNamespace

from bson import ObjectId

from chatpresence.repositories.chat_notification_repository import ChatNotificationRepository


class FakeCollection:

    def __init__(self, docs=None) -> None:
        self.docs = list(docs or [])
        self.indexes = []
        self.updates = []

    async def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))

    async def find_one(self, query):
        for doc in self.docs:
            if all(doc.get(k) == v for k, v in query.items()):
                return dict(doc)
        return None

    async def update_one(self, query, update):
        self.updates.append((query, update))
        for doc in self.docs:
            if (
                doc["user_id"] == query["user_id"]
                and doc["other_participant_id"] == query["other_participant_id"]
                and doc.get("is_typing") != query["is_typing"]["$ne"]
            ):
                doc.update(update["$set"])
                return SimpleNamespace(modified_count=1)
        return SimpleNamespace(modified_count=0)


class FakeDatabase:

    def __init__(self, collection: FakeCollection) -> None:
        self._collection = collection

    def __getitem__(self, name):
        assert name == "chat_notifications"
        return self._collection


def _repo(docs=None):
    collection = FakeCollection(docs)
    return ChatNotificationRepository(FakeDatabase(collection)), collection


def test_find_for_pair_stringifies_id():
    oid = ObjectId()
    repo, _ = _repo([{"_id": oid, "user_id": "bob", "other_participant_id": "alice", "is_typing": False}])

    doc = asyncio.run(repo.find_for_pair("bob", "alice"))

    assert doc["_id"] == str(oid)
    assert asyncio.run(repo.find_for_pair("alice", "bob")) is None


def test_set_typing_only_writes_changes():
    repo, collection = _repo([{"user_id": "bob", "other_participant_id": "alice", "is_typing": False}])

    assert asyncio.run(repo.set_typing("bob", "alice", True)) is True
    assert asyncio.run(repo.set_typing("bob", "alice", True)) is False

    query, update = collection.updates[0]
    assert query == {"user_id": "bob", "other_participant_id": "alice", "is_typing": {"$ne": True}}
    assert update["$set"]["is_typing"] is True
    assert "updated_at" in update["$set"]
    assert collection.docs[0]["is_typing"] is True


def test_ensure_indexes():
    repo, collection = _repo()

    asyncio.run(repo.ensure_indexes())

    keys = [keys for keys, _ in collection.indexes]
    assert [("user_id", 1), ("other_participant_id", 1)] in keys
    assert [("user_id", 1), ("last_message_at", -1)] in keys
    assert collection.indexes[0][1] == {"unique": True}

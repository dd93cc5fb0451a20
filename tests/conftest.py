from typing import Any, Dict, List, Optional, Tuple

import pytest

from chatpresence.core.config import settings
from chatpresence.utils import realtime_bus


class StubNotificationRepository:
    """In-memory stand-in for ChatNotificationRepository."""

    def __init__(self, docs: Optional[List[Dict[str, Any]]] = None) -> None:
        self.docs: Dict[Tuple[str, str], Dict[str, Any]] = {}
        for doc in docs or []:
            self.docs[(doc["user_id"], doc["other_participant_id"])] = dict(doc)
        self.set_calls: List[Tuple[str, str, bool]] = []

    async def find_for_pair(self, user_id: str, other_participant_id: str) -> Optional[Dict[str, Any]]:
        doc = self.docs.get((user_id, other_participant_id))
        return dict(doc) if doc else None

    async def set_typing(self, user_id: str, other_participant_id: str, is_typing: bool) -> bool:
        self.set_calls.append((user_id, other_participant_id, is_typing))
        doc = self.docs.get((user_id, other_participant_id))
        if doc is None or bool(doc.get("is_typing")) == is_typing:
            return False
        doc["is_typing"] = is_typing
        return True


class RecordingManager:

    def __init__(self) -> None:
        self.sent: List[Tuple[str, str]] = []

    async def send_personal_message(self, receiver_id: str, message: str) -> None:
        self.sent.append((receiver_id, message))


def chat_entry(user_id: str, other_participant_id: str, **extra: Any) -> Dict[str, Any]:
    doc = {
        "user_id": user_id,
        "other_participant_id": other_participant_id,
        "other_participant_type": "USER",
        "chat_id": f"{user_id}_{other_participant_id}",
        "is_typing": False,
    }
    doc.update(extra)
    return doc


@pytest.fixture(autouse=True)
def in_process_bus(monkeypatch: pytest.MonkeyPatch):
    """Every test starts without Redis and without a cached bus."""
    monkeypatch.setattr(settings, "redis_url", None)
    monkeypatch.setattr(realtime_bus, "_bus", None)
    yield


@pytest.fixture
def manager() -> RecordingManager:
    return RecordingManager()

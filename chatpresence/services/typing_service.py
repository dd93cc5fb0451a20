import logging
from typing import Optional

from chatpresence.repositories.chat_notification_repository import ChatNotificationRepository
from chatpresence.schemas.events import TypingEvent
from chatpresence.schemas.typing import TypingStatus
from chatpresence.utils.realtime_bus import get_bus, user_channel
from chatpresence.utils.websocket_manager import ConnectionManager


logger = logging.getLogger(__name__)


class TypingService:

    def __init__(self, notification_repo: ChatNotificationRepository, manager: ConnectionManager) -> None:
        self._notification_repo = notification_repo
        self._manager = manager

    async def update_typing_status(self, status: TypingStatus) -> bool:
        """
        Store the sender's typing flag on the recipient's chat entry and push
        a typing event to the recipient.

        Returns False without notifying when the recipient has no chat with
        the sender yet or the flag did not change.
        """
        metadata = await self._notification_repo.find_for_pair(status.recipient_id, status.sender_id)
        if metadata is None:
            logger.debug(
                "No chat entry for %s with %s, skipping typing update", status.recipient_id, status.sender_id
            )
            return False

        if bool(metadata.get("is_typing")) == status.is_typing:
            logger.debug(
                "No typing state change for chat %s (%s -> %s), still %s",
                metadata.get("chat_id"), status.sender_id, status.recipient_id, status.is_typing,
            )
            return False

        changed = await self._notification_repo.set_typing(status.recipient_id, status.sender_id, status.is_typing)
        if not changed:
            # a concurrent frame already stored the same value
            return False

        logger.info(
            "Typing status of %s towards %s is now %s", status.sender_id, status.recipient_id, status.is_typing
        )
        sender_type = status.resolved_sender_type() or metadata.get("other_participant_type")
        await self._deliver(TypingEvent.from_status(status, sender_type=sender_type))
        return True

    async def get_typing_status(self, user_id: str, other_participant_id: str) -> Optional[bool]:
        metadata = await self._notification_repo.find_for_pair(user_id, other_participant_id)
        if metadata is None:
            return None
        return bool(metadata.get("is_typing"))

    async def _deliver(self, event: TypingEvent) -> None:
        payload = event.to_wire()
        try:
            bus = await get_bus()
            if bus.enabled:
                await bus.publish(user_channel(event.to), payload)
            else:
                await self._manager.send_personal_message(event.to, payload)
        except Exception as exc:
            logger.warning("Failed to send typing event to %s: %s", event.to, exc)

from datetime import datetime
from typing import Literal, Optional, TypedDict


ParticipantType = Literal["USER", "VENDOR"]


class ChatNotificationDocument(TypedDict, total=False):
    _id: str
    # owner of the chat list entry
    user_id: str
    other_participant_id: str
    other_participant_type: ParticipantType
    chat_id: str
    # whether other_participant is typing to user_id
    is_typing: bool
    updated_at: datetime
    # maintained by the message pipeline
    last_message_content: Optional[str]
    last_message_at: datetime
    unread_count: int

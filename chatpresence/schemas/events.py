from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from chatpresence.schemas.typing import TypingStatus


class TypingEvent(BaseModel):
    """Frame pushed to the recipient's socket / channel."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["typing_start", "typing_stop"]
    from_: str = Field(alias="from")
    to: str
    sender_type: Optional[str] = None
    is_typing: bool
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_status(cls, status: TypingStatus, sender_type: Optional[str] = None) -> "TypingEvent":
        return cls(
            type="typing_start" if status.is_typing else "typing_stop",
            from_=status.sender_id,
            to=status.recipient_id,
            sender_type=sender_type or status.resolved_sender_type(),
            is_typing=status.is_typing,
        )

    def to_wire(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class ErrorEvent(BaseModel):

    type: Literal["error"] = "error"
    detail: str

    def to_wire(self) -> str:
        return self.model_dump_json()

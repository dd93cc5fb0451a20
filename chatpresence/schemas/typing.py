import json
from typing import Any, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from chatpresence.errors import FormatError, UnrecognizedValueError
from chatpresence.utils.coercion import parse_boolean_like


_FLAG_ALIASES = ("isTyping", "typing")


class TypingStatus(BaseModel):
    """
    Typing indicator frame sent by a client when it starts or stops typing.

    Only the camelCase wire names are accepted; build instances with them too,
    e.g. ``TypingStatus(senderId="a", recipientId="b", isTyping=True)``.
    """

    model_config = ConfigDict(alias_generator=to_camel)

    sender_id: str
    recipient_id: str
    vendor_id: Optional[str] = None
    # "USER" or "VENDOR"
    sender_type: Optional[str] = None
    # "isTyping" is listed first so it wins when a client sends both names
    is_typing: bool = Field(
        False,
        validation_alias=AliasChoices(*_FLAG_ALIASES),
        serialization_alias="isTyping",
    )

    @field_validator("is_typing", mode="before")
    @classmethod
    def _normalize_is_typing(cls, value: Any) -> bool:
        return parse_boolean_like(value)

    def resolved_sender_type(self) -> Optional[str]:
        """senderType from the frame, else inferred from vendorId; None when neither says."""
        if self.sender_type and self.sender_type.strip():
            return self.sender_type
        if self.vendor_id:
            return "VENDOR" if self.vendor_id == self.sender_id else "USER"
        return None


class TypingStatusRead(BaseModel):

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str
    other_participant_id: str
    is_typing: bool


class TypingUpdateResult(BaseModel):

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: TypingStatus
    changed: bool


def decode_typing_status(
    raw: Union[str, bytes, bytearray, Mapping[str, Any]],
    sender_id: Optional[str] = None,
) -> TypingStatus:
    """
    Decode a raw typing frame.

    When sender_id is given it replaces whatever sender the frame claims.

    Raises FormatError when the input is not a JSON object carrying the
    sender/recipient ids, and UnrecognizedValueError when the record is
    otherwise well formed but the typing flag is not an accepted encoding.
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            record = json.loads(raw)
        except ValueError as exc:
            raise FormatError("Typing payload is not valid JSON") from exc
    else:
        record = raw

    if not isinstance(record, Mapping):
        raise FormatError("Typing payload must be a JSON object")

    record = dict(record)
    if sender_id is not None:
        record["senderId"] = sender_id

    try:
        return TypingStatus.model_validate(record)
    except ValidationError as exc:
        errors = exc.errors()
        structural = [error for error in errors if error["loc"][:1] not in [(alias,) for alias in _FLAG_ALIASES]]
        if structural:
            fields = ", ".join(".".join(str(part) for part in error["loc"]) for error in structural)
            raise FormatError(f"Invalid typing payload: {fields}") from exc
        for error in errors:
            cause = (error.get("ctx") or {}).get("error")
            if isinstance(cause, UnrecognizedValueError):
                raise cause from exc
        raise FormatError("Invalid typing payload") from exc

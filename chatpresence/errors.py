from typing import Any


class DecodeError(ValueError):
    """Base class for typing frames that cannot be turned into a TypingStatus."""


class FormatError(DecodeError):
    """Input is not a decodable typing record (bad JSON, not an object, missing ids)."""


class UnrecognizedValueError(DecodeError):

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Unrecognized boolean value: {value!r}")

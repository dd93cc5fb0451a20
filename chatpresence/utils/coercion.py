import math
from typing import Optional, Union

from chatpresence.errors import UnrecognizedValueError


BooleanLike = Optional[Union[bool, int, float, str]]

_TRUE_TOKENS = {"true", "1"}
_FALSE_TOKENS = {"false", "0"}


def parse_boolean_like(value: BooleanLike) -> bool:
    """
    Normalise a wire value into a canonical bool.

    - bool: unchanged
    - number: 0 -> False, any other finite number -> True
    - str: "true"/"1" -> True, "false"/"0" -> False (trimmed, case-insensitive)
    - None: False

    Anything else raises UnrecognizedValueError.
    """
    if value is None:
        return False
    # bool is an int subclass, check it first
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, float):
        if math.isnan(value):
            raise UnrecognizedValueError(value)
        return value != 0
    if isinstance(value, str):
        token = value.strip().lower()
        if token in _TRUE_TOKENS:
            return True
        if token in _FALSE_TOKENS:
            return False
    raise UnrecognizedValueError(value)

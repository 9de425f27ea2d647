import re

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_int64(value: str) -> int:
    """
    Parse a decimal string into a signed 64-bit integer.

    Unlike int(), surrounding whitespace and digit separators are rejected.

    Raises:
        ValueError: if the string is not a plain decimal or overflows int64
    """
    if not _INT_PATTERN.fullmatch(value):
        raise ValueError(f"parsing {value!r}: invalid syntax")
    number = int(value)
    if number < INT64_MIN or number > INT64_MAX:
        raise ValueError(f"parsing {value!r}: value out of range")
    return number

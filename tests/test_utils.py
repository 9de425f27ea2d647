import pytest

from src.ride_api.utils import INT64_MAX, INT64_MIN, parse_int64


@pytest.mark.parametrize("value,expected", [
    ("0", 0),
    ("3", 3),
    ("+3", 3),
    ("-3", -3),
    ("007", 7),
    (str(INT64_MAX), INT64_MAX),
    (str(INT64_MIN), INT64_MIN),
])
def test_parse_int64(value, expected):
    assert parse_int64(value) == expected


@pytest.mark.parametrize("value", ["", "abc", "not-a-string", "1.0", " 1", "1_000", "0x10"])
def test_parse_int64_invalid_syntax(value):
    with pytest.raises(ValueError, match="invalid syntax"):
        parse_int64(value)


@pytest.mark.parametrize("value", [str(INT64_MAX + 1), str(INT64_MIN - 1)])
def test_parse_int64_out_of_range(value):
    with pytest.raises(ValueError, match="out of range"):
        parse_int64(value)

import copy

import pytest

from vendorhub.services.coercion import MISSING, coerce_lenient, coerce_strict, is_empty


@pytest.mark.parametrize("field_type,raw,expected", [
    ("number", "42", 42),
    ("number", " 3.5 ", 3.5),
    ("number", "1,200", 1200),
    ("number", True, 0),
    ("currency", "Rs 99.999", 100.0),
    ("currency", 15, 15.0),
    ("boolean", "Yes", True),
    ("boolean", 0, False),
    ("boolean", "sometimes", False),
    ("text", 12, "12"),
    ("text", {"a": 1}, ""),
    ("enum_single", " indian ", "indian"),
    ("enum_multi", ("a", "b"), ["a", "b"]),
    ("enum_multi", ["a", {"b": 1}], []),
    ("geo_coordinate", "-33.86", -33.86),
    ("image_reference", {"url": "https://x/y.png"}, "https://x/y.png"),
    ("image_reference", 42, None),
])
def test_lenient_table(field_type, raw, expected):
    assert coerce_lenient(field_type, raw, field_id="f") == expected


def test_strict_raises_instead_of_defaulting():
    with pytest.raises(ValueError):
        coerce_strict("number", "abc")
    with pytest.raises(ValueError):
        coerce_strict("boolean", "sometimes")
    with pytest.raises(ValueError):
        coerce_strict("enum_multi", "pizza")


def test_strict_empty_values():
    assert coerce_strict("number", "  ") is None
    assert coerce_strict("text", None) is None
    assert coerce_strict("enum_multi", MISSING) == []


def test_missing_marker_is_a_singleton():
    assert copy.deepcopy(MISSING) is MISSING
    assert repr(MISSING) == "MISSING"
    assert is_empty(MISSING)
    assert not is_empty(0)

from __future__ import annotations

from pdascan.ingestion.normalize import dedupe_ordered, describe_extras, describe_value, safe_str


def test_safe_str_only_accepts_non_empty_strings() -> None:
    assert safe_str("A") == "A"
    assert safe_str(" ") == " "
    assert safe_str("") is None
    assert safe_str(None) is None
    assert safe_str(123) is None


def test_dedupe_ordered_keeps_first_occurrence() -> None:
    assert dedupe_ordered(["a", "b"], ["b", " c ", "", "a"]) == ("a", "b", "c")


def test_describe_extras_renders_nulls() -> None:
    assert describe_extras({"a": "1", "b": None}) == "a=1, b=null, "
    assert describe_extras({"code": 3}) == "code=3, "
    assert describe_extras({}) == ""


def test_describe_value_keeps_non_string_values_visible() -> None:
    assert describe_value(None) == "null"
    assert describe_value(13) == "13"
    assert describe_value("X") == "X"

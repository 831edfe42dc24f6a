import pytest

from cell_coercion import (
    coerce_cell_value,
    default_for_format,
    display_value,
    parse_number,
    strip_formula_prefix,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("42", 42),
        (" 42 ", 42),
        ("10.5", 10.5),
        ("1e3", 1000),
        ("42.0", 42),
        ("", 0),
        ("abc", 0),
        ("nan", 0),
        ("inf", 0),
        ("1_000", 0),
        (None, 0),
        (7, 7),
        (2.5, 2.5),
    ],
)
def test_parse_number_is_permissive(text, expected):
    assert parse_number(text) == expected


def test_coerce_text_keeps_raw_string():
    assert coerce_cell_value("text", "  padded ") == "  padded "
    assert coerce_cell_value("text", None) == ""


def test_coerce_currency_falls_back_to_zero():
    assert coerce_cell_value("currency", "abc") == 0
    assert coerce_cell_value("number", "12") == 12


def test_defaults_by_format():
    assert default_for_format("text") == ""
    assert default_for_format("number") == 0
    assert default_for_format("currency") == 0
    assert default_for_format(None) == ""


def test_display_revalidates_numeric_columns_on_read():
    # text default left behind by a format change renders as zero
    assert display_value("", "currency") == "$0.00"
    assert display_value("", "number") == "0"
    assert display_value(1234.5, "currency") == "$1,234.50"
    assert display_value(1234567, "number") == "1,234,567"


def test_formula_view_prefixes_display_only():
    assert display_value("hello", "text", "formula") == "=hello"
    assert display_value(5, "number", "formula") == "=5"
    assert display_value(5, "currency", "formula") == "$5.00"
    assert strip_formula_prefix("=hello", "formula") == "hello"
    assert strip_formula_prefix("=hello", "normal") == "=hello"

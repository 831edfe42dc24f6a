import math

import numpy as np

TEXT = "text"
NUMBER = "number"
CURRENCY = "currency"
FORMATS = (TEXT, NUMBER, CURRENCY)
NUMERIC_FORMATS = {NUMBER, CURRENCY}

NORMAL_VIEW = "normal"
FORMULA_VIEW = "formula"


def is_numeric_format(fmt) -> bool:
    return fmt in NUMERIC_FORMATS


def default_for_format(fmt):
    return 0 if is_numeric_format(fmt) else ""


def parse_number(text):
    """Permissive numeric parse: anything that is not a finite number is 0."""
    if isinstance(text, bool):
        return int(text)
    if isinstance(text, (int, np.integer)):
        return int(text)
    if isinstance(text, (float, np.floating)):
        value = float(text)
    else:
        stripped = "" if text is None else str(text).strip()
        if stripped == "" or "_" in stripped:
            return 0
        try:
            return int(stripped)
        except ValueError:
            pass
        try:
            value = float(stripped)
        except ValueError:
            return 0
    if not math.isfinite(value):
        return 0
    if value.is_integer():
        return int(value)
    return value


def coerce_cell_value(fmt, text):
    if is_numeric_format(fmt):
        return parse_number(text)
    return "" if text is None else str(text)


def strip_formula_prefix(text, view_mode):
    text = "" if text is None else str(text)
    if view_mode == FORMULA_VIEW and text.startswith("="):
        return text[1:]
    return text


def stringify(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and not math.isnan(value) and value.is_integer():
        return str(int(value))
    return str(value)


def display_value(value, fmt, view_mode=NORMAL_VIEW, currency_symbol="$"):
    # Numeric columns may still hold a text default after a format change,
    # so the value is re-coerced on every read.
    if fmt == CURRENCY:
        return f"{currency_symbol}{float(parse_number(value)):,.2f}"
    if fmt == NUMBER:
        number = parse_number(value)
        text = f"{number:,}"
    else:
        text = stringify(value)
    if view_mode == FORMULA_VIEW:
        return f"={text}"
    return text

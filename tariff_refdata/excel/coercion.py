from __future__ import annotations

import math
import numbers
import re
from collections.abc import Callable
from typing import Any

"""Cell value coercion (locale-aware numbers, booleans, codes, text).

Spreadsheets exported from French tooling mix conventions: "12,5 %",
"1 234,56" (spaces or non-breaking spaces as thousands separators), plain
floats from numeric cells, "-" or "N/A" for missing rates. These functions
turn any of them into finite Python values.

All functions are pure. Problems are reported through the optional
``on_warning`` callback and never raised.
"""

__all__ = [
    "WarningSink",
    "is_empty",
    "to_number",
    "to_boolean",
    "to_code",
    "to_text",
]

WarningSink = Callable[[str], None]

# Placeholder strings that mean "no value" in rate columns
EMPTY_NUMBER_TOKENS = frozenset({"", "-", "n/a", "na", "null"})

AFFIRMATIVE_TOKENS = frozenset({
    "1", "oui", "yes", "true", "vrai", "x", "exempt", "exempte", "exempté",
})
NEGATIVE_TOKENS = frozenset({"0", "non", "no", "false", "faux"})

_NON_DIGITS = re.compile(r"\D")
_WHITESPACE = re.compile(r"\s+")


def is_empty(raw: Any) -> bool:
    """True for None, NaN and whitespace-only strings."""
    if raw is None:
        return True
    if isinstance(raw, float) and math.isnan(raw):
        return True
    if isinstance(raw, str) and raw.strip() == "":
        return True
    return False


def _stringify(raw: Any) -> str:
    if is_empty(raw):
        return ""
    # Integral floats come from numeric cells read by pandas ("8431490000.0")
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw)


def to_number(raw: Any, on_warning: WarningSink | None = None) -> float:
    """Convert a cell to a finite float. Unparseable input yields 0.0."""
    if is_empty(raw):
        return 0.0
    if isinstance(raw, bool):
        return float(raw)
    if isinstance(raw, numbers.Real):
        value = float(raw)
        if math.isfinite(value):
            return value
        if on_warning is not None:
            on_warning(f'could not parse number from "{raw}", using 0')
        return 0.0

    text = str(raw).strip()
    if text.lower() in EMPTY_NUMBER_TOKENS:
        return 0.0
    cleaned = text.replace("%", "").strip()
    if "," in cleaned:
        # French convention: "1 234,56" -> "1234.56". The comma is always the
        # decimal separator, so "1,234" is 1.234 and "1,234,56" does not parse
        cleaned = _WHITESPACE.sub("", cleaned).replace(",", ".", 1)
    try:
        value = float(cleaned)
    except ValueError:
        value = math.nan
    if not math.isfinite(value):
        if on_warning is not None:
            on_warning(f'could not parse number from "{raw}", using 0')
        return 0.0
    return value


def to_boolean(raw: Any, on_warning: WarningSink | None = None) -> bool:
    """Convert a cell to a bool using the affirmative token set."""
    if isinstance(raw, bool):
        return raw
    if is_empty(raw):
        return False
    if isinstance(raw, numbers.Real):
        return bool(raw != 0)
    token = str(raw).strip().lower()
    if token in AFFIRMATIVE_TOKENS:
        return True
    if token not in NEGATIVE_TOKENS and on_warning is not None:
        on_warning(f'unrecognized boolean value "{raw}", using false')
    return False


def to_code(raw: Any, max_len: int) -> str:
    """Keep only digits, truncated to ``max_len`` ("84.31.49.00" -> "8431490000")."""
    return _NON_DIGITS.sub("", _stringify(raw))[:max_len]


def to_text(raw: Any) -> str:
    return _stringify(raw).strip()

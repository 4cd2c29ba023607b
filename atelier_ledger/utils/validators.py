# utils/validators.py
from .helpers import parse_money


def non_empty(text: str) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


# ---- Numeric parsing & validators ----

def try_parse_amount(x):
    """
    Best-effort parse of a money amount (number or local text like "1.234,56").

    Returns:
        (ok: bool, value: float|None)
    """
    try:
        return True, parse_money(x)
    except ValueError:
        return False, None


def is_non_negative_number(x) -> bool:
    """
    True iff x parses to an amount and value >= 0.
    """
    ok, val = try_parse_amount(x)
    return bool(ok and val is not None and val >= 0)


def is_strictly_positive_number(x) -> bool:
    """
    True iff x parses to an amount and value > 0.
    """
    ok, val = try_parse_amount(x)
    return bool(ok and val is not None and val > 0)


def is_valid_month(m) -> bool:
    try:
        return 1 <= int(m) <= 12
    except (TypeError, ValueError):
        return False

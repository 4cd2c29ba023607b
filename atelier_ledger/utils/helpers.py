# utils/helpers.py
from datetime import date
import logging
import math
import re
from typing import Union, Optional

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)

_MONEY_CLEAN = re.compile(r"[^\d,.\-]")


def today_str() -> str:
    """Return today's date as ISO string (YYYY-MM-DD)."""
    return date.today().isoformat()


def clean_text(s: Optional[str]) -> Optional[str]:
    """Trim surrounding whitespace; blank or missing text becomes None."""
    if s is None:
        return None
    s = str(s).strip()
    return s or None


def parse_money(v: NumberLike) -> float:
    """
    Parse a money amount typed the local way.

      "1.234,56" -> 1234.56
      "12,5"     -> 12.5
      "R$ 30"    -> 30.0
      "12.50"    -> 12.5   (a lone dot followed by 1-2 digits is a decimal point)

    Numbers are returned as float. Raises ValueError when nothing numeric is
    left, or when the result is NaN or infinite.
    """
    if isinstance(v, bool):
        raise ValueError(f"Could not parse {v!r} as money.")
    if v is None:
        raise ValueError("Could not parse None as money.")
    if isinstance(v, (int, float)):
        x = float(v)
    else:
        text = _MONEY_CLEAN.sub("", str(v))
        if "," in text:
            # comma is the decimal separator, dots group thousands
            text = text.replace(".", "").replace(",", ".")
        elif text.count(".") == 1 and re.search(r"\.\d{1,2}$", text):
            pass
        else:
            text = text.replace(".", "")

        try:
            x = float(text)
        except ValueError as e:
            _log.debug("parse_money: failed to parse %r: %s", v, e)
            raise ValueError(f"Could not parse {v!r} as money.") from e

    if not math.isfinite(x):
        raise ValueError(f"{v!r} is not a finite amount.")
    return x


def fmt_money(
    v: NumberLike,
    places: int = 2,
    *,
    symbol: str = "R$",
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money the local way: "R$ 1.234,56".

    On parse failure returns `sentinel` when given, else str(v).
    """
    try:
        x = parse_money(v)
    except ValueError:
        return str(sentinel) if sentinel is not None else str(v)
    body = f"{abs(x):,.{places}f}".replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if x < 0 else ""
    return f"{sign}{symbol} {body}" if symbol else f"{sign}{body}"

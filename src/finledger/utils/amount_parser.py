"""Amount parsing and integer-cent conversion."""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

_CURRENCY_SYMBOLS = re.compile(r"[$€£¥]|\b[A-Z]{3}\b")
_DECIMAL_COMMA = re.compile(r"^-?\d+,\d{1,2}$")
CENT = Decimal("0.01")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45", "-123.45"
    - "$123.45", "-€123.45", "123.45 EUR"
    - "1,234.56" and "1.234,56"
    - "12,50" (decimal comma)
    - "(123.45)" (negative in parentheses)

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()
    is_negative = False
    if text.startswith("(") and text.endswith(")"):
        is_negative = True
        text = text[1:-1]

    text = _CURRENCY_SYMBOLS.sub("", text).replace(" ", "")

    if "," in text and "." in text:
        # Whichever separator comes last is the decimal point
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif _DECIMAL_COMMA.match(text):
        text = text.replace(",", ".")
    else:
        text = text.replace(",", "")

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'") from None
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def to_cents(amount: Decimal) -> int:
    """Convert a Decimal in major units to integer cents, rounding half up."""
    return int((amount / CENT).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_amount_cents(amount_str: str) -> int:
    """Parse an amount string straight to integer cents."""
    return to_cents(parse_amount(amount_str))


def format_cents(cents: int, currency: str | None = None) -> str:
    """Render integer cents as a signed decimal string, e.g. ``-12.34 EUR``."""
    sign = "-" if cents < 0 else ""
    whole, frac = divmod(abs(cents), 100)
    text = f"{sign}{whole:,}.{frac:02d}"
    return f"{text} {currency}" if currency else text

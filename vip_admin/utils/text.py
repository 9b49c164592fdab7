"""Small text and number helpers shared by the product forms."""

import re

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lowercase, replace runs of non-alphanumerics with '-', trim dashes."""
    return _NON_SLUG_CHARS.sub("-", value.strip().lower()).strip("-")


def digits_of(number: str) -> str:
    return "".join(ch for ch in number if ch.isdigit())


def sum_of_digits(number: str) -> int:
    return sum(int(ch) for ch in digits_of(number))


def total_digits(number: str) -> int:
    return len(digits_of(number))


def selling_price(original_price: float | None, discount: float | None) -> float:
    """Price after applying a percentage discount, rounded to 2 dp.

    A missing or out-of-range discount leaves the original price unchanged.
    """
    op = float(original_price or 0)
    d = float(discount or 0)
    if 0 < d <= 100:
        return round(op - (op * d / 100), 2)
    return op


def parse_amount(value: object) -> float | None:
    """Parse a user-entered amount such as ``"1,499"`` or ``"20%"``."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("amount must be a number")
    if isinstance(value, int | float):
        return float(value)
    text = str(value).replace(",", "").replace("%", "").strip()
    if not text:
        return None
    return float(text)

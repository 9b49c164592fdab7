from datetime import datetime
from pathlib import Path

from fastapi.templating import Jinja2Templates

from vip_admin.listing.entities import ENTITIES, status_variant
from vip_admin.utils.text import parse_amount, selling_price

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

# Configure Jinja2 templates
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

_CURRENCY_SYMBOLS = {"INR": "₹", "USD": "$", "EUR": "€", "GBP": "£"}


def _group_indian(whole: str) -> str:
    """Group digits the en-IN way: last three, then pairs (12,34,567)."""
    if len(whole) <= 3:
        return whole
    head, tail = whole[:-3], whole[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def currency_filter(amount, currency: str = "INR") -> str:
    """Format an amount like ``₹1,23,456.00``; ``N/A`` when missing."""
    if amount is None or amount == "":
        return "N/A"
    value = float(amount)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):.2f}".partition(".")
    symbol = _CURRENCY_SYMBOLS.get((currency or "INR").upper(), f"{currency} ")
    return f"{sign}{symbol}{_group_indian(whole)}.{fraction}"


def datetime_filter(value: datetime | None, fmt: str = "%b %d, %Y %H:%M") -> str:
    if value is None:
        return "N/A"
    return value.strftime(fmt)


templates.env.filters["currency"] = currency_filter
templates.env.filters["datetime"] = datetime_filter
templates.env.globals["status_variant"] = status_variant
templates.env.globals["nav_entities"] = list(ENTITIES.values())


def selling_price_preview(original_price, discount) -> float | None:
    """Selling price for the form preview; None while the inputs don't parse."""
    try:
        return selling_price(parse_amount(original_price), parse_amount(discount))
    except ValueError:
        return None


templates.env.globals["selling_price"] = selling_price_preview

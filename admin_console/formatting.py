from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from .config import CURRENCY_SYMBOL


def group_indian(digits: str) -> str:
    """Group an unsigned digit string the Indian way: 12,34,567."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_inr(amount) -> str:
    """Format an amount as rupees with no fractional digits, e.g. ₹1,23,456."""
    value = Decimal(str(amount or 0)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{group_indian(str(abs(value)))}"


def total_stock(sizes: Iterable) -> int:
    return sum(s.stock for s in sizes)


def short_id(identifier: str, length: int = 6) -> str:
    return f"#{identifier[-length:]}"

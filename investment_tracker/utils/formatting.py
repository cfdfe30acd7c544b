"""Amount formatting used in attribution detail strings."""

from typing import Any


def _indian_grouping(whole: int) -> str:
    digits = str(whole)
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_inr(amount: Any) -> str:
    """₹ with lakh/crore grouping and no decimals, e.g. ₹1,23,45,678."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        return "₹0"
    rounded = int(round(abs(amount)))
    sign = "-" if amount < 0 and rounded else ""
    return f"{sign}₹{_indian_grouping(rounded)}"


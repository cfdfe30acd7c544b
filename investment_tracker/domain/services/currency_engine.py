"""
CURRENCY ENGINE
Normalise USD-denominated amounts into the reporting currency

RESPONSIBILITIES:
- Convert USD ↔ INR with one configured rate
- Pass INR amounts through unchanged

RULES:
❌ No live exchange rates
❌ No multi-currency ledgers
✅ Non-numeric input converts to 0
✅ Zero rate never divides
✅ Unusable rates (negative, NaN, infinite) behave as 0
"""

import math
from typing import Any

from investment_tracker.config import Settings
from investment_tracker.core.logging import get_logger
from investment_tracker.domain.models import Denomination

logger = get_logger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _usable_rate(rate: Any) -> float:
    """A finite, non-negative rate, else 0 (which converts everything to 0)."""
    if not _is_number(rate) or not math.isfinite(rate) or rate < 0:
        logger.warning("Ignoring unusable USD→INR rate %r", rate)
        return 0.0
    return float(rate)


class CurrencyEngine:
    """
    Currency Engine
    Holds the USD→INR rate supplied by settings; never mutates it
    """

    def __init__(self, usd_to_inr_rate: float = 83.0, reporting_currency: str = "INR"):
        """
        Args:
            usd_to_inr_rate: INR per 1 USD; negative, NaN, infinite or
                non-numeric rates are replaced by 0
            reporting_currency: "INR" or "USD"
        """
        self.usd_to_inr_rate = _usable_rate(usd_to_inr_rate)
        self.reporting_currency = Denomination(reporting_currency)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CurrencyEngine":
        return cls(
            usd_to_inr_rate=settings.usd_to_inr_rate,
            reporting_currency=settings.currency,
        )

    def usd_to_inr(self, usd_amount: Any) -> float:
        if not _is_number(usd_amount) or not _is_number(self.usd_to_inr_rate):
            return 0.0
        return usd_amount * self.usd_to_inr_rate

    def inr_to_usd(self, inr_amount: Any) -> float:
        if not _is_number(inr_amount) or not _is_number(self.usd_to_inr_rate):
            return 0.0
        if self.usd_to_inr_rate == 0:
            return 0.0
        return inr_amount / self.usd_to_inr_rate

    def to_inr(self, amount: Any, denomination: Denomination) -> float:
        """
        Express an amount recorded in `denomination` in rupees.

        Valuation always works in INR first; `to_reporting` handles the
        final switch when the user reports in USD.
        """
        if not _is_number(amount):
            return 0.0
        if denomination is Denomination.USD:
            return self.usd_to_inr(amount)
        return float(amount)

    def to_reporting(self, amount: Any, denomination: Denomination) -> float:
        inr_amount = self.to_inr(amount, denomination)
        if self.reporting_currency is Denomination.USD:
            return self.inr_to_usd(inr_amount)
        return inr_amount

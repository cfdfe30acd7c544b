"""
DOMAIN MODELS — INTEREST ATTRIBUTION

Interest earned inside a calendar year or month.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class InterestAttribution:
    """
    Interest one instrument earned inside a reporting window.
    """
    investment_id: str
    type: str
    name: str
    interest: float
    details: str = ""


@dataclass(frozen=True)
class YearlyInterest:
    """
    Interest earned across the portfolio in a calendar year.
    """
    year: int
    total: float
    breakdown: List[InterestAttribution] = field(default_factory=list)


@dataclass(frozen=True)
class MonthlyInterest:
    """
    Interest earned across the portfolio in one calendar month.
    """
    month: int
    month_name: str
    returns: float
    is_future: bool = False

"""
DOMAIN MODELS — PORTFOLIO VALUATION

Immutable result structures produced by the valuation, aggregation and
ranking engines. No persistence. No market data fetching.
"""

from dataclasses import dataclass
from typing import Any, List


@dataclass(frozen=True)
class Valuation:
    """
    Invested amount and present value of a single instrument.
    """
    invested: float
    current: float

    @property
    def returns(self) -> float:
        return self.current - self.invested

    @property
    def returns_percentage(self) -> float:
        if self.invested == 0:
            return 0.0
        return (self.returns / self.invested) * 100.0


@dataclass(frozen=True)
class InstrumentSummary:
    """
    Display summary of one instrument (quantity label plus amounts).
    """
    quantity_label: str
    invested: float
    current: float
    returns: float


@dataclass(frozen=True)
class PortfolioTotals:
    """
    Portfolio-wide totals at a point in time.
    """
    total_invested: float
    total_current: float

    @property
    def total_returns(self) -> float:
        return self.total_current - self.total_invested

    @property
    def returns_percentage(self) -> float:
        if self.total_invested == 0:
            return 0.0
        return (self.total_returns / self.total_invested) * 100.0


@dataclass(frozen=True)
class AllocationSlice:
    """
    Share of portfolio value held in one instrument type.
    """
    type: str
    value: float
    percentage: float
    count: int


@dataclass(frozen=True)
class TypeReport:
    """
    Per-type report row: counts, amounts and shares.
    """
    type: str
    name: str
    count: int
    invested: float
    current: float
    allocation_percentage: float

    @property
    def returns(self) -> float:
        return self.current - self.invested

    @property
    def returns_percentage(self) -> float:
        if self.invested <= 0:
            return 0.0
        return (self.returns / self.invested) * 100.0


@dataclass(frozen=True)
class PerformanceEntry:
    """
    One ranked instrument.
    """
    investment: Any
    invested: float
    current: float
    returns: float
    returns_percentage: float


@dataclass(frozen=True)
class PerformanceHighlights:
    """
    Best and worst performers by returns percentage.
    """
    top_performers: List[PerformanceEntry]
    bottom_performers: List[PerformanceEntry]

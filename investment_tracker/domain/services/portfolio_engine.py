"""
PORTFOLIO ENGINE
Fold per-investment valuations into portfolio totals and allocations

RESPONSIBILITIES:
- Total invested / current / returns
- Allocation by instrument type
- Per-type report rows

RULES:
❌ No valuation rules here (ValuationEngine owns them)
❌ Never mutates the caller's snapshot
✅ Empty portfolio → zero totals, empty allocation
✅ Allocation percentages sum to 100 when value > 0
"""

from collections import OrderedDict
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from investment_tracker.config import Settings
from investment_tracker.domain.models import (
    AllocationSlice,
    InstrumentType,
    PortfolioTotals,
    TypeReport,
    Valuation,
)
from investment_tracker.domain.schemas.investment import InvestmentBase, parse_investments
from investment_tracker.domain.services.registry_engine import RegistryEngine
from investment_tracker.domain.services.valuation_engine import ValuationEngine


class PortfolioEngine:
    """
    Portfolio Engine
    Aggregates a snapshot of investments at an explicit instant
    """

    def __init__(
        self,
        valuation_engine: Optional[ValuationEngine] = None,
        registry: Optional[RegistryEngine] = None,
    ):
        self.valuation_engine = valuation_engine or ValuationEngine()
        self.registry = registry

    @classmethod
    def from_settings(cls, settings: Settings) -> "PortfolioEngine":
        valuation_engine = ValuationEngine.from_settings(settings)
        return cls(valuation_engine, RegistryEngine.from_settings(settings))

    def _type_name(self, type_id: str) -> str:
        if self.registry is not None:
            spec = self.registry.get_type(type_id)
            if spec is not None:
                return spec.name
        kind = InstrumentType.lookup(type_id)
        return kind.value.replace("_", " ").title() if kind else "Unknown"

    def _valuations(self, investments: Iterable[Any], now: date) -> List[Valuation]:
        return [self.valuation_engine.evaluate(inv, now) for inv in parse_investments(investments)]

    def aggregate(self, investments: Optional[Iterable[Any]], now: date) -> PortfolioTotals:
        """
        Portfolio-wide totals

        Args:
            investments: Records or parsed models
            now: Evaluation instant

        Returns:
            PortfolioTotals (all zero for an empty portfolio)
        """
        valuations = self._valuations(investments, now)
        return PortfolioTotals(
            total_invested=sum(v.invested for v in valuations),
            total_current=sum(v.current for v in valuations),
        )

    @staticmethod
    def group_by_type(investments: Optional[Iterable[Any]]) -> Dict[str, List[InvestmentBase]]:
        """Group parsed investments by their type discriminator, keeping input order"""
        groups: Dict[str, List[InvestmentBase]] = OrderedDict()
        for investment in parse_investments(investments):
            groups.setdefault(investment.type, []).append(investment)
        return groups

    def allocation_by_type(self, investments: Optional[Iterable[Any]], now: date) -> List[AllocationSlice]:
        """
        Current value held in each instrument type

        Returns:
            Slices sorted by value, largest first
        """
        groups = self.group_by_type(investments)
        if not groups:
            return []

        values = {
            type_id: sum(v.current for v in self._valuations(members, now))
            for type_id, members in groups.items()
        }
        total = sum(values.values())

        slices = [
            AllocationSlice(
                type=type_id,
                value=values[type_id],
                percentage=(values[type_id] / total) * 100.0 if total > 0 else 0.0,
                count=len(members),
            )
            for type_id, members in groups.items()
        ]
        slices.sort(key=lambda s: s.value, reverse=True)
        return slices

    def type_breakdown(self, investments: Optional[Iterable[Any]], now: date) -> List[TypeReport]:
        """
        Report rows per instrument type (invested, current, returns, shares)

        Returns:
            Rows sorted by current value, largest first
        """
        groups = self.group_by_type(investments)
        rows = []
        for type_id, members in groups.items():
            valuations = self._valuations(members, now)
            rows.append(TypeReport(
                type=type_id,
                name=self._type_name(type_id),
                count=len(members),
                invested=sum(v.invested for v in valuations),
                current=sum(v.current for v in valuations),
                allocation_percentage=0.0,
            ))

        total_current = sum(r.current for r in rows)
        rows = [
            TypeReport(
                type=r.type,
                name=r.name,
                count=r.count,
                invested=r.invested,
                current=r.current,
                allocation_percentage=(r.current / total_current) * 100.0 if total_current > 0 else 0.0,
            )
            for r in rows
        ]
        rows.sort(key=lambda r: r.current, reverse=True)
        return rows


# ----------------------------------------------------------------------
# Function-style entry points
# ----------------------------------------------------------------------

def aggregate(instruments: Optional[Iterable[Any]], fx_rate: float, now: date) -> PortfolioTotals:
    return PortfolioEngine(ValuationEngine(fx_rate)).aggregate(instruments, now)


def allocation_by_type(instruments: Optional[Iterable[Any]], fx_rate: float, now: date) -> List[AllocationSlice]:
    return PortfolioEngine(ValuationEngine(fx_rate)).allocation_by_type(instruments, now)

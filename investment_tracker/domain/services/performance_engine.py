"""
PERFORMANCE ENGINE
Rank investments by returns percentage

RULES:
❌ Instruments with nothing invested are not ranked
✅ Top 3 always; bottom (up to 3) only with ≥ 4 eligible, never overlapping
✅ Bottom performers listed worst first
"""

from datetime import date
from typing import Any, Iterable, Optional

from investment_tracker.config import Settings
from investment_tracker.domain.models import PerformanceEntry, PerformanceHighlights
from investment_tracker.domain.schemas.investment import parse_investments
from investment_tracker.domain.services.valuation_engine import ValuationEngine

HIGHLIGHT_SIZE = 3
MIN_FOR_BOTTOM = 4


class PerformanceEngine:
    """
    Performance Engine
    Surfaces best and worst performers
    """

    def __init__(self, valuation_engine: Optional[ValuationEngine] = None):
        self.valuation_engine = valuation_engine or ValuationEngine()

    @classmethod
    def from_settings(cls, settings: Settings) -> "PerformanceEngine":
        return cls(ValuationEngine.from_settings(settings))

    def highlights(self, investments: Optional[Iterable[Any]], now: date) -> PerformanceHighlights:
        """
        Best and worst performers

        Args:
            investments: Records or parsed models
            now: Evaluation instant

        Returns:
            PerformanceHighlights; both lists empty for an empty portfolio
        """
        entries = []
        for investment in parse_investments(investments):
            valuation = self.valuation_engine.evaluate(investment, now)
            if valuation.invested <= 0:
                continue
            entries.append(PerformanceEntry(
                investment=investment,
                invested=valuation.invested,
                current=valuation.current,
                returns=valuation.returns,
                returns_percentage=valuation.returns_percentage,
            ))

        ranked = sorted(entries, key=lambda e: e.returns_percentage, reverse=True)

        if len(ranked) < MIN_FOR_BOTTOM:
            return PerformanceHighlights(top_performers=ranked[:HIGHLIGHT_SIZE], bottom_performers=[])

        # Bottom slice never reaches back into the top slice.
        bottom_start = max(HIGHLIGHT_SIZE, len(ranked) - HIGHLIGHT_SIZE)
        return PerformanceHighlights(
            top_performers=ranked[:HIGHLIGHT_SIZE],
            bottom_performers=list(reversed(ranked[bottom_start:])),
        )


def highlights(instruments: Optional[Iterable[Any]], fx_rate: float, now: date) -> PerformanceHighlights:
    return PerformanceEngine(ValuationEngine(fx_rate)).highlights(instruments, now)

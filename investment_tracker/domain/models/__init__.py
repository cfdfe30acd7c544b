"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Enums
    CompoundingFrequency,
    Denomination,
    FieldKind,
    InstrumentType,
    PayoutType,
    PolicyType,
    PremiumFrequency,

    # Metadata
    FieldSpec,
    InstrumentTypeSpec,
)
from .interest import (
    InterestAttribution,
    MonthlyInterest,
    YearlyInterest,
)
from .portfolio import (
    AllocationSlice,
    InstrumentSummary,
    PerformanceEntry,
    PerformanceHighlights,
    PortfolioTotals,
    TypeReport,
    Valuation,
)

__all__ = [
    # Enums
    "CompoundingFrequency",
    "Denomination",
    "FieldKind",
    "InstrumentType",
    "PayoutType",
    "PolicyType",
    "PremiumFrequency",

    # Metadata
    "FieldSpec",
    "InstrumentTypeSpec",

    # Results
    "AllocationSlice",
    "InstrumentSummary",
    "InterestAttribution",
    "MonthlyInterest",
    "PerformanceEntry",
    "PerformanceHighlights",
    "PortfolioTotals",
    "TypeReport",
    "Valuation",
    "YearlyInterest",
]

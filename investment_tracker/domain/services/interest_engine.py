"""
INTEREST ENGINE
Attribute interest earned by interest-bearing investments to calendar
years and months

RESPONSIBILITIES:
- Derive each instrument's active window
- Intersect it with the reporting window
- Apply the instrument's accrual rule to the overlap only

RULES:
❌ No wall-clock reads (the current month is clipped to the given now)
❌ Market-priced instruments never contribute
❌ No exceptions for bad records (missing or inverted dates → skipped)
✅ Reporting windows are half-open, the active window end is inclusive
✅ Compounding exponents are measured from the instrument's own start
"""

import calendar
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, date
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from investment_tracker.config import Settings
from investment_tracker.core.logging import get_logger
from investment_tracker.domain.models import (
    CompoundingFrequency,
    Denomination,
    InstrumentType,
    InterestAttribution,
    MonthlyInterest,
    YearlyInterest,
)
from investment_tracker.domain.schemas.investment import (
    Bond,
    CertificateBase,
    InvestmentBase,
    MahilaSammanCertificate,
    PostOfficeMIS,
    PostOfficeSavings,
    PostOfficeSCSS,
    ProvidentFundBase,
    SovereignGoldBond,
    parse_investments,
)
from investment_tracker.domain.services.currency_engine import CurrencyEngine
from investment_tracker.domain.services.dispatch import exhaustive
from investment_tracker.domain.services.registry_engine import RegistryEngine
from investment_tracker.domain.services.valuation_engine import (
    certificate_maturity_amount,
    compound_balance,
    fd_frequency,
    interpolate_certificate,
    rd_maturity_value,
    rd_tenure_months,
    simulate_contributions,
    term_deposit_maturity,
)
from investment_tracker.utils.day_count import (
    add_months,
    intersect,
    month_window,
    months_between,
    whole_months_between,
    year_window,
    years_between,
)
from investment_tracker.utils.formatting import format_inr
from investment_tracker.utils.time import as_ist_date

logger = get_logger(__name__)

Window = Tuple[Optional[date], Optional[date]]
Accrual = Tuple[float, str]

MONTH_NAMES = [calendar.month_abbr[m] for m in range(1, 13)]

# Reporting windows end on Jan 1 of the following year, which must exist.
FIRST_YEAR = MINYEAR
LAST_YEAR = MAXYEAR - 1


@dataclass(frozen=True)
class AccrualRule:
    """Active window plus the interest earned on a sub-window of it."""
    window: Callable[[Any], Window]
    accrue: Callable[[Any, date, date], Accrual]


# ======================================================================
# Active windows
# ======================================================================

def _term_window(inv: Any) -> Window:
    return inv.start_date, inv.maturity_date


def _term_deposit_window(inv: Any) -> Window:
    return inv.start_date, term_deposit_maturity(inv)


def _rd_window(inv: Any) -> Window:
    maturity = inv.maturity_date
    tenure = rd_tenure_months(inv)
    if maturity is None and inv.start_date is not None and tenure:
        maturity = add_months(inv.start_date, tenure)
    return inv.start_date, maturity


def _provident_fund_window(inv: ProvidentFundBase) -> Window:
    return inv.start_date, inv.last_updated or inv.maturity_date


def _savings_window(inv: PostOfficeSavings) -> Window:
    return inv.opening_date, inv.last_updated


def _certificate_window(inv: CertificateBase) -> Window:
    return inv.purchase_date, inv.maturity_date


def _mssc_window(inv: MahilaSammanCertificate) -> Window:
    return inv.deposit_date, inv.maturity_date


def _bond_window(inv: Bond) -> Window:
    return inv.issue_date, inv.maturity_date


def _sgb_window(inv: SovereignGoldBond) -> Window:
    return inv.purchase_date, inv.maturity_date


# ======================================================================
# Accrual over [start, end] of the overlap
# ======================================================================

def _flat(base: float, rate: float, start: date, end: date, label: str) -> Accrual:
    years = years_between(start, end)
    interest = base * rate / 100 * years
    return interest, f"{label}: {format_inr(base)} × {rate:g}% × {years:.2f} yrs"


def _compounded(inv: Any, origin: date, frequency: CompoundingFrequency, start: date, end: date) -> Accrual:
    if not frequency.is_compounding:
        return _flat(inv.principal, inv.interest_rate, start, end, "Principal")
    opening = compound_balance(inv.principal, inv.interest_rate, frequency, years_between(origin, start))
    closing = compound_balance(inv.principal, inv.interest_rate, frequency, years_between(origin, end))
    details = (
        f"Principal: {format_inr(inv.principal)} @ {inv.interest_rate:g}% {frequency.value}, "
        f"{format_inr(opening)} → {format_inr(closing)}"
    )
    return closing - opening, details


def _deposit(inv: Any, start: date, end: date) -> Accrual:
    return _compounded(inv, inv.start_date, fd_frequency(inv), start, end)


def _mssc(inv: MahilaSammanCertificate, start: date, end: date) -> Accrual:
    frequency = CompoundingFrequency.parse(inv.compounding_frequency, default=CompoundingFrequency.QUARTERLY)
    return _compounded(inv, inv.deposit_date, frequency, start, end)


def _recurring_deposit(inv: Any, start: date, end: date) -> Accrual:
    tenure = rd_tenure_months(inv)

    def accrued(on: date) -> float:
        months = whole_months_between(inv.start_date, on)
        if tenure is not None:
            months = min(months, tenure)
        return rd_maturity_value(inv.monthly_deposit, inv.interest_rate, months) - inv.monthly_deposit * months

    interest = accrued(end) - accrued(start)
    return interest, f"Monthly: {format_inr(inv.monthly_deposit)} @ {inv.interest_rate:g}%"


def _provident_fund(inv: ProvidentFundBase, start: date, end: date) -> Accrual:
    months = whole_months_between(start, end)
    _, _, interest = simulate_contributions(inv.balance, inv.contribution_per_month, inv.interest_rate, months)
    details = (
        f"Balance: {format_inr(inv.balance)} + {format_inr(inv.contribution_per_month)}/month "
        f"× {inv.interest_rate:g}% over {months} months"
    )
    return interest, details


def _scss(inv: PostOfficeSCSS, start: date, end: date) -> Accrual:
    return _flat(inv.principal, inv.interest_rate, start, end, "Principal")


def _savings(inv: PostOfficeSavings, start: date, end: date) -> Accrual:
    return _flat(inv.balance, inv.interest_rate, start, end, "Balance")


def _mis(inv: PostOfficeMIS, start: date, end: date) -> Accrual:
    months = min(round(months_between(start, end)), 12)
    return inv.income_per_month * months, f"Monthly income: {format_inr(inv.income_per_month)} × {months} months"


def _certificate(inv: CertificateBase, start: date, end: date) -> Accrual:
    maturity_amount = certificate_maturity_amount(inv)

    def value(on: date) -> float:
        return interpolate_certificate(inv.principal, maturity_amount, inv.purchase_date, inv.maturity_date, on)

    details = f"{format_inr(inv.principal)} → {format_inr(maturity_amount)} at maturity"
    return value(end) - value(start), details


def _bond(inv: Bond, start: date, end: date) -> Accrual:
    return _flat(inv.face_value, inv.coupon_rate, start, end, "Face value")


def _sgb(inv: SovereignGoldBond, start: date, end: date) -> Accrual:
    return _flat(inv.units * inv.issue_price, inv.interest_rate, start, end, "Issue value")


_RULES: Dict[InstrumentType, Optional[AccrualRule]] = exhaustive(
    {
        InstrumentType.EPF: AccrualRule(_provident_fund_window, _provident_fund),
        InstrumentType.PPF: AccrualRule(_provident_fund_window, _provident_fund),
        InstrumentType.NPS: AccrualRule(_provident_fund_window, _provident_fund),
        InstrumentType.FIXED_DEPOSIT: AccrualRule(_term_window, _deposit),
        InstrumentType.POST_OFFICE_TD: AccrualRule(_term_deposit_window, _deposit),
        InstrumentType.RECURRING_DEPOSIT: AccrualRule(_rd_window, _recurring_deposit),
        InstrumentType.POST_OFFICE_RD: AccrualRule(_rd_window, _recurring_deposit),
        InstrumentType.POST_OFFICE_SCSS: AccrualRule(_term_window, _scss),
        InstrumentType.POST_OFFICE_SAVINGS: AccrualRule(_savings_window, _savings),
        InstrumentType.POST_OFFICE_MIS: AccrualRule(_term_window, _mis),
        InstrumentType.POST_OFFICE_KVP: AccrualRule(_certificate_window, _certificate),
        InstrumentType.POST_OFFICE_NSC: AccrualRule(_certificate_window, _certificate),
        InstrumentType.POST_OFFICE_MSSC: AccrualRule(_mssc_window, _mssc),
        InstrumentType.BONDS: AccrualRule(_bond_window, _bond),
        InstrumentType.SGB: AccrualRule(_sgb_window, _sgb),
        # Market-priced or policy-valued: no interest to attribute
        InstrumentType.PHYSICAL_GOLD: None,
        InstrumentType.MUTUAL_FUND: None,
        InstrumentType.STOCKS: None,
        InstrumentType.US_STOCKS: None,
        InstrumentType.RSU: None,
        InstrumentType.ESPP: None,
        InstrumentType.CRYPTOCURRENCY: None,
        InstrumentType.REAL_ESTATE: None,
        InstrumentType.INSURANCE: None,
        InstrumentType.OTHER: None,
    },
    "InterestEngine",
)


def _reporting_year(year: Any) -> Optional[int]:
    """Coerce a year argument (int or numeric string); None when unusable."""
    try:
        year = int(year)
    except (TypeError, ValueError, OverflowError):
        logger.debug("Ignoring non-numeric year %r", year)
        return None
    if not FIRST_YEAR <= year <= LAST_YEAR:
        logger.debug("Ignoring out-of-range year %d", year)
        return None
    return year


class InterestEngine:
    """
    Interest Engine
    Splits interest income into calendar years and months
    """

    def __init__(self, registry: Optional[RegistryEngine] = None, currency: Optional[CurrencyEngine] = None):
        """
        Args:
            registry: Loaded registry used for breakdown display names
            currency: Converts attributed interest into the reporting
                currency; amounts stay in INR without one
        """
        self.registry = registry
        self.currency = currency

    @classmethod
    def from_settings(cls, settings: Settings) -> "InterestEngine":
        return cls(RegistryEngine.from_settings(settings), CurrencyEngine.from_settings(settings))

    def _name(self, investment: InvestmentBase) -> str:
        if self.registry is not None:
            return self.registry.display_name(investment)
        return investment.investment_name or investment.type

    def _reported(self, inr_amount: float) -> float:
        if self.currency is None:
            return inr_amount
        return self.currency.to_reporting(inr_amount, Denomination.INR)

    def attribute(self, investment: InvestmentBase, window_start: date, window_end: date) -> Optional[InterestAttribution]:
        """
        Interest one investment earned inside [window_start, window_end)

        Returns:
            InterestAttribution, or None when the investment does not
            bear interest or is not active in the window
        """
        kind = investment.instrument_type
        rule = _RULES.get(kind) if kind is not None else None
        if rule is None:
            return None

        active_start, active_end = rule.window(investment)
        if active_start is None or active_end is None:
            logger.debug("Skipping %s %s: missing active window dates", investment.type, investment.id)
            return None

        overlap = intersect(active_start, active_end, window_start, window_end)
        if overlap is None:
            return None

        interest, details = rule.accrue(investment, *overlap)
        return InterestAttribution(
            investment_id=investment.id,
            type=investment.type,
            name=self._name(investment),
            interest=self._reported(interest),
            details=details,
        )

    def _window_total(self, investments: List[InvestmentBase], start: date, end: date) -> List[InterestAttribution]:
        rows = []
        for investment in investments:
            row = self.attribute(investment, start, end)
            if row is not None:
                rows.append(row)
        return rows

    def yearly_interest(self, investments: Optional[Iterable[Any]], year: Any) -> YearlyInterest:
        """
        Interest earned in one calendar year

        Args:
            investments: Records or parsed models
            year: Calendar year (int or numeric string)

        Returns:
            YearlyInterest with a per-instrument breakdown;
            zero total for an unparseable or out-of-range year
        """
        year = _reporting_year(year)
        if year is None:
            return YearlyInterest(year=0, total=0.0)

        start, end = year_window(year)
        breakdown = self._window_total(parse_investments(investments), start, end)
        return YearlyInterest(
            year=year,
            total=sum(row.interest for row in breakdown),
            breakdown=breakdown,
        )

    def yearly_interest_comparison(self, investments: Optional[Iterable[Any]], years: Iterable[Any]) -> List[YearlyInterest]:
        parsed = parse_investments(investments)
        return [self.yearly_interest(parsed, year) for year in years]

    def monthly_interest(self, investments: Optional[Iterable[Any]], year: Any, now: date) -> List[MonthlyInterest]:
        """
        Interest earned in each month of a year

        Args:
            investments: Records or parsed models
            year: Calendar year (int or numeric string)
            now: Evaluation instant; later months are tagged future

        Returns:
            Twelve MonthlyInterest rows, January first;
            empty for an unparseable or out-of-range year
        """
        year = _reporting_year(year)
        if year is None:
            return []

        today = as_ist_date(now)
        parsed = parse_investments(investments)

        months = []
        for month in range(1, 13):
            start, end = month_window(year, month)
            if start > today:
                months.append(MonthlyInterest(month, MONTH_NAMES[month - 1], 0.0, is_future=True))
                continue
            # The current month only accrues up to today.
            end = min(end, today)
            total = sum(row.interest for row in self._window_total(parsed, start, end))
            months.append(MonthlyInterest(month, MONTH_NAMES[month - 1], total))
        return months

    @staticmethod
    def last_n_years(n: int, now: date) -> List[int]:
        """Ascending list of the last n calendar years, ending at now's year."""
        current_year = as_ist_date(now).year
        return [current_year - offset for offset in range(max(0, n) - 1, -1, -1)]

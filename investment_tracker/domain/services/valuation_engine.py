"""
VALUATION ENGINE
Invested amount and present value of a single investment

RESPONSIBILITIES:
- One valuation rule per instrument type
- Clamp every date-based formula to min(now, maturity)
- Convert USD-denominated instruments to INR, then to the reporting currency

RULES:
❌ No wall-clock reads (now is always passed in)
❌ No market data fetching
❌ No exceptions for bad records (unknown type → zero)
✅ Pure functions of (investment, rate, now)
✅ returns = current − invested
"""

import math
from datetime import date
from typing import Any, Callable, Dict, Optional, Tuple

from investment_tracker.config import Settings
from investment_tracker.core.logging import get_logger, setup_logging
from investment_tracker.domain.models import (
    CompoundingFrequency,
    Denomination,
    InstrumentType,
    PayoutType,
    PolicyType,
    PremiumFrequency,
    Valuation,
)
from investment_tracker.domain.schemas.investment import (
    Bond,
    CertificateBase,
    EmployeeStockPurchase,
    FixedDeposit,
    InsurancePolicy,
    InvestmentBase,
    MahilaSammanCertificate,
    MutualFund,
    OtherInvestment,
    PhysicalGold,
    PostOfficeMIS,
    PostOfficeSavings,
    PostOfficeSCSS,
    PostOfficeTD,
    ProvidentFundBase,
    RealEstate,
    RestrictedStockUnit,
    SovereignGoldBond,
    parse_investment,
)
from investment_tracker.domain.services.currency_engine import CurrencyEngine
from investment_tracker.domain.services.dispatch import exhaustive
from investment_tracker.utils.day_count import (
    add_years,
    days_between,
    earlier,
    whole_months_between,
    years_between,
)
from investment_tracker.utils.time import as_ist_date

logger = get_logger(__name__)


# ======================================================================
# Formula family (shared with the interest engine)
# ======================================================================

def compound_balance(
    principal: float,
    annual_rate: float,
    frequency: CompoundingFrequency,
    years: float,
) -> float:
    """
    P·(1 + r/(100n))^(n·t), or P + P·r·t/100 for simple interest.
    """
    years = max(0.0, years)
    if not frequency.is_compounding:
        return simple_balance(principal, annual_rate, years)
    n = frequency.periods_per_year
    return principal * math.pow(1 + annual_rate / (100 * n), n * years)


def simple_balance(principal: float, annual_rate: float, years: float) -> float:
    return principal + principal * annual_rate * max(0.0, years) / 100


def rd_maturity_value(monthly_deposit: float, annual_rate: float, months: float) -> float:
    """
    Post-office RD value after `months` instalments.

    M = R·[(1+i)^q − 1] / [1 − (1+i)^(−1/3)] with i = rate/400 (quarterly)
    and q = months/3. A zero rate degenerates to plain deposits.
    """
    if months <= 0:
        return 0.0
    i = annual_rate / 400
    if i == 0:
        return monthly_deposit * months
    q = months / 3
    return monthly_deposit * (math.pow(1 + i, q) - 1) / (1 - math.pow(1 + i, -1 / 3))


def simulate_contributions(
    opening_balance: float,
    monthly_contribution: float,
    annual_rate: float,
    months: int,
) -> Tuple[float, float, float]:
    """
    Month-by-month provident fund accrual.

    Each month the contribution is credited first, then interest of
    running × rate/1200 is added. Contributions move the base every period,
    so this is not a closed-form compound formula.

    Returns:
        (closing balance, total contributions, total interest)
    """
    running = opening_balance
    contributed = 0.0
    interest = 0.0
    monthly_rate = annual_rate / 1200
    for _ in range(max(0, months)):
        running += monthly_contribution
        contributed += monthly_contribution
        accrued = running * monthly_rate
        running += accrued
        interest += accrued
    return running, contributed, interest


def interpolate_certificate(
    principal: float,
    maturity_amount: float,
    start: Optional[date],
    maturity: Optional[date],
    on: date,
) -> float:
    """
    Linear interpolation from principal (at purchase) to maturity amount.
    """
    if start is None or maturity is None or maturity <= start:
        return principal
    if on <= start:
        return principal
    if on >= maturity:
        return maturity_amount
    elapsed = days_between(start, on) / days_between(start, maturity)
    return principal + (maturity_amount - principal) * elapsed


def certificate_maturity_amount(investment: CertificateBase) -> float:
    """Recorded maturity amount, or principal grown yearly at the stated rate."""
    if investment.maturity_amount > 0:
        return investment.maturity_amount
    start, maturity = investment.purchase_date, investment.maturity_date
    if investment.interest_rate > 0 and start and maturity and maturity > start:
        years = years_between(start, maturity)
        return investment.principal * math.pow(1 + investment.interest_rate / 100, years)
    return investment.principal


def accrual_years(start: Optional[date], maturity: Optional[date], today: date) -> float:
    """Years accrued from start to min(today, maturity); 0 when undefined."""
    if start is None or (maturity is not None and maturity < start):
        return 0.0
    return max(0.0, years_between(start, earlier(today, maturity)))


def accrual_months(start: Optional[date], maturity: Optional[date], today: date) -> int:
    """Whole calendar months from start to min(today, maturity)."""
    if start is None or (maturity is not None and maturity < start):
        return 0
    return whole_months_between(start, earlier(today, maturity))


def fd_frequency(investment: InvestmentBase) -> CompoundingFrequency:
    """Effective compounding for deposits; paid-out interest never compounds."""
    frequency = CompoundingFrequency.parse(
        getattr(investment, "compounding_frequency", None),
        default=CompoundingFrequency.QUARTERLY,
    )
    if PayoutType.parse(getattr(investment, "interest_payout_type", None)) is PayoutType.NON_CUMULATIVE:
        return CompoundingFrequency.SIMPLE
    return frequency


def term_deposit_maturity(investment: PostOfficeTD) -> Optional[date]:
    if investment.maturity_date is not None:
        return investment.maturity_date
    if investment.start_date is not None and investment.tenure > 0:
        return add_years(investment.start_date, investment.tenure)
    return None


def rd_tenure_months(investment: Any) -> Optional[int]:
    if investment.tenure > 0:
        return int(investment.tenure)
    if investment.start_date and investment.maturity_date:
        return whole_months_between(investment.start_date, investment.maturity_date)
    return None


def rd_months_elapsed(investment: Any, today: date) -> int:
    """
    Instalments paid so far, capped at tenure.

    Without a start date the deposit is taken as having run its full tenure.
    """
    tenure = rd_tenure_months(investment)
    if investment.start_date is None:
        return tenure or 0
    months = accrual_months(investment.start_date, investment.maturity_date, today)
    if tenure is not None:
        months = min(months, tenure)
    return months


def provident_fund_months(investment: ProvidentFundBase, today: date) -> int:
    """Months to simulate: from last update (or opening) to min(today, maturity)."""
    anchor = investment.last_updated or investment.start_date
    return accrual_months(anchor, investment.maturity_date, today)


def premiums_paid(investment: InsurancePolicy, today: date) -> int:
    frequency = PremiumFrequency.parse(investment.premium_frequency)
    start, maturity = investment.start_date, investment.maturity_date
    if start is not None and today < start:
        return 0
    step = frequency.months_between_payments
    if step is None or start is None:
        return 1

    paid = accrual_months(start, maturity, today) // step + 1
    if maturity is not None and maturity > start:
        term_payments = max(1, -(-whole_months_between(start, maturity) // step))
        paid = min(paid, term_payments)
    return paid


# ======================================================================
# Per-variant rules: (investment, today) -> (invested, current)
# ======================================================================

def _physical_gold(inv: PhysicalGold, today: date) -> Tuple[float, float]:
    return inv.grams * inv.buy_price, inv.grams * inv.current_price


def _sgb(inv: SovereignGoldBond, today: date) -> Tuple[float, float]:
    return inv.units * inv.issue_price, inv.units * inv.current_price


def _mutual_fund(inv: MutualFund, today: date) -> Tuple[float, float]:
    return inv.units * inv.buy_nav, inv.units * inv.current_nav


def _quantity_priced(inv: Any, today: date) -> Tuple[float, float]:
    return inv.quantity * inv.buy_price, inv.quantity * inv.current_price


def _rsu(inv: RestrictedStockUnit, today: date) -> Tuple[float, float]:
    return inv.units * inv.vesting_price, inv.units * inv.current_price


def _espp(inv: EmployeeStockPurchase, today: date) -> Tuple[float, float]:
    return inv.shares * inv.purchase_price, inv.shares * inv.current_price


def _real_estate(inv: RealEstate, today: date) -> Tuple[float, float]:
    return inv.purchase_price, inv.current_value


def _bond(inv: Bond, today: date) -> Tuple[float, float]:
    # Market-marked: current value is whatever the caller recorded.
    return inv.face_value, inv.current_value


def _other(inv: OtherInvestment, today: date) -> Tuple[float, float]:
    return inv.invested_amount, inv.current_value


def _provident_fund(inv: ProvidentFundBase, today: date) -> Tuple[float, float]:
    months = provident_fund_months(inv, today)
    closing, contributed, _ = simulate_contributions(
        inv.balance, inv.contribution_per_month, inv.interest_rate, months
    )
    return inv.balance + contributed, closing


def _fixed_deposit(inv: FixedDeposit, today: date) -> Tuple[float, float]:
    years = accrual_years(inv.start_date, inv.maturity_date, today)
    return inv.principal, compound_balance(inv.principal, inv.interest_rate, fd_frequency(inv), years)


def _term_deposit(inv: PostOfficeTD, today: date) -> Tuple[float, float]:
    years = accrual_years(inv.start_date, term_deposit_maturity(inv), today)
    return inv.principal, compound_balance(inv.principal, inv.interest_rate, fd_frequency(inv), years)


def _recurring_deposit(inv: Any, today: date) -> Tuple[float, float]:
    months = rd_months_elapsed(inv, today)
    return inv.monthly_deposit * months, rd_maturity_value(inv.monthly_deposit, inv.interest_rate, months)


def _scss(inv: PostOfficeSCSS, today: date) -> Tuple[float, float]:
    years = accrual_years(inv.start_date, inv.maturity_date, today)
    return inv.principal, simple_balance(inv.principal, inv.interest_rate, years)


def _mis(inv: PostOfficeMIS, today: date) -> Tuple[float, float]:
    months = accrual_months(inv.start_date, inv.maturity_date, today)
    return inv.principal, inv.principal + inv.income_per_month * months


def _mssc(inv: MahilaSammanCertificate, today: date) -> Tuple[float, float]:
    years = accrual_years(inv.deposit_date, inv.maturity_date, today)
    frequency = CompoundingFrequency.parse(inv.compounding_frequency, default=CompoundingFrequency.QUARTERLY)
    return inv.principal, compound_balance(inv.principal, inv.interest_rate, frequency, years)


def _savings(inv: PostOfficeSavings, today: date) -> Tuple[float, float]:
    return inv.balance, inv.balance


def _certificate(inv: CertificateBase, today: date) -> Tuple[float, float]:
    current = interpolate_certificate(
        inv.principal,
        certificate_maturity_amount(inv),
        inv.purchase_date,
        inv.maturity_date,
        today,
    )
    return inv.principal, current


def _insurance(inv: InsurancePolicy, today: date) -> Tuple[float, float]:
    invested = inv.premium_amount * premiums_paid(inv, today)
    if inv.start_date is not None and today < inv.start_date:
        return invested, 0.0

    if PolicyType.parse(inv.policy_type) is PolicyType.TERM:
        return invested, inv.coverage_amount

    sum_assured = inv.sum_assured or inv.coverage_amount
    years_completed = math.floor(accrual_years(inv.start_date, inv.maturity_date, today))
    current = sum_assured + inv.bonus_rate * (sum_assured / 1000) * years_completed
    if inv.maturity_date is not None and today >= inv.maturity_date:
        current += inv.final_bonus
    return invested, current


_VALUATORS: Dict[InstrumentType, Callable[[Any, date], Tuple[float, float]]] = exhaustive(
    {
        InstrumentType.PHYSICAL_GOLD: _physical_gold,
        InstrumentType.SGB: _sgb,
        InstrumentType.MUTUAL_FUND: _mutual_fund,
        InstrumentType.STOCKS: _quantity_priced,
        InstrumentType.US_STOCKS: _quantity_priced,
        InstrumentType.CRYPTOCURRENCY: _quantity_priced,
        InstrumentType.RSU: _rsu,
        InstrumentType.ESPP: _espp,
        InstrumentType.REAL_ESTATE: _real_estate,
        InstrumentType.BONDS: _bond,
        InstrumentType.OTHER: _other,
        InstrumentType.EPF: _provident_fund,
        InstrumentType.PPF: _provident_fund,
        InstrumentType.NPS: _provident_fund,
        InstrumentType.FIXED_DEPOSIT: _fixed_deposit,
        InstrumentType.POST_OFFICE_TD: _term_deposit,
        InstrumentType.RECURRING_DEPOSIT: _recurring_deposit,
        InstrumentType.POST_OFFICE_RD: _recurring_deposit,
        InstrumentType.POST_OFFICE_SCSS: _scss,
        InstrumentType.POST_OFFICE_MIS: _mis,
        InstrumentType.POST_OFFICE_MSSC: _mssc,
        InstrumentType.POST_OFFICE_SAVINGS: _savings,
        InstrumentType.POST_OFFICE_KVP: _certificate,
        InstrumentType.POST_OFFICE_NSC: _certificate,
        InstrumentType.INSURANCE: _insurance,
    },
    "ValuationEngine",
)

DENOMINATIONS: Dict[InstrumentType, Denomination] = exhaustive(
    {
        kind: (
            Denomination.USD
            if kind in (
                InstrumentType.US_STOCKS,
                InstrumentType.RSU,
                InstrumentType.ESPP,
                InstrumentType.CRYPTOCURRENCY,
            )
            else Denomination.INR
        )
        for kind in InstrumentType
    },
    "DENOMINATIONS",
)


class ValuationEngine:
    """
    Valuation Engine
    Values one investment at an explicit instant, in the reporting currency
    """

    def __init__(self, usd_to_inr_rate: float = 83.0, reporting_currency: str = "INR"):
        """
        Args:
            usd_to_inr_rate: INR per 1 USD for USD-denominated instruments
            reporting_currency: "INR" or "USD"; every amount returned is in it
        """
        self.currency = CurrencyEngine(usd_to_inr_rate=usd_to_inr_rate, reporting_currency=reporting_currency)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ValuationEngine":
        setup_logging(app_settings=settings)
        return cls(usd_to_inr_rate=settings.usd_to_inr_rate, reporting_currency=settings.currency)

    @property
    def usd_to_inr_rate(self) -> float:
        return self.currency.usd_to_inr_rate

    def evaluate(self, investment: Any, now: date) -> Valuation:
        """
        Value an investment

        Args:
            investment: Parsed model or raw record dict
            now: Evaluation instant (date or datetime)

        Returns:
            Valuation in the reporting currency; zero for unknown types
        """
        investment = parse_investment(investment)
        kind = investment.instrument_type
        if kind is None:
            logger.debug("No valuation rule for type %r", investment.type)
            return Valuation(invested=0.0, current=0.0)

        invested, current = _VALUATORS[kind](investment, as_ist_date(now))
        denomination = DENOMINATIONS[kind]
        return Valuation(
            invested=self.currency.to_reporting(invested, denomination),
            current=self.currency.to_reporting(current, denomination),
        )

    def invested_amount(self, investment: Any, now: date) -> float:
        return self.evaluate(investment, now).invested

    def current_value(self, investment: Any, now: date) -> float:
        return self.evaluate(investment, now).current

    def returns(self, investment: Any, now: date) -> float:
        return self.evaluate(investment, now).returns

    def returns_percentage(self, investment: Any, now: date) -> float:
        return self.evaluate(investment, now).returns_percentage


# ----------------------------------------------------------------------
# Function-style entry points
# ----------------------------------------------------------------------

def invested_amount(instrument: Any, fx_rate: float, now: date) -> float:
    return ValuationEngine(fx_rate).invested_amount(instrument, now)


def current_value(instrument: Any, fx_rate: float, now: date) -> float:
    return ValuationEngine(fx_rate).current_value(instrument, now)


def returns(instrument: Any, fx_rate: float, now: date) -> float:
    return ValuationEngine(fx_rate).returns(instrument, now)


def returns_percentage(instrument: Any, fx_rate: float, now: date) -> float:
    return ValuationEngine(fx_rate).returns_percentage(instrument, now)

"""
Investment record schemas.

Records arrive from the persistence layer as camelCase dicts. Each variant is
a frozen pydantic model discriminated on ``type``; parsing is lenient so that
partially filled records never raise (missing numbers become 0, malformed
dates become None, unknown types become UnknownInvestment).
"""

import math
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, Iterable, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from investment_tracker.core.logging import get_logger
from investment_tracker.domain.models import InstrumentType
from investment_tracker.utils.time import parse_date

logger = get_logger(__name__)


def _to_amount(value: Any) -> float:
    """Numbers default to 0; negatives, NaN and infinities are clamped to 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _to_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


Amount = Annotated[float, BeforeValidator(_to_amount)]
LooseDate = Annotated[Optional[date], BeforeValidator(parse_date)]
LooseText = Annotated[Optional[str], BeforeValidator(_to_text)]
Timestamp = Annotated[Optional[datetime], BeforeValidator(_to_timestamp)]


class InvestmentBase(BaseModel):
    """Attributes shared by every variant"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    id: Annotated[str, BeforeValidator(lambda v: "" if v is None else str(v))] = ""
    investment_name: LooseText = None
    notes: LooseText = None
    created_at: Timestamp = None
    updated_at: Timestamp = None

    @property
    def instrument_type(self) -> Optional[InstrumentType]:
        return InstrumentType.lookup(getattr(self, "type", None))


# ----------------------------------------------------------------------
# Market-priced instruments
# ----------------------------------------------------------------------

class PhysicalGold(InvestmentBase):
    type: Literal["PHYSICAL_GOLD"] = "PHYSICAL_GOLD"
    purity: LooseText = None
    grams: Amount = 0.0
    buy_price: Amount = 0.0
    current_price: Amount = 0.0
    purchase_date: LooseDate = None


class SovereignGoldBond(InvestmentBase):
    type: Literal["SGB"] = "SGB"
    units: Amount = 0.0
    issue_price: Amount = 0.0
    current_price: Amount = 0.0
    interest_rate: Amount = 0.0
    purchase_date: LooseDate = None
    maturity_date: LooseDate = None


class MutualFund(InvestmentBase):
    type: Literal["MUTUAL_FUND"] = "MUTUAL_FUND"
    fund_name: LooseText = None
    units: Amount = 0.0
    buy_nav: Amount = 0.0
    current_nav: Amount = 0.0
    purchase_date: LooseDate = None
    folio_number: LooseText = None


class Stock(InvestmentBase):
    type: Literal["STOCKS"] = "STOCKS"
    stock_name: LooseText = None
    symbol: LooseText = None
    quantity: Amount = 0.0
    buy_price: Amount = 0.0
    current_price: Amount = 0.0
    purchase_date: LooseDate = None


class USStock(InvestmentBase):
    type: Literal["US_STOCKS"] = "US_STOCKS"
    stock_name: LooseText = None
    symbol: LooseText = None
    quantity: Amount = 0.0
    buy_price: Amount = 0.0
    current_price: Amount = 0.0
    purchase_date: LooseDate = None


class RestrictedStockUnit(InvestmentBase):
    type: Literal["RSU"] = "RSU"
    company_name: LooseText = None
    units: Amount = 0.0
    vesting_price: Amount = 0.0
    current_price: Amount = 0.0
    vesting_date: LooseDate = None


class EmployeeStockPurchase(InvestmentBase):
    type: Literal["ESPP"] = "ESPP"
    company_name: LooseText = None
    shares: Amount = 0.0
    purchase_price: Amount = 0.0
    current_price: Amount = 0.0
    purchase_date: LooseDate = None


class Cryptocurrency(InvestmentBase):
    type: Literal["CRYPTOCURRENCY"] = "CRYPTOCURRENCY"
    coin_name: LooseText = None
    symbol: LooseText = None
    quantity: Amount = 0.0
    buy_price: Amount = 0.0
    current_price: Amount = 0.0
    purchase_date: LooseDate = None


class RealEstate(InvestmentBase):
    type: Literal["REAL_ESTATE"] = "REAL_ESTATE"
    property_name: LooseText = None
    property_type: LooseText = None
    purchase_price: Amount = 0.0
    current_value: Amount = 0.0
    purchase_date: LooseDate = None


class Bond(InvestmentBase):
    type: Literal["BONDS"] = "BONDS"
    bond_name: LooseText = None
    face_value: Amount = 0.0
    coupon_rate: Amount = 0.0
    current_value: Amount = 0.0
    issue_date: LooseDate = None
    maturity_date: LooseDate = None


class OtherInvestment(InvestmentBase):
    type: Literal["OTHER"] = "OTHER"
    invested_amount: Amount = 0.0
    current_value: Amount = 0.0
    purchase_date: LooseDate = None


# ----------------------------------------------------------------------
# Provident and pension funds
# ----------------------------------------------------------------------

class ProvidentFundBase(InvestmentBase):
    balance: Amount = 0.0
    monthly_contribution: Amount = 0.0
    interest_rate: Amount = 0.0
    start_date: LooseDate = None
    last_updated: LooseDate = None
    maturity_date: LooseDate = None

    @property
    def contribution_per_month(self) -> float:
        return self.monthly_contribution


class EmployeeProvidentFund(ProvidentFundBase):
    type: Literal["EPF"] = "EPF"
    compounding_frequency: LooseText = None


class PublicProvidentFund(ProvidentFundBase):
    type: Literal["PPF"] = "PPF"
    yearly_contribution: Amount = 0.0

    @property
    def contribution_per_month(self) -> float:
        if self.monthly_contribution:
            return self.monthly_contribution
        return self.yearly_contribution / 12.0


class NationalPensionScheme(ProvidentFundBase):
    type: Literal["NPS"] = "NPS"
    pran_number: LooseText = None


# ----------------------------------------------------------------------
# Deposits and post-office schemes
# ----------------------------------------------------------------------

class FixedDeposit(InvestmentBase):
    type: Literal["FIXED_DEPOSIT"] = "FIXED_DEPOSIT"
    principal: Amount = 0.0
    interest_rate: Amount = 0.0
    compounding_frequency: LooseText = None
    interest_payout_type: LooseText = None
    bank_name: LooseText = None
    start_date: LooseDate = None
    maturity_date: LooseDate = None


class RecurringDeposit(InvestmentBase):
    type: Literal["RECURRING_DEPOSIT"] = "RECURRING_DEPOSIT"
    monthly_deposit: Amount = 0.0
    interest_rate: Amount = 0.0
    compounding_frequency: LooseText = None
    tenure: Amount = 0.0
    bank_name: LooseText = None
    start_date: LooseDate = None
    maturity_date: LooseDate = None


class PostOfficeRD(InvestmentBase):
    type: Literal["POST_OFFICE_RD"] = "POST_OFFICE_RD"
    monthly_deposit: Amount = 0.0
    interest_rate: Amount = 0.0
    compounding_frequency: LooseText = None
    tenure: Amount = 0.0
    start_date: LooseDate = None
    maturity_date: LooseDate = None
    account_number: LooseText = None


class PostOfficeSCSS(InvestmentBase):
    type: Literal["POST_OFFICE_SCSS"] = "POST_OFFICE_SCSS"
    principal: Amount = 0.0
    interest_rate: Amount = 0.0
    compounding_frequency: LooseText = None
    start_date: LooseDate = None
    maturity_date: LooseDate = None
    account_number: LooseText = None


class PostOfficeSavings(InvestmentBase):
    type: Literal["POST_OFFICE_SAVINGS"] = "POST_OFFICE_SAVINGS"
    balance: Amount = 0.0
    interest_rate: Amount = 0.0
    opening_date: LooseDate = None
    last_updated: LooseDate = None
    account_number: LooseText = None


class PostOfficeMIS(InvestmentBase):
    type: Literal["POST_OFFICE_MIS"] = "POST_OFFICE_MIS"
    principal: Amount = 0.0
    interest_rate: Amount = 0.0
    monthly_income: Amount = 0.0
    start_date: LooseDate = None
    maturity_date: LooseDate = None
    account_number: LooseText = None

    @property
    def income_per_month(self) -> float:
        if self.monthly_income:
            return self.monthly_income
        return self.principal * self.interest_rate / 1200.0


class CertificateBase(InvestmentBase):
    principal: Amount = 0.0
    interest_rate: Amount = 0.0
    maturity_amount: Amount = 0.0
    purchase_date: LooseDate = None
    maturity_date: LooseDate = None
    certificate_number: LooseText = None


class KisanVikasPatra(CertificateBase):
    type: Literal["POST_OFFICE_KVP"] = "POST_OFFICE_KVP"


class NationalSavingsCertificate(CertificateBase):
    type: Literal["POST_OFFICE_NSC"] = "POST_OFFICE_NSC"


class PostOfficeTD(InvestmentBase):
    type: Literal["POST_OFFICE_TD"] = "POST_OFFICE_TD"
    principal: Amount = 0.0
    interest_rate: Amount = 0.0
    compounding_frequency: LooseText = None
    tenure: Amount = 0.0
    start_date: LooseDate = None
    maturity_date: LooseDate = None
    account_number: LooseText = None


class MahilaSammanCertificate(InvestmentBase):
    type: Literal["POST_OFFICE_MSSC"] = "POST_OFFICE_MSSC"
    principal: Amount = 0.0
    interest_rate: Amount = 0.0
    compounding_frequency: LooseText = None
    deposit_date: LooseDate = None
    maturity_date: LooseDate = None
    account_number: LooseText = None


class InsurancePolicy(InvestmentBase):
    type: Literal["INSURANCE"] = "INSURANCE"
    policy_name: LooseText = None
    policy_number: LooseText = None
    policy_type: LooseText = None
    premium_amount: Amount = 0.0
    premium_frequency: LooseText = None
    sum_assured: Amount = 0.0
    coverage_amount: Amount = 0.0
    bonus_rate: Amount = 0.0
    final_bonus: Amount = 0.0
    start_date: LooseDate = None
    maturity_date: LooseDate = None


class UnknownInvestment(InvestmentBase):
    """Placeholder for records whose type is missing or not supported"""

    type: Annotated[str, BeforeValidator(lambda v: "" if v is None else str(v))] = ""

    @property
    def instrument_type(self) -> Optional[InstrumentType]:
        return None


KnownInvestment = Annotated[
    Union[
        PhysicalGold,
        SovereignGoldBond,
        EmployeeProvidentFund,
        PublicProvidentFund,
        NationalPensionScheme,
        FixedDeposit,
        RecurringDeposit,
        MutualFund,
        Stock,
        USStock,
        RestrictedStockUnit,
        EmployeeStockPurchase,
        RealEstate,
        Cryptocurrency,
        Bond,
        InsurancePolicy,
        PostOfficeRD,
        PostOfficeSCSS,
        PostOfficeSavings,
        PostOfficeMIS,
        KisanVikasPatra,
        PostOfficeTD,
        NationalSavingsCertificate,
        MahilaSammanCertificate,
        OtherInvestment,
    ],
    Field(discriminator="type"),
]

Investment = Union[KnownInvestment, UnknownInvestment]

_adapter = TypeAdapter(KnownInvestment)


def parse_investment(record: Any) -> InvestmentBase:
    """
    Convert a stored record into its variant model.

    Already-parsed models are returned unchanged. Anything that cannot be
    matched to a known variant becomes an UnknownInvestment.
    """
    if isinstance(record, InvestmentBase):
        return record
    if not isinstance(record, Mapping):
        logger.debug("Ignoring non-mapping investment record: %r", type(record).__name__)
        return UnknownInvestment()

    data = dict(record)
    if isinstance(data.get("type"), Enum):
        data["type"] = data["type"].value

    try:
        return _adapter.validate_python(data)
    except ValidationError:
        logger.debug("Unsupported investment type %r for id=%r", record.get("type"), record.get("id"))
        return UnknownInvestment.model_validate(
            {"id": record.get("id"), "type": record.get("type")}
        )


def parse_investments(records: Optional[Iterable[Any]]) -> List[InvestmentBase]:
    """Parse a snapshot of records, preserving order"""
    if not records:
        return []
    return [parse_investment(record) for record in records]

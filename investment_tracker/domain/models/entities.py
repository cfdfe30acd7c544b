"""
Domain Models - Entities
Pure domain objects with no infrastructure dependencies
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class InstrumentType(str, Enum):
    """Closed set of supported investment variants"""
    PHYSICAL_GOLD = "PHYSICAL_GOLD"
    SGB = "SGB"
    EPF = "EPF"
    PPF = "PPF"
    NPS = "NPS"
    FIXED_DEPOSIT = "FIXED_DEPOSIT"
    RECURRING_DEPOSIT = "RECURRING_DEPOSIT"
    MUTUAL_FUND = "MUTUAL_FUND"
    STOCKS = "STOCKS"
    US_STOCKS = "US_STOCKS"
    RSU = "RSU"
    ESPP = "ESPP"
    REAL_ESTATE = "REAL_ESTATE"
    CRYPTOCURRENCY = "CRYPTOCURRENCY"
    BONDS = "BONDS"
    INSURANCE = "INSURANCE"
    POST_OFFICE_RD = "POST_OFFICE_RD"
    POST_OFFICE_SCSS = "POST_OFFICE_SCSS"
    POST_OFFICE_SAVINGS = "POST_OFFICE_SAVINGS"
    POST_OFFICE_MIS = "POST_OFFICE_MIS"
    POST_OFFICE_KVP = "POST_OFFICE_KVP"
    POST_OFFICE_TD = "POST_OFFICE_TD"
    POST_OFFICE_NSC = "POST_OFFICE_NSC"
    POST_OFFICE_MSSC = "POST_OFFICE_MSSC"
    OTHER = "OTHER"

    @classmethod
    def lookup(cls, value: object) -> Optional["InstrumentType"]:
        """Enum member for a discriminator, None when unknown"""
        try:
            return cls(value)
        except ValueError:
            return None


class Denomination(str, Enum):
    """Currency an instrument's prices are recorded in"""
    INR = "INR"
    USD = "USD"


class CompoundingFrequency(str, Enum):
    """Interest capitalisation schedule"""
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    HALF_YEARLY = "half-yearly"
    YEARLY = "yearly"
    SIMPLE = "simple"

    @property
    def periods_per_year(self) -> int:
        return _PERIODS_PER_YEAR[self]

    @property
    def is_compounding(self) -> bool:
        return self is not CompoundingFrequency.SIMPLE

    @classmethod
    def parse(
        cls,
        value: Optional[str],
        default: "CompoundingFrequency",
    ) -> "CompoundingFrequency":
        """Tolerant parse; unknown or blank values fall back to default"""
        if not value:
            return default
        key = value.strip().lower()
        return _FREQUENCY_ALIASES.get(key, default)


_PERIODS_PER_YEAR = {
    CompoundingFrequency.MONTHLY: 12,
    CompoundingFrequency.QUARTERLY: 4,
    CompoundingFrequency.HALF_YEARLY: 2,
    CompoundingFrequency.YEARLY: 1,
    CompoundingFrequency.SIMPLE: 1,
}

_FREQUENCY_ALIASES = {
    "monthly": CompoundingFrequency.MONTHLY,
    "quarterly": CompoundingFrequency.QUARTERLY,
    "half-yearly": CompoundingFrequency.HALF_YEARLY,
    "halfyearly": CompoundingFrequency.HALF_YEARLY,
    "semi-annually": CompoundingFrequency.HALF_YEARLY,
    "yearly": CompoundingFrequency.YEARLY,
    "annually": CompoundingFrequency.YEARLY,
    "simple": CompoundingFrequency.SIMPLE,
}


class PayoutType(str, Enum):
    """Whether deposit interest is reinvested or paid out"""
    CUMULATIVE = "cumulative"
    NON_CUMULATIVE = "non-cumulative"

    @classmethod
    def parse(cls, value: Optional[str]) -> "PayoutType":
        if value and value.strip().lower() == cls.NON_CUMULATIVE.value:
            return cls.NON_CUMULATIVE
        return cls.CUMULATIVE


class PolicyType(str, Enum):
    """Insurance policy family"""
    TERM = "term"
    ENDOWMENT = "endowment"
    MONEYBACK = "moneyback"

    @classmethod
    def parse(cls, value: Optional[str]) -> "PolicyType":
        key = (value or "").strip().lower().replace("-", "").replace(" ", "")
        if key == "term":
            return cls.TERM
        if key == "moneyback":
            return cls.MONEYBACK
        return cls.ENDOWMENT


class PremiumFrequency(str, Enum):
    """How often an insurance premium is paid"""
    SINGLE = "single"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    HALF_YEARLY = "half-yearly"
    YEARLY = "yearly"

    @property
    def months_between_payments(self) -> Optional[int]:
        return {
            PremiumFrequency.SINGLE: None,
            PremiumFrequency.MONTHLY: 1,
            PremiumFrequency.QUARTERLY: 3,
            PremiumFrequency.HALF_YEARLY: 6,
            PremiumFrequency.YEARLY: 12,
        }[self]

    @classmethod
    def parse(cls, value: Optional[str]) -> "PremiumFrequency":
        key = (value or "").strip().lower()
        if key in ("halfyearly", "semi-annually"):
            return cls.HALF_YEARLY
        if key == "annually":
            return cls.YEARLY
        for member in cls:
            if member.value == key:
                return member
        return cls.SINGLE


class FieldKind(str, Enum):
    """Semantic type of an input field"""
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"


@dataclass(frozen=True)
class FieldSpec:
    """One input field of an instrument type"""
    name: str
    label: str
    kind: FieldKind
    required: bool
    options: Tuple[str, ...] = ()


@dataclass(frozen=True)
class InstrumentTypeSpec:
    """Static metadata describing an instrument type"""
    type: InstrumentType
    name: str
    denomination: Denomination
    interest_bearing: bool
    name_field: Optional[str]
    fields: Tuple[FieldSpec, ...] = field(default_factory=tuple)

    @property
    def required_fields(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields if f.required)

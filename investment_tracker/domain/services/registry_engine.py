"""
REGISTRY ENGINE
Load, validate, and expose instrument type metadata

RESPONSIBILITIES:
- Load instrument_types.yml
- Validate that every known variant is described (and nothing else)
- Expose read-only field schemas and per-type summaries

RULES:
❌ No valuation maths here (delegated to ValuationEngine)
✅ Fail fast on invalid config
✅ Unknown type → None / empty schema, never an exception
"""

from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

import yaml

from investment_tracker.config import Settings
from investment_tracker.core.logging import get_logger
from investment_tracker.domain.models import (
    FieldKind,
    FieldSpec,
    InstrumentSummary,
    InstrumentType,
    InstrumentTypeSpec,
    PolicyType,
)
from investment_tracker.domain.schemas.investment import InvestmentBase, parse_investment
from investment_tracker.domain.services.dispatch import exhaustive
from investment_tracker.domain.services.valuation_engine import (
    DENOMINATIONS,
    ValuationEngine,
    rd_tenure_months,
    term_deposit_maturity,
)
from investment_tracker.utils.day_count import months_between, years_between

logger = get_logger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parents[2] / "config"


def _tenure_label(start: Optional[date], end: Optional[date], unit: str = "months") -> str:
    if start is None or end is None or end < start:
        return f"0 {unit}"
    if unit == "quarters":
        return f"{round(years_between(start, end) * 4)} quarters"
    return f"{round(months_between(start, end))} months"


def _count(value: float, unit: str) -> str:
    return f"{value:g} {unit}"


_QUANTITY_LABELS: Dict[InstrumentType, Callable[[Any], str]] = exhaustive(
    {
        InstrumentType.PHYSICAL_GOLD: lambda inv: _count(inv.grams, "grams"),
        InstrumentType.SGB: lambda inv: _count(inv.units, "units"),
        InstrumentType.MUTUAL_FUND: lambda inv: _count(inv.units, "units"),
        InstrumentType.RSU: lambda inv: _count(inv.units, "units"),
        InstrumentType.STOCKS: lambda inv: _count(inv.quantity, "shares"),
        InstrumentType.US_STOCKS: lambda inv: _count(inv.quantity, "shares"),
        InstrumentType.ESPP: lambda inv: _count(inv.shares, "shares"),
        InstrumentType.CRYPTOCURRENCY: lambda inv: _count(inv.quantity, inv.symbol or "coins"),
        InstrumentType.EPF: lambda inv: "EPF Account",
        InstrumentType.PPF: lambda inv: "PPF Account",
        InstrumentType.NPS: lambda inv: "NPS Account",
        InstrumentType.POST_OFFICE_SAVINGS: lambda inv: "Savings Account",
        InstrumentType.FIXED_DEPOSIT: lambda inv: _tenure_label(inv.start_date, inv.maturity_date),
        InstrumentType.POST_OFFICE_TD: lambda inv: _tenure_label(inv.start_date, term_deposit_maturity(inv)),
        InstrumentType.RECURRING_DEPOSIT: lambda inv: f"{rd_tenure_months(inv) or 0} months",
        InstrumentType.POST_OFFICE_RD: lambda inv: f"{rd_tenure_months(inv) or 0} months",
        InstrumentType.POST_OFFICE_SCSS: lambda inv: _tenure_label(inv.start_date, inv.maturity_date, "quarters"),
        InstrumentType.POST_OFFICE_MIS: lambda inv: _tenure_label(inv.start_date, inv.maturity_date),
        InstrumentType.POST_OFFICE_KVP: lambda inv: _tenure_label(inv.purchase_date, inv.maturity_date),
        InstrumentType.POST_OFFICE_NSC: lambda inv: _tenure_label(inv.purchase_date, inv.maturity_date),
        InstrumentType.POST_OFFICE_MSSC: lambda inv: _tenure_label(inv.deposit_date, inv.maturity_date),
        InstrumentType.BONDS: lambda inv: "Bond",
        InstrumentType.REAL_ESTATE: lambda inv: inv.property_type or "Property",
        InstrumentType.INSURANCE: lambda inv: f"{PolicyType.parse(inv.policy_type).value.title()} Policy",
        InstrumentType.OTHER: lambda inv: "Investment",
    },
    "quantity labels",
)


class RegistryEngine:
    """
    Registry Engine
    Single source of truth for instrument type metadata
    """

    def __init__(
        self,
        config_dir: Path = DEFAULT_CONFIG_DIR,
        valuation_engine: Optional[ValuationEngine] = None,
        filename: str = "instrument_types.yml",
    ):
        """Initialize with config directory"""
        self.config_dir = Path(config_dir)
        self.filename = filename
        self.valuation_engine = valuation_engine or ValuationEngine()
        self._types: Dict[InstrumentType, InstrumentTypeSpec] = None

    @classmethod
    def from_settings(cls, settings: Settings, config_dir: Path = DEFAULT_CONFIG_DIR) -> "RegistryEngine":
        registry = cls(
            config_dir=config_dir,
            valuation_engine=ValuationEngine.from_settings(settings),
            filename=settings.INSTRUMENT_TYPES_FILE,
        )
        registry.load_all()
        return registry

    def load_all(self) -> "RegistryEngine":
        """Load and validate instrument_types.yml"""
        types_file = self.config_dir / self.filename
        if not types_file.exists():
            raise FileNotFoundError(f"Instrument type config not found: {types_file}")

        with open(types_file, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        raw_types = data.get('instrument_types')
        if not isinstance(raw_types, dict):
            raise ValueError(f"Invalid instrument type config in {types_file}. Expected 'instrument_types' mapping.")

        types = {}
        for type_id, type_data in raw_types.items():
            kind = InstrumentType.lookup(type_id)
            if kind is None:
                raise ValueError(f"Unknown instrument type in config: {type_id}")
            types[kind] = self._build_spec(kind, type_data)

        missing = [kind.value for kind in InstrumentType if kind not in types]
        if missing:
            raise ValueError(f"Instrument types missing from config: {', '.join(missing)}")

        self._types = types
        logger.debug("Loaded %d instrument types from %s", len(types), types_file)
        return self

    @staticmethod
    def _build_spec(kind: InstrumentType, type_data: Mapping[str, Any]) -> InstrumentTypeSpec:
        fields = []
        for field_data in type_data.get('fields', []):
            try:
                field_kind = FieldKind(field_data['type'])
            except ValueError:
                raise ValueError(f"{kind.value}.{field_data.get('name')}: unknown field type {field_data['type']!r}") from None
            fields.append(FieldSpec(
                name=field_data['name'],
                label=field_data.get('label', field_data['name']),
                kind=field_kind,
                required=bool(field_data.get('required', False)),
                options=tuple(str(o) for o in field_data.get('options', [])),
            ))

        names = [f.name for f in fields]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate field names for {kind.value}")

        return InstrumentTypeSpec(
            type=kind,
            name=type_data['name'],
            denomination=DENOMINATIONS[kind],
            interest_bearing=bool(type_data.get('interest_bearing', False)),
            name_field=type_data.get('name_field'),
            fields=tuple(fields),
        )

    # Public getters

    @property
    def types(self) -> Dict[InstrumentType, InstrumentTypeSpec]:
        if self._types is None:
            raise RuntimeError("Config not loaded. Call load_all() first")
        return self._types

    def type_ids(self) -> List[str]:
        return [kind.value for kind in self.types]

    def get_type(self, type_id: Any) -> Optional[InstrumentTypeSpec]:
        kind = InstrumentType.lookup(type_id)
        if kind is None:
            return None
        return self.types.get(kind)

    def fields(self, type_id: Any) -> List[FieldSpec]:
        spec = self.get_type(type_id)
        if spec is None:
            return []
        return list(spec.fields)

    def is_interest_bearing(self, type_id: Any) -> bool:
        spec = self.get_type(type_id)
        return spec is not None and spec.interest_bearing

    def missing_required_fields(self, record: Mapping[str, Any]) -> List[str]:
        """
        Required fields that are absent or blank in a raw record

        Returns:
            Field names in schema order; empty for unknown types
        """
        spec = self.get_type(record.get('type') if isinstance(record, Mapping) else None)
        if spec is None:
            return []

        missing = []
        for name in spec.required_fields:
            value = record.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing

    def display_name(self, investment: Any) -> str:
        """Record-specific name (fund, bank, company...) with sensible fallbacks"""
        investment = parse_investment(investment)
        spec = self.get_type(getattr(investment, 'type', None))
        if spec is None:
            return "Unknown"

        values = investment.model_dump(by_alias=True)
        for key in (spec.name_field, 'symbol', 'investmentName'):
            if key and values.get(key):
                return str(values[key])
        return spec.name

    def summarize(self, investment: Any, now: date) -> Optional[InstrumentSummary]:
        """
        Quantity label plus invested/current/returns for one investment

        Returns:
            InstrumentSummary, or None when the type is unknown
        """
        investment: InvestmentBase = parse_investment(investment)
        kind = investment.instrument_type
        if kind is None:
            return None

        valuation = self.valuation_engine.evaluate(investment, now)
        return InstrumentSummary(
            quantity_label=_QUANTITY_LABELS[kind](investment),
            invested=valuation.invested,
            current=valuation.current,
            returns=valuation.returns,
        )

"""
Exhaustive per-variant dispatch tables.

Every engine keeps one table keyed by InstrumentType. Tables are checked when
the defining module is imported, so a new variant that some engine forgot to
handle fails at import rather than silently valuing to zero.
"""

from typing import Dict, Mapping, TypeVar

from investment_tracker.domain.models import InstrumentType

T = TypeVar("T")


def exhaustive(table: Mapping[InstrumentType, T], name: str) -> Dict[InstrumentType, T]:
    missing = [kind.value for kind in InstrumentType if kind not in table]
    if missing:
        raise RuntimeError(f"{name} does not handle instrument types: {', '.join(missing)}")
    return dict(table)

import logging
from datetime import date

import pytest

from investment_tracker.domain.services.interest_engine import InterestEngine
from investment_tracker.domain.services.performance_engine import PerformanceEngine
from investment_tracker.domain.services.portfolio_engine import PortfolioEngine
from investment_tracker.domain.services.registry_engine import RegistryEngine
from investment_tracker.domain.services.valuation_engine import ValuationEngine


@pytest.fixture(autouse=True)
def package_logger():
    """Detach handlers added by setup_logging so they never outlive a test"""
    logger = logging.getLogger("investment_tracker")
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def now():
    """Fixed evaluation date"""
    return date(2024, 6, 15)


@pytest.fixture
def valuation_engine():
    return ValuationEngine(usd_to_inr_rate=83.0)


@pytest.fixture(scope="session")
def registry():
    """Registry loaded from the bundled instrument_types.yml"""
    return RegistryEngine().load_all()


@pytest.fixture
def portfolio_engine(valuation_engine, registry):
    return PortfolioEngine(valuation_engine, registry)


@pytest.fixture
def performance_engine(valuation_engine):
    return PerformanceEngine(valuation_engine)


@pytest.fixture
def interest_engine(registry):
    return InterestEngine(registry)


@pytest.fixture
def gold_record():
    return {
        "id": "gold-1",
        "type": "PHYSICAL_GOLD",
        "investmentName": "Coins",
        "grams": 10,
        "buyPrice": 5000,
        "currentPrice": 6000,
    }


@pytest.fixture
def fd_record():
    return {
        "id": "fd-1",
        "type": "FIXED_DEPOSIT",
        "bankName": "SBI",
        "principal": 100000,
        "interestRate": 7,
        "compoundingFrequency": "quarterly",
        "startDate": "2023-01-01",
        "maturityDate": "2024-01-01",
    }


@pytest.fixture
def sample_records(gold_record, fd_record):
    """One record per interesting valuation family"""
    return [
        gold_record,
        fd_record,
        {"id": "mf-1", "type": "MUTUAL_FUND", "fundName": "Index Fund", "units": 100, "buyNav": 300, "currentNav": 400},
        {"id": "us-1", "type": "US_STOCKS", "symbol": "AAPL", "quantity": 10, "buyPrice": 100, "currentPrice": 150},
        {
            "id": "epf-1",
            "type": "EPF",
            "balance": 100000,
            "monthlyContribution": 5000,
            "interestRate": 8.25,
            "startDate": "2015-04-01",
            "lastUpdated": "2024-01-15",
        },
        {
            "id": "rd-1",
            "type": "RECURRING_DEPOSIT",
            "bankName": "HDFC",
            "monthlyDeposit": 5000,
            "interestRate": 6.5,
            "tenure": 12,
            "startDate": "2023-01-01",
            "maturityDate": "2024-01-01",
        },
        {
            "id": "kvp-1",
            "type": "POST_OFFICE_KVP",
            "principal": 100000,
            "maturityAmount": 200000,
            "purchaseDate": "2020-01-01",
            "maturityDate": "2030-01-01",
        },
        {
            "id": "ins-1",
            "type": "INSURANCE",
            "policyName": "Term Cover",
            "policyType": "term",
            "premiumAmount": 10000,
            "premiumFrequency": "yearly",
            "coverageAmount": 5000000,
            "startDate": "2020-06-15",
            "maturityDate": "2040-06-15",
        },
    ]

"""
Unit Tests for InterestEngine

✅ Active window × reporting window intersection
✅ Accrual rule per interest-bearing family
✅ Monthly split with future months
"""

from datetime import date

import pytest

from investment_tracker.config import Settings
from investment_tracker.domain.models import CompoundingFrequency, InstrumentType
from investment_tracker.domain.services import interest_engine as interest_module
from investment_tracker.domain.services.currency_engine import CurrencyEngine
from investment_tracker.domain.services.interest_engine import InterestEngine
from investment_tracker.domain.services.valuation_engine import compound_balance, rd_maturity_value

QUARTERLY = CompoundingFrequency.QUARTERLY


@pytest.fixture
def long_fd():
    return {
        "id": "fd-long",
        "type": "FIXED_DEPOSIT",
        "bankName": "SBI",
        "principal": 100000,
        "interestRate": 7,
        "compoundingFrequency": "quarterly",
        "startDate": "2023-01-01",
        "maturityDate": "2026-01-01",
    }


@pytest.fixture
def payout_fd():
    return {
        "id": "fd-payout",
        "type": "FIXED_DEPOSIT",
        "principal": 100000,
        "interestRate": 12,
        "interestPayoutType": "non-cumulative",
        "startDate": "2020-01-01",
        "maturityDate": "2030-01-01",
    }


class TestYearlyInterest:
    """Interest attributed to one calendar year"""

    def test_compounding_delta_from_instrument_start(self, interest_engine, long_fd):
        result = interest_engine.yearly_interest([long_fd], 2024)

        expected = (
            compound_balance(100000, 7, QUARTERLY, 731 / 365.25)
            - compound_balance(100000, 7, QUARTERLY, 365 / 365.25)
        )
        assert result.year == 2024
        assert result.total == pytest.approx(expected)
        assert len(result.breakdown) == 1
        assert result.breakdown[0].name == "SBI"
        assert "₹" in result.breakdown[0].details

    def test_maturity_mid_year_only_counts_active_part(self, interest_engine):
        record = {
            "type": "FIXED_DEPOSIT",
            "principal": 100000,
            "interestRate": 7,
            "startDate": "2023-07-01",
            "maturityDate": "2024-07-01",
        }

        result = interest_engine.yearly_interest([record], 2024)

        expected = (
            compound_balance(100000, 7, QUARTERLY, 366 / 365.25)
            - compound_balance(100000, 7, QUARTERLY, 184 / 365.25)
        )
        assert result.total == pytest.approx(expected)

    def test_year_outside_active_window(self, interest_engine, long_fd):
        assert interest_engine.yearly_interest([long_fd], 2022).total == 0
        assert interest_engine.yearly_interest([long_fd], 2027).breakdown == []

    def test_non_cumulative_is_flat(self, interest_engine, payout_fd):
        result = interest_engine.yearly_interest([payout_fd], 2024)

        assert result.total == pytest.approx(12000 * 366 / 365.25)

    def test_market_priced_instruments_are_ignored(self, interest_engine, gold_record):
        stock = {"type": "STOCKS", "quantity": 10, "buyPrice": 100, "currentPrice": 200}

        result = interest_engine.yearly_interest([gold_record, stock], 2024)

        assert result.total == 0
        assert result.breakdown == []

    def test_missing_or_inverted_dates_are_skipped(self, interest_engine, long_fd):
        no_maturity = dict(long_fd, maturityDate=None)
        inverted = dict(long_fd, startDate="2026-01-01", maturityDate="2023-01-01")
        malformed = dict(long_fd, startDate="not a date")

        result = interest_engine.yearly_interest([no_maturity, inverted, malformed], 2024)

        assert result.total == 0

    def test_recurring_deposit_accrued_interest(self, interest_engine):
        record = {
            "type": "RECURRING_DEPOSIT",
            "monthlyDeposit": 5000,
            "interestRate": 6.5,
            "tenure": 24,
            "startDate": "2024-01-01",
        }

        result = interest_engine.yearly_interest([record], 2024)

        assert result.total == pytest.approx(rd_maturity_value(5000, 6.5, 12) - 60000)

    def test_provident_fund_simulates_overlap_months(self, interest_engine):
        record = {
            "type": "EPF",
            "balance": 100000,
            "interestRate": 12,
            "startDate": "2015-04-01",
            "lastUpdated": "2025-01-01",
        }

        result = interest_engine.yearly_interest([record], 2024)

        assert result.total == pytest.approx(100000 * (1.01 ** 12 - 1))

    def test_provident_fund_without_end_date_is_skipped(self, interest_engine):
        record = {"type": "PPF", "balance": 100000, "interestRate": 7.1, "startDate": "2015-04-01"}

        assert interest_engine.yearly_interest([record], 2024).total == 0

    def test_mis_counts_whole_months(self, interest_engine):
        record = {
            "type": "POST_OFFICE_MIS",
            "principal": 120000,
            "interestRate": 7.4,
            "startDate": "2024-03-01",
            "maturityDate": "2029-03-01",
        }

        assert interest_engine.yearly_interest([record], 2024).total == pytest.approx(7400)
        assert interest_engine.yearly_interest([record], 2025).total == pytest.approx(740 * 12)

    def test_certificate_interpolation_delta(self, interest_engine):
        record = {
            "type": "POST_OFFICE_KVP",
            "principal": 100000,
            "maturityAmount": 200000,
            "purchaseDate": "2020-01-01",
            "maturityDate": "2030-01-01",
        }

        result = interest_engine.yearly_interest([record], 2024)

        assert result.total == pytest.approx(100000 * 366 / 3653)

    def test_coupon_instruments(self, interest_engine):
        bond = {
            "type": "BONDS",
            "faceValue": 100000,
            "couponRate": 8,
            "issueDate": "2020-01-01",
            "maturityDate": "2030-01-01",
        }
        sgb = {
            "type": "SGB",
            "units": 10,
            "issuePrice": 5000,
            "interestRate": 2.5,
            "purchaseDate": "2021-01-01",
            "maturityDate": "2029-01-01",
        }

        result = interest_engine.yearly_interest([bond, sgb], 2023)

        assert result.total == pytest.approx((8000 + 1250) * 365 / 365.25)
        assert len(result.breakdown) == 2

    def test_savings_window_ends_at_last_update(self, interest_engine):
        record = {
            "type": "POST_OFFICE_SAVINGS",
            "balance": 50000,
            "interestRate": 4,
            "openingDate": "2020-01-01",
            "lastUpdated": "2023-07-02",
        }

        assert interest_engine.yearly_interest([record], 2023).total == pytest.approx(2000 * 182 / 365.25)
        assert interest_engine.yearly_interest([record], 2024).total == 0

    def test_non_numeric_year(self, interest_engine, long_fd):
        assert interest_engine.yearly_interest([long_fd], "abc").total == 0

    def test_string_year_is_accepted(self, interest_engine, long_fd):
        assert interest_engine.yearly_interest([long_fd], "2024").year == 2024

    @pytest.mark.parametrize("year", [0, -5, 9999, "10000"])
    def test_year_outside_calendar_is_zero(self, interest_engine, long_fd, year):
        result = interest_engine.yearly_interest([long_fd], year)

        assert result.year == 0
        assert result.total == 0
        assert result.breakdown == []

    def test_tenure_past_calendar_is_skipped(self, interest_engine):
        records = [
            {
                "type": "RECURRING_DEPOSIT",
                "monthlyDeposit": 5000,
                "interestRate": 6.5,
                "tenure": 200000,
                "startDate": "2023-01-01",
            },
            {
                "type": "POST_OFFICE_TD",
                "principal": 100000,
                "interestRate": 7.5,
                "tenure": 10000,
                "startDate": "2023-01-01",
            },
        ]

        result = interest_engine.yearly_interest(records, 2024)

        assert result.total == 0
        assert result.breakdown == []

    def test_usd_reporting_converts_interest(self, registry, payout_fd):
        engine = InterestEngine(registry, CurrencyEngine(usd_to_inr_rate=80.0, reporting_currency="USD"))

        result = engine.yearly_interest([payout_fd], 2023)

        assert result.total == pytest.approx(12000 * 365 / 365.25 / 80)
        assert result.breakdown[0].interest == pytest.approx(result.total)

    def test_from_settings_reports_in_configured_currency(self, payout_fd):
        engine = InterestEngine.from_settings(Settings(_env_file=None, CURRENCY="USD", USD_TO_INR_RATE=80.0))

        result = engine.yearly_interest([payout_fd], 2023)

        assert result.total == pytest.approx(12000 * 365 / 365.25 / 80)
        assert result.breakdown[0].name


class TestComparisonAndMonths:
    """Multi-year and monthly views"""

    def test_comparison_keeps_year_order(self, interest_engine, payout_fd):
        results = interest_engine.yearly_interest_comparison([payout_fd], [2023, 2024])

        assert [r.year for r in results] == [2023, 2024]
        assert results[0].total == pytest.approx(12000 * 365 / 365.25)

    def test_monthly_interest_splits_current_year(self, interest_engine, payout_fd, now):
        months = interest_engine.monthly_interest([payout_fd], 2024, now)

        assert len(months) == 12
        assert [m.month_name for m in months][:3] == ["Jan", "Feb", "Mar"]
        assert months[0].returns == pytest.approx(12000 * 31 / 365.25)
        # June only accrues up to the 15th.
        assert months[5].returns == pytest.approx(12000 * 14 / 365.25)
        assert all(m.is_future and m.returns == 0 for m in months[6:])
        assert not any(m.is_future for m in months[:6])

    @pytest.mark.parametrize("record_fixture", ["payout_fd", "long_fd"])
    def test_months_add_up_to_year(self, interest_engine, request, record_fixture, now):
        record = request.getfixturevalue(record_fixture)

        months = interest_engine.monthly_interest([record], 2023, now)
        year = interest_engine.yearly_interest([record], 2023)

        assert sum(m.returns for m in months) == pytest.approx(year.total)

    def test_monthly_string_year_is_accepted(self, interest_engine, payout_fd, now):
        assert interest_engine.monthly_interest([payout_fd], "2024", now) == interest_engine.monthly_interest(
            [payout_fd], 2024, now
        )

    @pytest.mark.parametrize("year", ["abc", None, 0, 9999])
    def test_monthly_unusable_year_is_empty(self, interest_engine, payout_fd, year, now):
        assert interest_engine.monthly_interest([payout_fd], year, now) == []

    def test_last_n_years(self, now):
        assert InterestEngine.last_n_years(5, now) == [2020, 2021, 2022, 2023, 2024]
        assert InterestEngine.last_n_years(0, now) == []


class TestRules:
    """Rule table matches the registry"""

    def test_rules_cover_interest_bearing_types(self, registry):
        for kind in InstrumentType:
            has_rule = interest_module._RULES[kind] is not None
            assert has_rule == registry.is_interest_bearing(kind), kind

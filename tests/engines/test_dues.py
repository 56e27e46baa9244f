"""
Tests for per-month dues.

Covers:
- Auction and company month formulas
- Minor-unit rounding
- Winner payout
- Month shortfall on the worked example
- Missing references and invalid auction months
"""

from decimal import Decimal

import pytest

from chitfund_engines.dues import (
    expected_collection,
    month_collected,
    month_shortfall,
    monthly_due,
    participant_monthly_due,
    total_expected_contribution,
    winner_payout,
)
from chitfund_kernel.domain.snapshot import ChitFundSnapshot
from chitfund_kernel.domain.values import RoundingPolicy
from chitfund_kernel.exceptions import (
    InvalidMonthError,
    MonthNotFoundError,
    ParticipantNotFoundError,
    SchemeNotFoundError,
)
from tests.builders import (
    auction_month,
    company_month,
    make_participants,
    make_scheme,
    pay,
    worked_example_snapshot,
)


class TestMonthlyDue:
    """Tests for the foundational due formula."""

    def setup_method(self):
        self.scheme = make_scheme()

    def test_auction_month(self):
        """(500000 + 15000 - 150000) / 20 = 18250."""
        assert monthly_due(self.scheme, auction_month(1)) == Decimal("18250.00")

    def test_company_month(self):
        """500000 / 20 months = 25000."""
        assert monthly_due(self.scheme, company_month(2)) == Decimal("25000.00")

    def test_result_is_quantized_to_paise(self):
        scheme = make_scheme(scheme_value="100000", participants_count=7)
        due = monthly_due(scheme, auction_month(1, auction_amount="10000"))
        # (100000 + 3000 - 10000) / 7 = 13285.714...
        assert due == Decimal("13285.71")
        assert due.as_tuple().exponent == -2

    def test_company_month_rounding(self):
        scheme = make_scheme(scheme_value="100000", duration_months=7)
        assert monthly_due(scheme, company_month(1)) == Decimal("14285.71")

    def test_custom_rounding_policy(self):
        scheme = make_scheme(scheme_value="100000", participants_count=7)
        month = auction_month(1, auction_amount="10000")
        due = monthly_due(scheme, month, RoundingPolicy(decimal_places=0))
        assert due == Decimal("13286")

    def test_auction_without_amount_rejected(self):
        month = auction_month(1, auction_amount=None)
        with pytest.raises(InvalidMonthError) as exc_info:
            monthly_due(self.scheme, month)

        assert exc_info.value.code == "INVALID_MONTH"
        assert exc_info.value.scheme_id == "chit-1"
        assert exc_info.value.month_number == 1

    def test_auction_with_zero_amount_rejected(self):
        with pytest.raises(InvalidMonthError):
            monthly_due(self.scheme, auction_month(1, auction_amount="0"))

    def test_higher_bid_lowers_due(self):
        low = monthly_due(self.scheme, auction_month(1, auction_amount="100000"))
        high = monthly_due(self.scheme, auction_month(1, auction_amount="200000"))
        assert high < low


class TestWinnerPayout:
    """Winner receives scheme value less the bid."""

    def setup_method(self):
        self.scheme = make_scheme()

    def test_auction_month(self):
        assert winner_payout(self.scheme, auction_month(1)) == Decimal("350000")

    def test_company_month_pays_nothing(self):
        assert winner_payout(self.scheme, company_month(1)) == Decimal("0")

    def test_auction_without_bid_pays_nothing(self):
        month = auction_month(1, auction_amount=None)
        assert winner_payout(self.scheme, month) == Decimal("0")


class TestMonthShortfall:
    """Expected collection minus collected, on the month-1 worked example."""

    def setup_method(self):
        self.snapshot = worked_example_snapshot()

    def test_expected_collection(self):
        scheme = self.snapshot.require_scheme("chit-1")
        month = self.snapshot.require_month("chit-1", 1)
        assert expected_collection(scheme, month) == Decimal("365000.00")

    def test_collected(self):
        # 17 x 18250 + 10000 + 18250
        assert month_collected("chit-1", 1, self.snapshot) == Decimal("338500")

    def test_shortfall(self):
        assert month_shortfall("chit-1", 1, self.snapshot) == Decimal("26500.00")

    def test_over_collection_is_negative(self):
        participants = make_participants(count=20)
        payments = tuple(pay(p.id, 1, "20000") for p in participants)
        snapshot = ChitFundSnapshot(
            chits=(make_scheme(),),
            chit_months=(auction_month(1),),
            participants=participants,
            payments=payments,
        )
        assert month_shortfall("chit-1", 1, snapshot) == Decimal("-35000.00")

    def test_unknown_scheme(self):
        with pytest.raises(SchemeNotFoundError) as exc_info:
            month_shortfall("chit-x", 1, self.snapshot)
        assert str(exc_info.value) == "Chit not found: chit-x"

    def test_unknown_month(self):
        with pytest.raises(MonthNotFoundError) as exc_info:
            month_shortfall("chit-1", 2, self.snapshot)
        assert exc_info.value.month_number == 2


class TestContributionAndParticipantDue:
    """Tests for total_expected_contribution and participant_monthly_due."""

    def setup_method(self):
        self.snapshot = ChitFundSnapshot(
            chits=(make_scheme(),),
            chit_months=(company_month(2), auction_month(1)),
            participants=make_participants(),
        )

    def test_total_expected_contribution(self):
        assert total_expected_contribution("chit-1", self.snapshot) == Decimal("43250.00")

    def test_no_months_contributes_nothing(self):
        snapshot = ChitFundSnapshot(chits=(make_scheme(),))
        assert total_expected_contribution("chit-1", snapshot) == Decimal("0")

    def test_invalid_auction_month_propagates(self):
        snapshot = ChitFundSnapshot(
            chits=(make_scheme(),),
            chit_months=(auction_month(1, auction_amount=None),),
        )
        with pytest.raises(InvalidMonthError):
            total_expected_contribution("chit-1", snapshot)

    def test_participant_monthly_due(self):
        assert participant_monthly_due("p05", 1, self.snapshot) == Decimal("18250.00")
        assert participant_monthly_due("p05", 2, self.snapshot) == Decimal("25000.00")

    def test_participant_missing(self):
        with pytest.raises(ParticipantNotFoundError) as exc_info:
            participant_monthly_due("nobody", 1, self.snapshot)
        assert exc_info.value.participant_id == "nobody"

    def test_participant_month_missing(self):
        with pytest.raises(MonthNotFoundError):
            participant_monthly_due("p05", 3, self.snapshot)

    def test_participant_scheme_missing(self):
        snapshot = ChitFundSnapshot(participants=make_participants(count=1))
        with pytest.raises(SchemeNotFoundError):
            participant_monthly_due("p01", 1, snapshot)

"""
Tests for participant ledger reconciliation.

Covers:
- Outstanding (ceiling month, netting of payments made ahead)
- Month status classification
- The advance-payment gate and its write-path guard
"""

from decimal import Decimal

import pytest

from chitfund_engines.dues import total_expected_contribution
from chitfund_engines.ledger import (
    PaymentStatus,
    classify_payment,
    ensure_payment_allowed,
    has_paid_all_previous_months,
    participant_month_paid,
    participant_month_status,
    participant_outstanding,
    participant_payments,
    participant_total_paid,
)
from chitfund_kernel.domain.snapshot import ChitFundSnapshot
from chitfund_kernel.exceptions import (
    AdvancePaymentNotAllowedError,
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


def _two_month_snapshot(*payments):
    """Month 1 auction (due 18250), month 2 company (due 25000)."""
    return ChitFundSnapshot(
        chits=(make_scheme(),),
        chit_months=(auction_month(1), company_month(2)),
        participants=make_participants(),
        payments=payments,
    )


class TestClassifyPayment:
    """Status is an exact comparison against the due."""

    DUE = Decimal("18250.00")

    def test_unpaid(self):
        assert classify_payment(Decimal("0"), self.DUE) is PaymentStatus.UNPAID

    def test_partial(self):
        assert classify_payment(Decimal("10000"), self.DUE) is PaymentStatus.PARTIAL

    def test_paid(self):
        assert classify_payment(Decimal("18250"), self.DUE) is PaymentStatus.PAID

    def test_one_paisa_short_is_partial(self):
        assert classify_payment(Decimal("18249.99"), self.DUE) is PaymentStatus.PARTIAL

    def test_overpaid(self):
        assert classify_payment(Decimal("18250.01"), self.DUE) is PaymentStatus.OVERPAID

    def test_settled_statuses(self):
        assert PaymentStatus.PAID.is_settled
        assert PaymentStatus.OVERPAID.is_settled
        assert not PaymentStatus.PARTIAL.is_settled
        assert not PaymentStatus.UNPAID.is_settled


class TestPaymentTotals:
    """Tests for raw payment aggregation."""

    def test_payments_keep_input_order(self):
        first = pay("p01", 2, "100")
        second = pay("p02", 1, "200")
        third = pay("p01", 1, "300")
        assert participant_payments("p01", [first, second, third]) == (first, third)

    def test_total_paid_spans_months(self):
        payments = [pay("p01", 1, "18250"), pay("p01", 2, "5000"), pay("p02", 1, "1")]
        assert participant_total_paid("p01", payments) == Decimal("23250")

    def test_month_paid_accumulates(self):
        snapshot = _two_month_snapshot(pay("p03", 1, "10000"), pay("p03", 1, "8250"))
        assert participant_month_paid("p03", 1, snapshot) == Decimal("18250")
        assert participant_month_paid("p03", 2, snapshot) == Decimal("0")


class TestParticipantOutstanding:
    """Expected dues up to the ceiling minus everything paid."""

    def setup_method(self):
        self.snapshot = worked_example_snapshot()

    def test_fully_paid_is_zero(self):
        assert participant_outstanding("p01", self.snapshot) == Decimal("0")

    def test_partial_payer(self):
        assert participant_outstanding("p18", self.snapshot) == Decimal("8250.00")

    def test_non_payer(self):
        assert participant_outstanding("p20", self.snapshot) == Decimal("18250.00")

    def test_default_ceiling_is_latest_month(self):
        snapshot = _two_month_snapshot(pay("p02", 1, "18250"))
        assert participant_outstanding("p02", snapshot) == Decimal("25000.00")

    def test_explicit_ceiling(self):
        snapshot = _two_month_snapshot(pay("p02", 1, "18250"))
        assert participant_outstanding("p02", snapshot, up_to_month=1) == Decimal("0")

    def test_paying_ahead_goes_negative(self):
        """Payments tagged beyond the ceiling still count as paid."""
        snapshot = _two_month_snapshot(pay("p02", 1, "18250"), pay("p02", 2, "25000"))
        assert participant_outstanding("p02", snapshot, up_to_month=1) == Decimal("-25000.00")

    def test_scheme_without_months(self):
        snapshot = ChitFundSnapshot(
            chits=(make_scheme(),),
            participants=make_participants(count=1),
            payments=(pay("p01", 1, "500"),),
        )
        assert participant_outstanding("p01", snapshot) == Decimal("-500")

    def test_unknown_participant(self):
        with pytest.raises(ParticipantNotFoundError):
            participant_outstanding("ghost", self.snapshot)

    def test_participant_scheme_missing(self):
        snapshot = ChitFundSnapshot(participants=make_participants(count=1))
        with pytest.raises(SchemeNotFoundError):
            participant_outstanding("p01", snapshot)


class TestParticipantMonthStatus:
    """Status per participant on the worked example."""

    def setup_method(self):
        self.snapshot = worked_example_snapshot()

    def test_statuses(self):
        assert participant_month_status("p01", 1, self.snapshot) is PaymentStatus.PAID
        assert participant_month_status("p18", 1, self.snapshot) is PaymentStatus.PARTIAL
        assert participant_month_status("p20", 1, self.snapshot) is PaymentStatus.UNPAID

    def test_split_payments_reach_paid(self):
        snapshot = _two_month_snapshot(pay("p04", 1, "9000"), pay("p04", 1, "9250"))
        assert participant_month_status("p04", 1, snapshot) is PaymentStatus.PAID

    def test_overpaid(self):
        snapshot = _two_month_snapshot(pay("p04", 1, "20000"))
        assert participant_month_status("p04", 1, snapshot) is PaymentStatus.OVERPAID

    def test_unknown_month(self):
        with pytest.raises(MonthNotFoundError):
            participant_month_status("p01", 5, self.snapshot)


class TestAdvancePaymentGate:
    """has_paid_all_previous_months and ensure_payment_allowed."""

    def test_first_month_is_always_allowed(self):
        snapshot = _two_month_snapshot()
        assert has_paid_all_previous_months("p01", 1, snapshot) is True

    def test_settled_history_allows_next_month(self):
        snapshot = _two_month_snapshot(pay("p01", 1, "18250"))
        assert has_paid_all_previous_months("p01", 2, snapshot) is True

    def test_overpaid_history_allows_next_month(self):
        snapshot = _two_month_snapshot(pay("p01", 1, "19000"))
        assert has_paid_all_previous_months("p01", 2, snapshot) is True

    def test_partial_history_blocks(self):
        snapshot = _two_month_snapshot(pay("p01", 1, "10000"))
        assert has_paid_all_previous_months("p01", 2, snapshot) is False

    def test_unpaid_history_blocks(self):
        snapshot = _two_month_snapshot()
        assert has_paid_all_previous_months("p01", 2, snapshot) is False

    def test_paying_month_two_does_not_settle_month_one(self):
        snapshot = _two_month_snapshot(pay("p01", 2, "50000"))
        assert has_paid_all_previous_months("p01", 2, snapshot) is False

    def test_unknown_participant(self):
        with pytest.raises(ParticipantNotFoundError):
            has_paid_all_previous_months("ghost", 2, _two_month_snapshot())

    def test_guard_allows_settled(self):
        snapshot = _two_month_snapshot(pay("p01", 1, "18250"))
        ensure_payment_allowed("p01", 2, snapshot)

    def test_guard_rejects_with_blocking_month(self):
        snapshot = _two_month_snapshot(pay("p01", 1, "10000"))
        with pytest.raises(AdvancePaymentNotAllowedError) as exc_info:
            ensure_payment_allowed("p01", 2, snapshot)

        error = exc_info.value
        assert error.code == "ADVANCE_PAYMENT_NOT_ALLOWED"
        assert error.participant_id == "p01"
        assert error.month_number == 2
        assert error.blocking_month_number == 1
        assert error.blocking_status == "partial"

    def test_guard_requires_target_month(self):
        with pytest.raises(MonthNotFoundError):
            ensure_payment_allowed("p01", 3, _two_month_snapshot())

    def test_guard_logs_rejection(self, log_capture):
        snapshot = _two_month_snapshot()
        with pytest.raises(AdvancePaymentNotAllowedError):
            ensure_payment_allowed("p07", 2, snapshot)

        rejected = [r for r in log_capture.records() if r["message"] == "advance_payment_rejected"]
        assert len(rejected) == 1
        assert rejected[0]["blocking_status"] == "unpaid"


class TestLedgerIdentity:
    """Outstanding ties back to expected contribution and payments."""

    def test_no_payments_equals_expected_contribution(self):
        snapshot = _two_month_snapshot()
        assert participant_outstanding("p09", snapshot) == total_expected_contribution(
            "chit-1", snapshot
        )

    def test_payment_reduces_outstanding_exactly(self):
        before = participant_outstanding("p09", _two_month_snapshot())
        after = participant_outstanding("p09", _two_month_snapshot(pay("p09", 2, "1234.56")))
        assert before - after == Decimal("1234.56")

"""Structured JSON log lines and context propagation for the chitfund loggers."""

import logging
from datetime import date
from decimal import Decimal

import pytest

from chitfund_kernel.domain.entities import CashMovementType
from chitfund_kernel.exceptions import MonthNotFoundError
from chitfund_kernel.logging_config import (
    LogContext,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _fresh_context():
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def log():
    return get_logger("tests.logging")


class TestRecordShape:

    def test_envelope(self, log, log_capture):
        log.info("month_closed")

        (record,) = log_capture.records()
        assert record["level"] == "INFO"
        assert record["message"] == "month_closed"
        assert record["logger"] == "chitfund.tests.logging"
        assert record["ts"].endswith("+00:00")

    def test_extra_fields_become_keys(self, log, log_capture):
        log.info("collected", extra={"month_number": 3, "status": "partial"})

        (record,) = log_capture.records()
        assert record["month_number"] == 3
        assert record["status"] == "partial"

    def test_money_dates_and_enums_serialized(self, log, log_capture):
        log.info("movement_recorded", extra={
            "amount": Decimal("18250.00"),
            "paid_on": date(2024, 1, 10),
            "movement_type": CashMovementType.WINNER_PAYOUT,
        })

        (record,) = log_capture.records()
        assert record["amount"] == "18250.00"
        assert record["paid_on"] == "2024-01-10"
        assert record["movement_type"] == "winner_payout"

    def test_kernel_error_fields_flattened(self, log, log_capture):
        try:
            raise MonthNotFoundError("chit-1", 4)
        except MonthNotFoundError:
            log.error("month_lookup_failed", exc_info=True)

        (record,) = log_capture.records()
        assert record["exc_type"] == "MonthNotFoundError"
        assert record["exc_code"] == "MONTH_NOT_FOUND"
        assert record["exc_scheme_id"] == "chit-1"
        assert record["exc_month_number"] == 4
        assert "MonthNotFoundError" in record["traceback"]

    def test_plain_error_has_no_code(self, log, log_capture):
        try:
            raise ValueError("boom")
        except ValueError:
            log.error("failed", exc_info=True)

        (record,) = log_capture.records()
        assert record["exc_message"] == "boom"
        assert "exc_code" not in record


class TestLogContext:

    def test_context_merged_into_records(self, log, log_capture):
        LogContext.set(correlation_id="batch-7", scheme_id="chit-1")
        log.info("scheme_opened")

        (record,) = log_capture.records()
        assert record["correlation_id"] == "batch-7"
        assert record["scheme_id"] == "chit-1"
        assert "participant_id" not in record

    def test_extra_does_not_override_context(self, log, log_capture):
        LogContext.set(scheme_id="chit-1")
        log.info("scheme_opened", extra={"scheme_id": "other"})

        (record,) = log_capture.records()
        assert record["scheme_id"] == "chit-1"

    def test_set_is_additive(self):
        LogContext.set(correlation_id="a")
        LogContext.set(participant_id="p07")
        assert LogContext.get_all() == {"correlation_id": "a", "participant_id": "p07"}

    def test_clear(self):
        LogContext.set(correlation_id="x", scheme_id="s", participant_id="p")
        assert len(LogContext.get_all()) == 3
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_restores_previous_value(self):
        LogContext.set(scheme_id="outer")
        with LogContext.bind(scheme_id="inner", participant_id="p01"):
            assert LogContext.get_all() == {"scheme_id": "inner", "participant_id": "p01"}
        assert LogContext.get_all() == {"scheme_id": "outer"}

    def test_bind_restores_after_exception(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(scheme_id="chit-9"):
                raise RuntimeError("abort")
        assert LogContext.get_all() == {}

    def test_bind_rejects_unknown_field(self):
        with pytest.raises(KeyError):
            with LogContext.bind(scheme_id="chit-1", actor_id="clerk"):
                pass
        assert LogContext.get_all() == {}


class TestConfigureLogging:

    def test_first_call_wins(self, log_capture):
        configure_logging(handler=logging.NullHandler())
        assert len(logging.getLogger("chitfund").handlers) == 1

    def test_reset_restores_propagation(self):
        configure_logging(handler=logging.NullHandler())
        reset_logging()
        root = logging.getLogger("chitfund")
        assert root.handlers == []
        assert root.propagate is True

    def test_default_level_drops_debug(self, log):
        reset_logging()
        handler = logging.NullHandler()
        configure_logging(handler=handler)
        assert not log.isEnabledFor(logging.DEBUG)
        assert log.isEnabledFor(logging.INFO)
        reset_logging()

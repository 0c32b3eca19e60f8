"""Tests for keyed locks, outcomes, settings and logging helpers."""

import json
import logging
import threading

import pytest
import structlog
from fulfillment.concurrency import KeyedLocks
from fulfillment.errors import ErrorKind, InsufficientStock, MismatchError
from fulfillment.outcome import Outcome
from fulfillment.settings import EngineSettings, get_settings, reset_settings
from fulfillment.utils.logging import configure_logging, get_log_level, operation_context
from protean.exceptions import ValidationError


class TestKeyedLocks:
    def test_same_key_same_lock(self):
        locks = KeyedLocks("test")
        assert locks.lock_for("A") is locks.lock_for("A")
        assert locks.lock_for("A") is not locks.lock_for("B")

    def test_try_hold_fails_while_held(self):
        locks = KeyedLocks("test")
        with locks.try_hold("ord-1") as first:
            assert first is True
            results = []

            def attempt():
                with locks.try_hold("ord-1") as acquired:
                    results.append(acquired)

            worker = threading.Thread(target=attempt)
            worker.start()
            worker.join()
            assert results == [False]
        with locks.try_hold("ord-1") as again:
            assert again is True

    def test_hold_many_takes_each_key_once(self):
        locks = KeyedLocks("test")
        with locks.hold_many(["B", "A", "B"]):
            assert locks.lock_for("A").locked()
            assert locks.lock_for("B").locked()
        assert not locks.lock_for("A").locked()


class TestOutcome:
    def test_success(self):
        outcome = Outcome.success("ord-1")
        assert outcome.ok
        assert outcome.value == "ord-1"
        assert outcome.changed
        assert outcome.error is None

    def test_from_fulfillment_error_keeps_kind_and_reasons(self):
        outcome = Outcome.from_error(MismatchError("Wrong location", "Wrong item"))
        assert not outcome.ok
        assert outcome.error == ErrorKind.MISMATCH
        assert outcome.reasons == ["Wrong location", "Wrong item"]
        assert not outcome.changed

    def test_from_plain_validation_error_is_invalid_input(self):
        outcome = Outcome.from_error(ValidationError({"quantity": ["Quantity must be positive"]}))
        assert outcome.error == ErrorKind.INVALID_INPUT
        assert outcome.reasons == ["quantity: Quantity must be positive"]

    def test_fulfillment_errors_are_validation_errors(self):
        exc = InsufficientStock("short")
        assert isinstance(exc, ValidationError)
        assert exc.messages == {"quantity": ["short"]}

    def test_to_dict(self):
        data = Outcome.failure(ErrorKind.INCOMPLETE_PACKING, ["Items not verified: X"]).to_dict()
        assert data["error"] == "IncompletePacking"
        assert data["ok"] is False


class TestSettings:
    def test_defaults(self):
        settings = EngineSettings()
        assert settings.receiving_dock == "Receiving Dock"
        assert settings.check_timeout == 2.0
        assert settings.credit_threshold == 50_000_000.0

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("FULFILLMENT_RECEIVING_DOCK", "Dock 3")
        monkeypatch.setenv("FULFILLMENT_CHECK_TIMEOUT", "0.75")
        reset_settings()
        settings = get_settings()
        assert settings.receiving_dock == "Dock 3"
        assert settings.check_timeout == pytest.approx(0.75)

    def test_settings_are_cached(self):
        assert get_settings() is get_settings()


class TestLogging:
    def test_log_level_follows_environment(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("ENV", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.setenv("PROTEAN_ENV", "production")
        assert get_log_level() == "INFO"

        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert get_log_level() == "ERROR"

    def test_operation_context_binds_and_unbinds(self):
        with operation_context(operation="reserve", sku="ELEC-001"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["operation"] == "reserve"
            assert bound["sku"] == "ELEC-001"
        assert "operation" not in structlog.contextvars.get_contextvars()

    def test_configure_logging_writes_json_files_in_production(self, tmp_path, monkeypatch):
        for name in ("LOG_LEVEL", "ENV", "PROTEAN_ENV"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("ENVIRONMENT", "production")
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level

        try:
            configure_logging(tmp_path)
            logger = structlog.get_logger("tradeflow.test")
            logger.info("Order released", order_id="ord-1")
            logger.error("Compliance provider down", check="Compliance")
            for handler in root.handlers:
                handler.flush()

            main_lines = (tmp_path / "tradeflow.log").read_text().splitlines()
            error_lines = (tmp_path / "tradeflow_error.log").read_text().splitlines()
        finally:
            for handler in root.handlers:
                if handler not in saved_handlers:
                    handler.close()
            root.handlers = saved_handlers
            root.setLevel(saved_level)
            structlog.reset_defaults()

        events = [json.loads(line) for line in main_lines]
        assert [e["event"] for e in events] == ["Order released", "Compliance provider down"]
        assert events[0]["order_id"] == "ord-1"
        assert events[0]["level"] == "info"
        assert [json.loads(line)["event"] for line in error_lines] == ["Compliance provider down"]

"""
Tests for configuration and structured logging
"""

import json
import logging

import pytest

from aya_token import config as config_module
from aya_token.config import AyaConfig, get_config, reload_config
from aya_token.logging_config import JSONFormatter, get_logger, log_action, setup_logging


class TestConfig:
    """Test environment-based configuration"""

    def test_defaults(self, monkeypatch):
        """Test default genesis values"""
        monkeypatch.delenv("AYA_TOKEN_SYMBOL", raising=False)
        settings = AyaConfig(_env_file=None)
        assert settings.token_symbol == "AYA"
        assert settings.token_decimals == 18
        assert settings.allow_empty_batches is True
        assert settings.treasury_address is None

    def test_env_prefix(self, monkeypatch):
        """Test that AYA_ variables override defaults"""
        monkeypatch.setenv("AYA_INITIAL_SUPPLY", "5000")
        monkeypatch.setenv("AYA_ALLOW_EMPTY_BATCHES", "false")
        monkeypatch.setenv("AYA_STORAGE_BACKEND", "memory")
        settings = AyaConfig(_env_file=None)
        assert settings.initial_supply == 5000
        assert settings.allow_empty_batches is False
        assert settings.storage_backend == "memory"

    def test_reload_config(self, monkeypatch):
        """Test that reload picks up a changed environment"""
        # restored on teardown
        monkeypatch.setattr(config_module, "config", get_config())
        monkeypatch.setenv("AYA_API_PORT", "9191")
        reloaded = reload_config()
        assert reloaded.api_port == 9191
        assert get_config() is reloaded


class TestJSONFormatter:
    """Test structured log output"""

    def make_record(self, **attrs):
        record = logging.LogRecord("aya.test", logging.INFO, __file__, 1, "hello", (), None)
        for key, value in attrs.items():
            setattr(record, key, value)
        return record

    def test_basic_fields(self):
        """Test the always-present fields"""
        entry = json.loads(JSONFormatter().format(self.make_record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "aya.test"
        assert entry["message"] == "hello"
        assert "timestamp" in entry
        assert "caller" not in entry

    def test_token_fields_are_top_level(self):
        """Test caller, action and amounts as first-class keys"""
        record = self.make_record(caller="0xabc", action="transfer_batch", legs=3,
                                  total=10 ** 30, batch_id="b-1")
        entry = json.loads(JSONFormatter().format(record))
        assert entry["caller"] == "0xabc"
        assert entry["action"] == "transfer_batch"
        assert entry["legs"] == 3
        assert entry["total"] == 10 ** 30
        assert entry["batch_id"] == "b-1"

    def test_unrelated_attributes_ignored(self):
        """Test that only token fields are emitted"""
        entry = json.loads(JSONFormatter().format(self.make_record(password="secret")))
        assert "password" not in entry


class TestSetupLogging:
    """Test logger configuration"""

    def test_json_handler(self):
        """Test that the default format is JSON"""
        logger = setup_logging("DEBUG", "aya.test.json")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_text_handler(self):
        """Test plain text output"""
        logger = setup_logging("WARNING", "aya.test.text", fmt="text")
        assert not isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_no_duplicate_handlers(self):
        """Test repeated setup"""
        setup_logging("INFO", "aya.test.dup")
        logger = setup_logging("INFO", "aya.test.dup")
        assert len(logger.handlers) == 1

    def test_bad_level(self):
        """Test an unknown level name"""
        with pytest.raises(AttributeError):
            setup_logging("LOUD", "aya.test.bad")


class TestLogAction:
    """Test log_action"""

    def test_attaches_fields(self, caplog):
        """Test that token fields land on the record"""
        logger = get_logger("aya.test.action")
        with caplog.at_level(logging.INFO, logger="aya.test.action"):
            log_action(logger, "info", "Transfer completed", caller="0xabc",
                       action="transfer", account="0xabc", amount=7, spender=None)
        record = caplog.records[-1]
        assert record.caller == "0xabc"
        assert record.action == "transfer"
        assert record.amount == 7
        assert not hasattr(record, "spender")

    def test_rejects_unknown_fields(self):
        """Test that fields outside the token vocabulary are refused"""
        with pytest.raises(TypeError):
            log_action(get_logger("aya.test.action"), "info", "x", colour="blue")

    def test_respects_level(self, caplog):
        """Test that disabled levels are skipped"""
        logger = get_logger("aya.test.quiet")
        logger.setLevel(logging.ERROR)
        with caplog.at_level(logging.ERROR, logger="aya.test.quiet"):
            log_action(logger, "info", "ignored")
        assert not caplog.records

    def test_rejection_logged(self, caplog):
        """Test that a refused token call logs its error code"""
        from aya_token.storage import InMemoryStorage
        from aya_token.token import AyaToken

        token = AyaToken.deploy(InMemoryStorage(), owner="0xowner", initial_supply=10,
                                settings=AyaConfig(_env_file=None))
        with caplog.at_level(logging.WARNING, logger="aya.token"):
            with pytest.raises(ValueError):
                token.transfer("0xnobody", "0xowner", 1)
        record = caplog.records[-1]
        assert record.error == "InsufficientBalance"
        assert record.caller == "0xnobody"
        assert record.action == "transfer"

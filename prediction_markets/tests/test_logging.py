"""
Tests for logging configuration and credential redaction.

Private keys and RPC provider keys must never reach a log sink.
"""

import logging
from io import StringIO
from unittest.mock import patch

import orjson
import pytest

from ..config import PredictionMarketsSettings
from ..logging_config import (
    DEFAULT_LOGGING_CONFIG,
    LOGGER_NAME,
    build_logging_config,
    setup_logging,
    setup_logging_from_settings,
)
from ..utils.structured_logging import (
    CredentialRedactionFilter,
    StructuredFormatter,
    StructuredLogger,
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)

DEV_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TX_HASH = "0x" + "ab" * 32


@pytest.fixture
def captured():
    """Yield (logger name, stream) with a redacting handler attached."""
    name = "prediction_markets.tests.capture"
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    handler.addFilter(CredentialRedactionFilter())
    logger.addHandler(handler)
    clear_correlation_id()

    yield name, stream

    logger.removeHandler(handler)
    clear_correlation_id()


def last_entry(stream: StringIO) -> dict:
    return orjson.loads(stream.getvalue().strip().splitlines()[-1])


class TestCredentialRedactionFilter:

    def test_private_key_in_message(self, captured):
        name, stream = captured
        logging.getLogger(name).info(f"Adding signer {DEV_KEY}")

        entry = last_entry(stream)
        assert DEV_KEY[2:] not in entry["message"]
        assert entry["message"] == "Adding signer 0x[REDACTED]"

    def test_private_key_without_prefix(self, captured):
        name, stream = captured
        logging.getLogger(name).info("signer %s", DEV_KEY[2:])

        assert DEV_KEY[2:] not in stream.getvalue()

    def test_rpc_url_api_key(self, captured):
        name, stream = captured
        url = "https://mainnet.infura.io/v3/abcdefghijklmnopqrstuvwxyz123456"
        logging.getLogger(name).warning(f"RPC endpoint {url} unreachable")

        entry = last_entry(stream)
        assert "abcdefghijklmnopqrstuvwxyz123456" not in entry["message"]
        assert "https://mainnet.infura.io/v3/[REDACTED]" in entry["message"]

    def test_secret_fields(self, captured):
        name, stream = captured
        logging.getLogger(name).info("password=hunter2hunter2 api_key: 'abcd1234efgh'")

        output = stream.getvalue()
        assert "hunter2hunter2" not in output
        assert "abcd1234efgh" not in output

    def test_extra_fields_redacted_except_tx_hash(self, captured):
        name, stream = captured
        StructuredLogger(name).info(
            "market_created",
            tx_hash=TX_HASH,
            signer_key=DEV_KEY,
            chain_id=31337,
        )

        entry = last_entry(stream)
        assert entry["tx_hash"] == TX_HASH
        assert entry["signer_key"] == "0x[REDACTED]"
        assert entry["chain_id"] == 31337

    def test_plain_messages_untouched(self):
        record = logging.LogRecord(
            LOGGER_NAME, logging.INFO, __file__, 1,
            "Market 0x5FbDB2315678afecb367f032d93F642f64180aa3 closed", None, None
        )
        assert CredentialRedactionFilter().filter(record) is True
        assert record.msg == "Market 0x5FbDB2315678afecb367f032d93F642f64180aa3 closed"


class TestStructuredLogging:

    def test_json_entry_fields(self, captured):
        name, stream = captured
        StructuredLogger(name).info("markets_fetched", "Fetched markets", count=3)

        entry = last_entry(stream)
        assert entry["level"] == "INFO"
        assert entry["logger"] == name
        assert entry["message"] == "markets_fetched: Fetched markets"
        assert entry["event"] == "markets_fetched"
        assert entry["count"] == 3
        assert entry["timestamp"].endswith("Z")
        assert "correlation_id" not in entry

    def test_correlation_id_attached(self, captured):
        name, stream = captured
        correlation_id = set_correlation_id()
        StructuredLogger(name).info("get_markets")

        assert correlation_id.startswith("req_")
        assert last_entry(stream)["correlation_id"] == correlation_id

    def test_explicit_correlation_id(self):
        assert set_correlation_id("req_fixed") == "req_fixed"
        assert get_correlation_id() == "req_fixed"
        clear_correlation_id()
        assert get_correlation_id() is None

    def test_exception_details(self, captured):
        name, stream = captured
        try:
            raise ValueError("boom")
        except ValueError:
            StructuredLogger(name).exception("create_market_failed")

        entry = last_entry(stream)
        assert entry["level"] == "ERROR"
        assert entry["exception"]["type"] == "ValueError"
        assert entry["exception"]["message"] == "boom"


class TestBuildLoggingConfig:

    def test_default_console_only(self):
        config = build_logging_config()

        assert "file" not in config["handlers"]
        assert config["loggers"][LOGGER_NAME]["handlers"] == ["console"]
        assert config["handlers"]["console"]["filters"] == ["redact_credentials"]

    def test_level_and_file(self, tmp_path):
        log_file = str(tmp_path / "markets.log")
        config = build_logging_config(level="debug", log_file=log_file)

        assert config["loggers"][LOGGER_NAME]["level"] == "DEBUG"
        assert config["loggers"][LOGGER_NAME]["handlers"] == ["console", "file"]
        assert config["handlers"]["file"]["filename"] == log_file

    def test_json_format_for_every_handler(self, tmp_path):
        config = build_logging_config(log_file=str(tmp_path / "markets.log"), json_format=True)

        assert {h["formatter"] for h in config["handlers"].values()} == {"json"}

    def test_default_config_not_mutated(self, tmp_path):
        build_logging_config(level="ERROR", log_file=str(tmp_path / "x.log"), json_format=True)

        assert DEFAULT_LOGGING_CONFIG["loggers"][LOGGER_NAME]["handlers"] == ["console"]
        assert DEFAULT_LOGGING_CONFIG["loggers"][LOGGER_NAME]["level"] == "INFO"
        assert DEFAULT_LOGGING_CONFIG["handlers"]["console"]["formatter"] == "standard"
        assert "file" in DEFAULT_LOGGING_CONFIG["handlers"]


class TestSetupLogging:

    @pytest.fixture
    def restore_loggers(self):
        saved = [
            (logger, list(logger.handlers), logger.level, logger.propagate)
            for logger in (logging.getLogger(LOGGER_NAME), logging.getLogger())
        ]
        yield
        for logger, handlers, level, propagate in saved:
            logger.handlers = handlers
            logger.setLevel(level)
            logger.propagate = propagate
        clear_correlation_id()

    def test_json_handler_carries_correlation_id(self, capsys, restore_loggers):
        setup_logging(json_format=True)
        correlation_id = set_correlation_id()

        StructuredLogger(f"{LOGGER_NAME}.service").info("markets_fetched", chain_id=31337, signer=DEV_KEY)

        entry = orjson.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert entry["correlation_id"] == correlation_id
        assert entry["event"] == "markets_fetched"
        assert entry["chain_id"] == 31337
        assert entry["signer"] == "0x[REDACTED]"

    def test_settings_drive_configuration(self, tmp_path):
        log_file = str(tmp_path / "markets.log")
        settings = PredictionMarketsSettings(
            _env_file=None, log_level="warning", log_file=log_file, log_json=True
        )

        with patch("logging.config.dictConfig") as dict_config:
            setup_logging_from_settings(settings)

        config = dict_config.call_args.args[0]
        assert config == build_logging_config("warning", log_file, True)
        assert config["loggers"][LOGGER_NAME]["level"] == "WARNING"
        assert config["handlers"]["file"]["formatter"] == "json"

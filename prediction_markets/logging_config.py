"""
Logging configuration for the prediction markets client.

Console, rotating file and JSON handlers for the "prediction_markets" logger tree.
The JSON formatter carries correlation ids and StructuredLogger fields.
"""

import copy
import logging
import logging.config
from typing import Optional

from .config import PredictionMarketsSettings, get_settings

LOGGER_NAME = "prediction_markets"

DEFAULT_LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "redact_credentials": {
            "()": "prediction_markets.utils.structured_logging.CredentialRedactionFilter"
        }
    },
    "formatters": {
        "standard": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S"
        },
        "detailed": {
            "format": (
                "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d "
                "- %(message)s (%(funcName)s)"
            ),
            "datefmt": "%Y-%m-%d %H:%M:%S"
        },
        "json": {
            "()": "prediction_markets.utils.structured_logging.StructuredFormatter"
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "INFO",
            "formatter": "standard",
            "filters": ["redact_credentials"],
            "stream": "ext://sys.stdout"
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "detailed",
            "filters": ["redact_credentials"],
            "filename": "prediction_markets.log",
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "delay": True
        }
    },
    "loggers": {
        LOGGER_NAME: {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False
        }
    },
    "root": {
        "level": "WARNING",
        "handlers": ["console"]
    }
}


def build_logging_config(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    json_format: bool = False
) -> dict:
    """
    Build a dictConfig mapping without applying it.

    Args:
        level: Log level for the package logger (DEBUG, INFO, WARNING, ERROR)
        log_file: Also write to this rotating file
        json_format: Use the JSON formatter for every handler
    """
    config = copy.deepcopy(DEFAULT_LOGGING_CONFIG)
    package_logger = config["loggers"][LOGGER_NAME]

    if level:
        package_logger["level"] = level.upper()

    if log_file:
        config["handlers"]["file"]["filename"] = log_file
        package_logger["handlers"].append("file")
    else:
        del config["handlers"]["file"]

    if json_format:
        for handler in config["handlers"].values():
            handler["formatter"] = "json"

    return config


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    json_format: bool = False
) -> None:
    """
    Setup logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
        json_format: Use JSON formatting
    """
    logging.config.dictConfig(build_logging_config(level, log_file, json_format))


def setup_logging_from_settings(settings: Optional[PredictionMarketsSettings] = None) -> None:
    """Apply log_level, log_file and log_json from the settings."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_file, settings.log_json)

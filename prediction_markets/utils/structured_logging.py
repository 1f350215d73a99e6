"""
Structured JSON logging for production environments.

Enables correlation IDs, structured data, and queryable logs.
"""

import logging
import re
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger.orjson import OrjsonFormatter

# Per-context correlation ID storage
_correlation_id: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


class CredentialRedactionFilter(logging.Filter):
    """
    Redacts credentials from log records.

    Wallet private keys are passed to connections as hex strings and RPC URLs
    often embed provider API keys; neither may reach a log sink.

    Usage:
        >>> handler = logging.StreamHandler()
        >>> handler.addFilter(CredentialRedactionFilter())
    """

    # Bare 32-byte hex; transaction hashes belong in the tx_hash field
    PRIVATE_KEY_PATTERN = re.compile(r'(?<![0-9a-fA-F])(0x)?[0-9a-fA-F]{64}(?![0-9a-fA-F])')
    SECRET_FIELD_PATTERN = re.compile(
        r'((?:private_key|secret|password|api_key|key)["\']?\s*[:=]\s*["\']?)[^\s"\',}]{8,}',
        re.IGNORECASE
    )
    # Path-embedded API keys (https://mainnet.infura.io/v3/<key>)
    RPC_KEY_PATTERN = re.compile(r'(https?://[^\s/]+/(?:v\d+/)?)([A-Za-z0-9_-]{20,})')

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg:
            record.msg = self._redact_credentials(str(record.msg))

        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: self._redact_credentials(str(v))
                    for k, v in record.args.items()
                }
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    self._redact_credentials(str(arg))
                    for arg in record.args
                )

        if record.exc_text:
            record.exc_text = self._redact_credentials(record.exc_text)

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            record.extra_fields = {
                k: self._redact_credentials(v) if isinstance(v, str) and k != "tx_hash" else v
                for k, v in extra_fields.items()
            }

        return True

    def _redact_credentials(self, text: str) -> str:
        """Redact all credential patterns from text."""
        if not text:
            return text

        text = self.PRIVATE_KEY_PATTERN.sub('0x[REDACTED]', text)
        text = self.SECRET_FIELD_PATTERN.sub(r'\1[REDACTED]', text)
        text = self.RPC_KEY_PATTERN.sub(r'\1[REDACTED]', text)
        return text


class StructuredFormatter(OrjsonFormatter):
    """
    JSON formatter for structured logging.

    Emits one flat object per record: timestamp, level, logger, message,
    the current correlation id and the StructuredLogger fields.
    """

    def add_fields(
        self,
        log_data: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ) -> None:
        log_data["timestamp"] = (
            datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat().replace("+00:00", "Z")
        )
        log_data["level"] = record.levelname
        log_data["logger"] = record.name
        log_data["message"] = record.getMessage()

        correlation_id = _correlation_id.get()
        if correlation_id:
            log_data["correlation_id"] = correlation_id

        log_data.update(getattr(record, "extra_fields", {}))

        traceback = message_dict.pop("exc_info", None)
        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback
            }

        log_data.update(message_dict)


class StructuredLogger:
    """
    Structured logger wrapper with correlation ID support.

    Example:
        >>> logger = get_logger("prediction_markets.service")
        >>> logger.info(
        ...     "market_created",
        ...     "Market deployed by factory",
        ...     chain_id=31337,
        ...     market="0x5FbDB2315678afecb367f032d93F642f64180aa3",
        ... )
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _log(
        self,
        level: int,
        event: str,
        message: Optional[str] = None,
        **fields
    ) -> None:
        log_message = f"{event}: {message}" if message else event

        extra_fields = {"event": event}
        extra_fields.update(fields)

        self.logger.log(level, log_message, extra={'extra_fields': extra_fields})

    def debug(self, event: str, message: Optional[str] = None, **fields) -> None:
        self._log(logging.DEBUG, event, message, **fields)

    def info(self, event: str, message: Optional[str] = None, **fields) -> None:
        self._log(logging.INFO, event, message, **fields)

    def warning(self, event: str, message: Optional[str] = None, **fields) -> None:
        self._log(logging.WARNING, event, message, **fields)

    def error(self, event: str, message: Optional[str] = None, **fields) -> None:
        self._log(logging.ERROR, event, message, **fields)

    def exception(self, event: str, message: Optional[str] = None, **fields) -> None:
        """Log exception with traceback."""
        extra_fields = {"event": event}
        extra_fields.update(fields)
        self.logger.exception(
            f"{event}: {message}" if message else event,
            extra={'extra_fields': extra_fields}
        )


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """
    Set correlation ID for current context.

    Args:
        correlation_id: Correlation ID (generates one if None)

    Returns:
        The correlation ID set
    """
    if correlation_id is None:
        correlation_id = f"req_{uuid.uuid4().hex[:12]}"

    _correlation_id.set(correlation_id)
    return correlation_id


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)


def get_logger(name: str) -> StructuredLogger:
    """Get structured logger instance."""
    return StructuredLogger(name)

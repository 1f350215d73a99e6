"""
Prometheus metrics for monitoring.

Transactions, event log scans and service operations are recorded once a
Metrics instance has been created with get_metrics(); until then every
recording helper is a no-op.
"""

import time
from typing import Optional
from functools import wraps
import logging

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)


class Metrics:
    """
    Prometheus metrics collector.

    Tracks:
    - Transactions sent, by function and outcome
    - Send-to-receipt latency
    - eth_getLogs requests per event
    - Service operation latency
    """

    def __init__(
        self,
        enabled: bool = True,
        port: Optional[int] = None,
        registry: CollectorRegistry = REGISTRY
    ):
        """
        Initialize metrics.

        Args:
            enabled: Enable metrics collection
            port: Start a metrics HTTP server on this port
            registry: Collector registry the metrics are registered in
        """
        self.enabled = enabled

        if not self.enabled:
            return

        # Transaction metrics
        self.transactions = Counter(
            'prediction_markets_transactions_total',
            'Total transactions sent',
            ['function', 'status'],
            registry=registry
        )

        self.transaction_latency = Histogram(
            'prediction_markets_transaction_latency_seconds',
            'Transaction send-to-receipt latency',
            ['function'],
            registry=registry
        )

        # Log scanning
        self.log_requests = Counter(
            'prediction_markets_log_requests_total',
            'Total eth_getLogs requests',
            ['event'],
            registry=registry
        )

        # Service metrics
        self.operation_latency = Histogram(
            'prediction_markets_operation_latency_seconds',
            'Service operation latency',
            ['operation'],
            registry=registry
        )

        if port is not None:
            try:
                start_http_server(port, registry=registry)
                logger.info(f"Metrics server started on port {port}")
            except OSError as e:
                logger.error(f"Failed to start metrics server: {e}")

    def track_transaction(self, function: str, status: str, duration: float) -> None:
        """Record a transaction and its latency."""
        if self.enabled:
            self.transactions.labels(function=function, status=status).inc()
            self.transaction_latency.labels(function=function).observe(duration)

    def track_log_request(self, event: str) -> None:
        if self.enabled:
            self.log_requests.labels(event=event).inc()

    def track_operation_latency(self, operation: str, duration: float) -> None:
        if self.enabled:
            self.operation_latency.labels(operation=operation).observe(duration)


# Global metrics instance
_metrics: Optional[Metrics] = None


def get_metrics(enabled: bool = True, port: Optional[int] = None) -> Metrics:
    """Get or create metrics instance."""
    global _metrics
    if _metrics is None:
        _metrics = Metrics(enabled=enabled, port=port)
    return _metrics


def set_metrics(metrics: Optional[Metrics]) -> None:
    """Replace the global instance (None disables recording)."""
    global _metrics
    _metrics = metrics


def track_transaction(function: str, status: str, duration: float) -> None:
    if _metrics is not None:
        _metrics.track_transaction(function, status, duration)


def track_log_request(event: str) -> None:
    if _metrics is not None:
        _metrics.track_log_request(event)


def track_time(operation: str):
    """Decorator to track service operation latency."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not _metrics or not _metrics.enabled:
                return func(*args, **kwargs)

            start = time.time()
            try:
                return func(*args, **kwargs)
            finally:
                _metrics.track_operation_latency(operation, time.time() - start)
        return wrapper
    return decorator

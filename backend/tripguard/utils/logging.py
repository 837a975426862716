"""Structured logging for outbound provider calls."""

import logging
from typing import Any

from backend.tripguard.utils.metrics import PrometheusProviderMetrics

logger = logging.getLogger(__name__)


class StructuredProviderLogger:
    """Structured logger (plus metrics) for provider calls."""

    def __init__(self, metrics: PrometheusProviderMetrics | None = None) -> None:
        self._metrics = metrics or PrometheusProviderMetrics()

    def log_call(
        self,
        provider: str,
        operation: str,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
        **fields: Any,
    ) -> None:
        """Log provider call with structured data and record its metrics."""
        log_data: dict[str, Any] = {
            "provider": provider,
            "operation": operation,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
            **fields,
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        self._metrics.record_latency(provider, outcome, latency_ms)

        log_msg = f"Provider call: {provider}.{operation} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            self._metrics.inc_error(provider, error_reason or outcome)
            logger.warning(log_msg, extra={"structured": log_data})

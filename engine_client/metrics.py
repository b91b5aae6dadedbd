"""Prometheus metrics for the Engine API client."""

import logging
import threading
from typing import Optional

from prometheus_client import (
    Counter,
    Histogram,
    start_http_server,
)

logger = logging.getLogger(__name__)

DEFAULT_METRICS_PORT = 8008

engine_api_requests = Counter(
    "engine_client_requests_total",
    "Total Engine API requests",
    ["method"],
)

engine_api_errors = Counter(
    "engine_client_errors_total",
    "Total Engine API errors",
    ["method", "error_type"],
)

engine_api_latency = Histogram(
    "engine_client_latency_seconds",
    "Engine API request latency",
    ["method"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)


_server_started = False
_server_lock = threading.Lock()


def start_metrics_server(port: int = DEFAULT_METRICS_PORT) -> bool:
    """Start the Prometheus metrics HTTP server.

    Args:
        port: Port to listen on (default 8008)

    Returns:
        True if server started successfully, False if already running or failed
    """
    global _server_started

    with _server_lock:
        if _server_started:
            logger.warning("Metrics server already running")
            return False

        try:
            start_http_server(port)
        except OSError as e:
            logger.error(f"Failed to start metrics server: {e}")
            return False
        _server_started = True
        logger.info(f"Prometheus metrics server started on port {port}")
        return True


def record_engine_api_call(method: str, latency: float, error: Optional[str] = None) -> None:
    """Record an Engine API call.

    Args:
        method: JSON-RPC method name (e.g., 'engine_newPayloadV1')
        latency: Request latency in seconds
        error: Error type if the call failed, None if successful
    """
    engine_api_requests.labels(method=method).inc()
    engine_api_latency.labels(method=method).observe(latency)
    if error:
        engine_api_errors.labels(method=method, error_type=error).inc()

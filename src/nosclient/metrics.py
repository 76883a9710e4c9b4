"""Prometheus metrics definitions for the NOS client.

All metrics use the ``nosclient_`` prefix. They are registered in the
global ``prometheus_client`` registry only when ``init_metrics()`` is
called, which the client does when ``metrics_enabled`` is set. While
uninitialised, ``record_operation`` and ``record_bytes_sent`` do nothing.
"""

from __future__ import annotations

from prometheus_client import Counter

# Flag indicating whether metrics have been initialised via init_metrics().
_initialized: bool = False

# ---------------------------------------------------------------------------
# Operation counter  (labels: operation, status)
# ---------------------------------------------------------------------------
operations_total: Counter | None = None

# ---------------------------------------------------------------------------
# Byte counters
# ---------------------------------------------------------------------------
bytes_sent_total: Counter | None = None


def init_metrics() -> None:
    """Create and register all Prometheus metrics.

    Safe to call more than once; only the first call registers collectors.
    """
    global _initialized
    global operations_total, bytes_sent_total

    if _initialized:
        return

    operations_total = Counter(
        "nosclient_operations_total",
        "Total NOS operations by type and outcome",
        ["operation", "status"],
    )

    bytes_sent_total = Counter(
        "nosclient_bytes_sent_total",
        "Total bytes declared in upload request bodies",
    )

    _initialized = True


def record_operation(operation: str, status: str | int) -> None:
    """Count one finished operation.

    Args:
        operation: Client method name (e.g. ``put_object_by_stream``).
        status: HTTP status code, or ``"error"`` for transport failures.
    """
    if operations_total is not None:
        operations_total.labels(operation=operation, status=str(status)).inc()


def record_bytes_sent(count: int) -> None:
    if bytes_sent_total is not None and count > 0:
        bytes_sent_total.inc(count)

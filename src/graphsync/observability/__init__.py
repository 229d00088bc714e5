"""Observability module for graphsync.

Provides structured logging:
- JSON logs for log aggregation systems
- Human-readable console logs for interactive use
- Conversion tags propagated through context variables
"""

from graphsync.observability.logging import (
    LogContext,
    configure_logging,
    conversion_var,
    get_logger,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    "conversion_var",
]

"""
Utility helpers shared across rowmapper packages.
"""

from .logging import (
    configure_logging,
    correlation_scope,
    get_correlation_id,
    get_logger,
    redact_params,
    time_call,
)

__all__ = [
    "configure_logging",
    "correlation_scope",
    "get_correlation_id",
    "get_logger",
    "redact_params",
    "time_call",
]

"""
Structured logging with correlation IDs.

Provides a consistent logging setup for the query engine and its
MCP server so a single natural-language request can be traced
through introspection, translation, validation and execution.
"""

import logging
import uuid


def setup_logging(component: str, level: str = "INFO") -> logging.Logger:
    """
    Configure structured logging for a component.

    Args:
        component: Name of the component (used as logger name).
        level: Log level string (e.g. 'INFO', 'DEBUG').

    Returns:
        Configured logger instance.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s  %(name)-30s  %(levelname)-7s  %(message)s",
    )
    # basicConfig only applies once per process; the component level always does
    logger = logging.getLogger(component)
    logger.setLevel(log_level)
    return logger


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracing."""
    return uuid.uuid4().hex[:12]

"""Structured logging infrastructure for grid and export runs."""

from .structured_logger import (
    StructuredLogger, get_logger,
    run_context, operation_context, grid_context, source_context
)
from .context import LoggingContext
from .decorators import log_operation
from .setup import setup_logging, setup_simple_logging, get_log_stats

__all__ = [
    'StructuredLogger',
    'get_logger',
    'run_context',
    'operation_context',
    'grid_context',
    'source_context',
    'LoggingContext',
    'log_operation',
    'setup_logging',
    'setup_simple_logging',
    'get_log_stats'
]

"""Structured logging with context propagation for grid and export runs."""

import logging
import sys
import time
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Correlation fields, set by LoggingContext and read on every log call
run_context: ContextVar[Optional[str]] = ContextVar('run_id', default=None)
operation_context: ContextVar[Optional[str]] = ContextVar('operation', default=None)
grid_context: ContextVar[Optional[str]] = ContextVar('grid', default=None)
source_context: ContextVar[Optional[str]] = ContextVar('source', default=None)

_CONTEXT_VARS = (
    ('run_id', run_context),
    ('operation', operation_context),
    ('grid', grid_context),
    ('source', source_context),
)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + 'Z'


def _current_context() -> Dict[str, Any]:
    """Values of the correlation context vars that are set."""
    return {key: var.get() for key, var in _CONTEXT_VARS if var.get() is not None}


def _format_traceback(exc_info: Any) -> Optional[str]:
    """Render ``exc_info`` given as True, an exception, or a sys.exc_info() tuple."""
    if exc_info is True:
        exc_info = sys.exc_info()
    elif isinstance(exc_info, BaseException):
        exc_info = (type(exc_info), exc_info, exc_info.__traceback__)
    if not isinstance(exc_info, tuple) or exc_info[0] is None:
        return None
    return ''.join(traceback.format_exception(*exc_info))


class StructuredLogger(logging.Logger):
    """Logger that attaches context, performance data and tracebacks to records.

    Every record gets three extra attributes read by the formatters:
    ``context`` (run, operation, grid and source plus any fields passed in
    ``extra['context']``), ``performance`` and ``traceback``.
    """

    def __init__(self, name: str):
        super().__init__(name)
        self._context_fields: Dict[str, Any] = {}
        self._start_times: Dict[str, float] = {}

    def _log(self, level, msg, args, exc_info=None, extra=None, stack_info=False, **kwargs):
        extra = dict(extra) if isinstance(extra, dict) else {}

        context = _current_context()
        context['logger_name'] = self.name
        context['timestamp'] = _utc_timestamp()
        context.update(self._context_fields)
        context.update(extra.pop('context', None) or {})

        tb = extra.pop('traceback', None)
        if tb is None and exc_info:
            tb = _format_traceback(exc_info)

        extra['context'] = context
        extra['performance'] = extra.pop('performance', None)
        extra['traceback'] = tb

        # The traceback travels as text, so the stdlib exc_info path is not used
        super()._log(level, msg, args, exc_info=False, extra=extra,
                     stack_info=stack_info, **kwargs)

    def add_context(self, **fields):
        """Attach fields to every later message from this logger.

        Example:
            logger.add_context(input_file='points.csv')
        """
        self._context_fields.update(fields)

    def remove_context(self, *keys):
        for key in keys:
            self._context_fields.pop(key, None)

    def clear_context(self):
        self._context_fields.clear()

    def start_operation(self, operation: str):
        """Start timing an operation; ``end_operation`` logs its duration."""
        self._start_times[operation] = time.time()
        self.debug(f"Started operation: {operation}")

    def end_operation(self, operation: str, **metrics):
        started = self._start_times.pop(operation, None)
        if started is None:
            self.warning(f"No start time for operation: {operation}")
            return
        self.log_performance(operation, time.time() - started, **metrics)

    def log_performance(self, operation: str, duration: float, **metrics):
        """Log how long an operation took.

        Args:
            operation: Operation name
            duration: Duration in seconds
            **metrics: Extra figures such as ``cells`` or ``items_processed``;
                ``items_processed`` also yields ``items_per_second``

        Example:
            logger.log_performance('build_grid', 1.23, cells=25000)
        """
        performance = {
            'operation': operation,
            'duration_seconds': round(duration, 3),
            'timestamp': _utc_timestamp(),
            **metrics
        }
        if duration > 0 and 'items_processed' in metrics:
            performance['items_per_second'] = round(metrics['items_processed'] / duration, 2)

        self.info(f"Performance: {operation} completed in {duration:.3f}s",
                  extra={'performance': performance})

    def log_error_with_context(self, error: Exception, operation: Optional[str] = None, **context):
        """Log an exception with its type, module and traceback."""
        error_context = {
            'error_type': type(error).__name__,
            'error_module': type(error).__module__,
            **context
        }
        if operation:
            error_context['operation'] = operation

        self.error(f"{type(error).__name__}: {error}", exc_info=error,
                   extra={'context': error_context})

    def create_child(self, suffix: str) -> 'StructuredLogger':
        return get_logger(f"{self.name}.{suffix}")


_logger_cache: Dict[str, StructuredLogger] = {}


def get_logger(name: str) -> StructuredLogger:
    """Get or create the StructuredLogger for ``name``.

    Only loggers created here are structured; other ``logging.getLogger``
    calls keep the default class.

    Example:
        from bnghex.infrastructure.logging import get_logger
        logger = get_logger(__name__)
    """
    if name in _logger_cache:
        return _logger_cache[name]

    original_class = logging.getLoggerClass()
    logging.setLoggerClass(StructuredLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        logging.setLoggerClass(original_class)

    _logger_cache[name] = logger
    return logger

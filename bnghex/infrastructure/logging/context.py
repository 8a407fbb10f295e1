"""Scoped logging context for command runs."""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, List, Optional
import time
import uuid
from datetime import datetime, timezone

from .structured_logger import (
    run_context, operation_context, grid_context, source_context,
    get_logger
)


@contextmanager
def _bound(var: ContextVar, value: Any) -> Iterator[None]:
    token = var.set(value)
    try:
        yield
    finally:
        var.reset(token)


class LoggingContext:
    """Sets the run, operation, grid and source fields seen by every log record.

    One instance covers one CLI invocation. Operations nest and are
    recorded as slash-separated paths (``build_grid/partition``).
    """

    def __init__(self, run_id: Optional[str] = None):
        self.run_id = run_id or str(uuid.uuid4())
        self.operation_stack: List[str] = []
        self.timings: Dict[str, Dict[str, Any]] = {}
        self.logger = get_logger(self.__class__.__name__)

    @contextmanager
    def run(self, name: str, **metadata):
        """Whole command run; logs its start and its duration with a status.

        Example:
            with ctx.run('csv'):
                exporter.export(...)
        """
        with _bound(run_context, self.run_id):
            self.logger.info(f"Run started: {name}",
                             extra={'context': {'command': name, **metadata}})
            started = time.time()
            status = 'failed'
            try:
                yield self
                status = 'completed'
            finally:
                self.logger.log_performance(f"run_{name}", time.time() - started, status=status)

    @contextmanager
    def operation(self, name: str, **metadata):
        """
        Named step inside a run.

        Failures are logged with ``metadata`` and re-raised. Durations are
        kept in ``timings`` under the operation path.

        Example:
            with ctx.operation('build_grid', zoom=12):
                grid = HexGrid.from_extent(...)
        """
        path = f"{self.operation_stack[-1]}/{name}" if self.operation_stack else name
        self.operation_stack.append(path)
        self.logger.debug(f"Operation started: {name}", extra={'context': metadata})
        started = time.time()
        status = 'success'

        try:
            with _bound(operation_context, path):
                yield self
        except Exception as e:
            status = 'failed'
            self.logger.log_error_with_context(e, operation=name, **metadata)
            raise
        finally:
            duration = time.time() - started
            self.timings[path] = {
                'duration': duration,
                'status': status,
                'timestamp': datetime.now(timezone.utc).isoformat(),
            }
            self.logger.log_performance(name, duration, status=status, **metadata)
            self.operation_stack.pop()

    @contextmanager
    def grid(self, zoom_level: int, name: Optional[str] = None):
        with _bound(grid_context, name or f"zoom_{zoom_level}"):
            yield self

    @contextmanager
    def source(self, path: Any):
        with _bound(source_context, str(path)):
            yield self

    def log_progress(self, completed: int, total: int, message: Optional[str] = None):
        percent = completed / total * 100 if total > 0 else 0
        text = f"Progress: {percent:.1f}% ({completed}/{total})"
        if message:
            text = f"{text} - {message}"
        self.logger.info(text, extra={'context': {
            'progress_percent': percent,
            'completed_units': completed,
            'total_units': total,
        }})

    def get_timings(self) -> Dict[str, Dict[str, Any]]:
        return dict(self.timings)

    @property
    def current_operation(self) -> Optional[str]:
        return self.operation_stack[-1] if self.operation_stack else None

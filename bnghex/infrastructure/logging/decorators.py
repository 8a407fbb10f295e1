"""Decorators that time grid and export operations and capture their failures."""

import functools
import inspect
import time
from typing import Any, Callable, Dict, Optional, TypeVar

from .structured_logger import get_logger

F = TypeVar('F', bound=Callable[..., Any])

_SCALARS = (str, int, float, bool)


def _describe(value: Any, containers: bool = False) -> Any:
    """Scalars as-is, anything else by type name so log lines stay small."""
    if isinstance(value, _SCALARS) or value is None:
        return value
    if containers and isinstance(value, (list, dict)):
        return value
    return f"<{type(value).__name__}>"


def _bound_arguments(func: Callable, args: tuple, kwargs: dict) -> Dict[str, Any]:
    bound = inspect.signature(func).bind(*args, **kwargs)
    bound.apply_defaults()
    return {name: _describe(value) for name, value in bound.arguments.items()}


def log_operation(operation_name: Optional[str] = None,
                  log_args: bool = False,
                  log_result: bool = False,
                  log_performance: bool = True):
    """Log the start, outcome and duration of a call.

    Failures are logged with their traceback and re-raised unchanged.

    Args:
        operation_name: Name used in log messages (defaults to the function name)
        log_args: Add the call arguments to the start message context
        log_result: Add the return value to the completion context
        log_performance: Emit a performance record instead of a plain
            completion message

    Example:
        @log_operation("csv_to_hex")
        def export(self, input_path, config):
            ...
    """
    def decorator(func: F) -> F:
        name = operation_name or func.__name__
        logger = get_logger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            context: Dict[str, Any] = {'operation': name}
            if log_args:
                context['arguments'] = _bound_arguments(func, args, kwargs)

            logger.info(f"Starting {name}", extra={'context': context})
            started = time.time()

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Failed {name}: {e}",
                    exc_info=True,
                    extra={
                        'context': context,
                        'performance': {
                            'duration': time.time() - started,
                            'status': 'failed',
                            'error_type': type(e).__name__,
                        },
                    },
                )
                raise

            if log_result:
                context['result'] = _describe(result, containers=True)

            if log_performance:
                logger.log_performance(name, time.time() - started, status='success')
            else:
                logger.info(f"Completed {name}", extra={'context': context})
            return result

        return wrapper  # type: ignore
    return decorator

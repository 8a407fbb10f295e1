"""Root logger configuration for the CLI and tests."""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .structured_logger import get_logger, run_context
from .handlers import ConsoleHandler, FileHandler


def _level_number(name: Any) -> int:
    return getattr(logging, str(name).upper(), logging.INFO)


def _reset_root(level: int) -> logging.Logger:
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(level)
    return root


def setup_logging(config: Any,
                  run_id: Optional[str] = None,
                  log_file: Optional[Union[str, Path]] = None,
                  console: bool = True,
                  file: bool = True,
                  log_level: Optional[str] = None):
    """Install the console and rotating JSON file handlers on the root logger.

    Existing root handlers are replaced.

    Args:
        config: Config instance (anything with a dot-notation ``get``)
        run_id: Run id put into the logging context
        log_file: Log file path (defaults to ``logging.file``, then
            ``<paths.logs_dir>/bnghex.log``)
        console: Log to stderr
        file: Log to the rotating file
        log_level: Console level (defaults to ``logging.level``)
    """
    level = _level_number(log_level or config.get('logging.level', 'INFO'))
    # The file records everything; the console filters by its own level
    root = _reset_root(logging.DEBUG if file else level)

    if console:
        handler = ConsoleHandler(use_colors=sys.stderr.isatty())
        handler.setLevel(level)
        root.addHandler(handler)

    if file:
        if log_file is None:
            log_file = (config.get('logging.file')
                        or Path(config.get('paths.logs_dir', 'logs')) / 'bnghex.log')
        root.addHandler(FileHandler(
            log_file,
            max_bytes=config.get('logging.max_file_size', 10 * 1024 * 1024),
            backup_count=config.get('logging.backup_count', 3),
        ))

    if run_id:
        run_context.set(run_id)

    get_logger(__name__).debug(
        "Structured logging system initialized",
        extra={'context': {
            'log_level': logging.getLevelName(level),
            'console': console,
            'file': str(log_file) if file else None,
        }}
    )


def setup_simple_logging(log_level: str = 'INFO'):
    """Console-only logging at ``log_level``."""
    level = _level_number(log_level)
    handler = ConsoleHandler()
    handler.setLevel(level)
    _reset_root(level).addHandler(handler)


def get_log_stats() -> Dict[str, Any]:
    """Rotation settings of the root logger's file handler, if there is one."""
    for handler in logging.getLogger().handlers:
        if isinstance(handler, FileHandler):
            return {'file': {
                'filename': handler.baseFilename,
                'max_bytes': handler.maxBytes,
                'backup_count': handler.backupCount,
            }}
    return {}

"""Rotating log file handler."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Union

from ..formatters import JsonFormatter

PLAIN_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class FileHandler(RotatingFileHandler):
    """Size-rotated log file that records every level.

    Writes JSON lines unless ``use_json`` is false. Missing parent
    directories are created.
    """

    def __init__(self, filename: Union[str, Path], max_bytes: int = 10 * 1024 * 1024,
                 backup_count: int = 3, encoding: str = 'utf-8', use_json: bool = True):
        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(str(path), maxBytes=max_bytes, backupCount=backup_count, encoding=encoding)

        self.setFormatter(JsonFormatter() if use_json else logging.Formatter(PLAIN_FORMAT))
        self.setLevel(logging.DEBUG)

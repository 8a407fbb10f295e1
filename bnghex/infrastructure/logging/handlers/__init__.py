"""Logging handlers for console and file output."""

from .file_handler import FileHandler
from .console_handler import ConsoleHandler

__all__ = ['FileHandler', 'ConsoleHandler']

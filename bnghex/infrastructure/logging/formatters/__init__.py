"""Log formatters for different output formats."""

from .json_formatter import JsonFormatter
from .human_formatter import HumanFormatter

__all__ = ['JsonFormatter', 'HumanFormatter']
"""Console formatter: one readable line per record, optional ANSI colors."""

import logging
from datetime import datetime
from typing import Any, Dict, List


class HumanFormatter(logging.Formatter):
    """Render records as ``time LEVEL [logger] [context] message``.

    Performance data goes on an indented second line, tracebacks below it.
    """

    LEVEL_COLORS = {
        'DEBUG': '36',
        'INFO': '0',
        'WARNING': '93',
        'ERROR': '91',
        'CRITICAL': '95',
    }
    BOLD = '1'
    DIM = '2'

    def __init__(self, use_colors: bool = True, show_context: bool = True):
        super().__init__()
        self.use_colors = use_colors
        self.show_context = show_context

    def _paint(self, text: str, code: str) -> str:
        if not self.use_colors or not text:
            return text
        return f"\033[{code}m{text}\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        level_code = self.LEVEL_COLORS.get(record.levelname, '0')
        stamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')

        fields = [
            self._paint(stamp, self.DIM),
            self._paint(f"{record.levelname:8}", level_code),
            self._paint(f"[{self._shorten_logger_name(record.name)}]", self.DIM),
        ]
        if self.show_context:
            context = self._format_context(getattr(record, 'context', None) or {})
            if context:
                fields.append(self._paint(context, self.BOLD))
        fields.append(record.getMessage())

        lines = [' '.join(fields)]

        summary = self._format_performance(getattr(record, 'performance', None) or {})
        if summary:
            lines.append('  ' + self._paint(f"Performance: {summary}", self.DIM))

        tb = getattr(record, 'traceback', None)
        if tb:
            lines.extend('  ' + self._paint(line, level_code) for line in tb.rstrip().splitlines())

        return '\n'.join(lines)

    @staticmethod
    def _format_context(context: Dict[str, Any]) -> str:
        """Short ``[run:… | grid:… | op:…]`` tag; run ids are cut to 8 chars."""
        tags: List[str] = []
        if context.get('run_id'):
            tags.append(f"run:{str(context['run_id'])[:8]}")
        if context.get('grid'):
            tags.append(f"grid:{context['grid']}")
        if context.get('operation'):
            tags.append(f"op:{str(context['operation']).rsplit('/', 1)[-1]}")
        return f"[{' | '.join(tags)}]" if tags else ''

    @staticmethod
    def _shorten_logger_name(name: str, max_length: int = 20) -> str:
        if len(name) <= max_length:
            return name
        tail = name.rsplit('.', 1)[-1]
        if len(tail) <= max_length - 3:
            return '...' + tail
        return name[:max_length - 3] + '...'

    @staticmethod
    def _format_performance(perf: Dict[str, Any]) -> str:
        pieces = []
        if 'duration_seconds' in perf:
            pieces.append(f"{perf['duration_seconds']:.3f}s")
        if 'items_per_second' in perf:
            pieces.append(f"{perf['items_per_second']:.1f} items/s")
        if 'cells' in perf:
            pieces.append(f"{perf['cells']} cells")
        return ' | '.join(pieces)

"""stderr handler for interactive runs."""

import logging
import os
import sys
from typing import IO, Optional

from ..formatters import HumanFormatter


def stream_supports_color(stream: IO) -> bool:
    """Colors only on a TTY, and never with NO_COLOR set or TERM=dumb."""
    isatty = getattr(stream, 'isatty', None)
    if isatty is None or not isatty():
        return False
    return not os.environ.get('NO_COLOR') and os.environ.get('TERM', '') != 'dumb'


class ConsoleHandler(logging.StreamHandler):
    """Human-readable log lines on stderr, leaving stdout to command output."""

    def __init__(self, stream: Optional[IO] = None, use_colors: Optional[bool] = None,
                 show_context: bool = True):
        stream = stream if stream is not None else sys.stderr
        super().__init__(stream)

        if use_colors is None:
            use_colors = stream_supports_color(stream)
        self.setFormatter(HumanFormatter(use_colors=use_colors, show_context=show_context))
        self.setLevel(logging.INFO)

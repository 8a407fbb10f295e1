"""JSON-lines formatter for log files."""

import json
import logging
import traceback
from datetime import datetime, timezone


class JsonFormatter(logging.Formatter):
    """One compact JSON object per record.

    ``context``, ``performance`` and ``traceback`` set by StructuredLogger
    become nested keys when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, timezone.utc).replace(tzinfo=None)
        payload = {
            'timestamp': created.isoformat() + 'Z',
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
            'process': record.process,
        }

        for key in ('context', 'performance', 'traceback'):
            value = getattr(record, key, None)
            if value:
                payload[key] = value

        if 'traceback' not in payload and record.exc_info:
            payload['traceback'] = self.formatException(record.exc_info)

        return json.dumps(payload, separators=(',', ':'), default=str)

    def formatException(self, exc_info) -> str:
        return ''.join(traceback.format_exception(*exc_info))

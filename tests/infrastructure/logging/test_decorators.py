"""Tests for logging decorators."""

from unittest.mock import patch

import pytest

from bnghex.infrastructure.logging.decorators import log_operation
from bnghex.infrastructure.logging.structured_logger import StructuredLogger


class TestLogOperation:
    """Test the log_operation decorator."""

    def test_returns_result(self):
        @log_operation("add")
        def add(a, b):
            return a + b

        with patch.object(StructuredLogger, 'log_performance') as mock_perf:
            assert add(2, 3) == 5

        name, duration = mock_perf.call_args.args
        assert name == "add"
        assert duration >= 0
        assert mock_perf.call_args.kwargs == {'status': 'success'}

    def test_default_name(self):
        @log_operation()
        def build_grid():
            return None

        with patch.object(StructuredLogger, 'log_performance') as mock_perf:
            build_grid()

        assert mock_perf.call_args.args[0] == "build_grid"
        assert build_grid.__name__ == "build_grid"

    def test_logs_arguments(self):
        @log_operation("convert", log_args=True, log_performance=False)
        def convert(path, zoom=10, cells=None):
            return path

        with patch.object(StructuredLogger, 'info') as mock_info:
            convert("points.csv", cells=[1, 2])

        context = mock_info.call_args_list[0].kwargs['extra']['context']
        assert context['arguments'] == {'path': 'points.csv', 'zoom': 10, 'cells': '<list>'}
        assert mock_info.call_args_list[-1].args[0] == "Completed convert"

    def test_logs_result(self):
        @log_operation("count", log_result=True, log_performance=False)
        def count():
            return 42

        with patch.object(StructuredLogger, 'info') as mock_info:
            count()

        assert mock_info.call_args_list[-1].kwargs['extra']['context']['result'] == 42

    def test_failure_logged_and_raised(self):
        @log_operation("explode")
        def explode():
            raise ValueError("bad input")

        with patch.object(StructuredLogger, 'error') as mock_error:
            with pytest.raises(ValueError):
                explode()

        message = mock_error.call_args.args[0]
        extra = mock_error.call_args.kwargs['extra']
        assert message == "Failed explode: bad input"
        assert extra['performance']['status'] == 'failed'
        assert extra['performance']['error_type'] == 'ValueError'
        assert mock_error.call_args.kwargs['exc_info'] is True

    def test_method(self):
        class Exporter:
            @log_operation("export")
            def export(self, rows):
                return len(rows)

        with patch.object(StructuredLogger, 'log_performance'):
            assert Exporter().export([1, 2, 3]) == 3

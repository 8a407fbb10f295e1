"""Tests for logging setup."""

import json
import logging

import pytest

from bnghex.config import Config
from bnghex.infrastructure.logging import get_logger, setup_logging, setup_simple_logging
from bnghex.infrastructure.logging.handlers import ConsoleHandler, FileHandler
from bnghex.infrastructure.logging.setup import get_log_stats
from bnghex.infrastructure.logging.structured_logger import run_context


@pytest.fixture
def reset_run_context():
    token = run_context.set(None)
    yield
    run_context.reset(token)


class TestSetupLogging:
    """Root logger configuration."""

    def test_console_and_file(self, tmp_path, restore_root_logger, reset_run_context):
        log_file = tmp_path / "logs" / "run.log"
        setup_logging(Config(), run_id="run-1", log_file=log_file, log_level="DEBUG")

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert [type(h) for h in root.handlers] == [ConsoleHandler, FileHandler]
        assert run_context.get() == "run-1"
        assert log_file.parent.is_dir()

    def test_json_lines_written(self, tmp_path, restore_root_logger, reset_run_context):
        log_file = tmp_path / "run.log"
        setup_logging(Config(), run_id="run-2", log_file=log_file, console=False)

        logger = get_logger("test.setup.file")
        logger.info("cells written", extra={'context': {'cells': 12}})
        for handler in restore_root_logger.handlers:
            handler.flush()

        lines = [json.loads(line) for line in log_file.read_text().splitlines()]
        record = next(r for r in lines if r['message'] == "cells written")
        assert record['context']['run_id'] == "run-2"
        assert record['context']['cells'] == 12

    def test_level_from_config(self, restore_root_logger):
        cfg = Config()
        cfg.settings['logging']['level'] = 'ERROR'

        setup_logging(cfg, console=True, file=False)

        assert restore_root_logger.level == logging.ERROR
        assert restore_root_logger.handlers[0].level == logging.ERROR

    def test_replaces_handlers(self, restore_root_logger):
        setup_logging(Config(), console=True, file=False)
        setup_logging(Config(), console=True, file=False)

        assert len(restore_root_logger.handlers) == 1

    def test_log_stats(self, tmp_path, restore_root_logger):
        setup_logging(Config(), log_file=tmp_path / "run.log", console=False)

        stats = get_log_stats()
        assert stats['file']['filename'] == str(tmp_path / "run.log")
        assert stats['file']['max_bytes'] == 10 * 1024 * 1024
        assert stats['file']['backup_count'] == 3

    def test_no_file_no_stats(self, restore_root_logger):
        setup_logging(Config(), console=True, file=False)
        assert get_log_stats() == {}


class TestSimpleLogging:
    """Console-only setup."""

    def test_console_only(self, restore_root_logger):
        setup_simple_logging('warning')

        assert restore_root_logger.level == logging.WARNING
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0], ConsoleHandler)

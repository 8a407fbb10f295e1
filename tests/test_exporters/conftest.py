"""Shared fixtures for exporter tests."""

import copy

import pytest

from bnghex.config import config


@pytest.fixture
def temp_dir(tmp_path):
    """Directory for export inputs and outputs."""
    return tmp_path


@pytest.fixture
def isolated_config(monkeypatch):
    """Copy of the shared settings that a test may change freely."""
    settings = copy.deepcopy(config.settings)
    monkeypatch.setattr(config, 'settings', settings)
    return config


@pytest.fixture
def write_csv(temp_dir):
    """Write rows to a CSV file and return its path."""
    def _write(name, rows):
        path = temp_dir / name
        path.write_text("\n".join(",".join(str(v) for v in row) for row in rows) + "\n")
        return path
    return _write

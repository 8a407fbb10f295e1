"""Shared fixtures for grid system tests."""

import pytest
from pathlib import Path
import yaml

from bnghex.config import config
from bnghex.config.config import Config
from bnghex.grid_systems.constants import CELL_RADIUS, CELL_WIDTHS


@pytest.fixture
def test_config_file(tmp_path) -> Path:
    """Create a real test config file."""
    config_data = {
        'grids': {
            'hexagonal': {
                'default_zoom': 12,
                'zooms': [6, 7],
                'line_step_factor': 0.25,
            }
        },
        'processing': {
            'max_workers': 1,
            'min_rows_per_worker': 8,
        },
        'processing_bounds': {
            'custom': {
                'test_region': [1000, 1000, 2000, 2000],
                'test_park': {
                    'bounds': [3000, 3000, 3500, 3600],
                    'category': 'park',
                    'metadata': {'source': 'survey'}
                },
                'broken': [1, 2, 3],
            }
        }
    }

    config_path = tmp_path / "test_config.yml"
    with open(config_path, 'w') as f:
        yaml.dump(config_data, f)

    return config_path


@pytest.fixture
def test_config(test_config_file):
    """Create a real Config instance."""
    return Config(test_config_file)


@pytest.fixture
def use_test_config(test_config, monkeypatch):
    """Point the shared config at the test settings for one test."""
    monkeypatch.setattr(config, 'settings', test_config.settings)
    return config


@pytest.fixture
def z12_spacing():
    """(cell width, row spacing) at zoom 12."""
    return CELL_WIDTHS[12], 1.5 * CELL_RADIUS[12]


@pytest.fixture
def sample_points():
    """BNG points spread over Great Britain."""
    return [
        (383640.0, 398260.0),
        (0.0, 0.0),
        (750000.0, 1350000.0),
        (530034.1, 180381.7),
        (325000.5, 673000.25),
        (123.456, 789.012),
        (699999.999, 1.0),
    ]

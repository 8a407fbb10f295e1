"""Tests for the configuration system."""

import pytest
import yaml

from bnghex.config import Config, config
from bnghex.config import defaults


class TestDefaults:
    """Default settings without any YAML file."""

    def test_sections(self):
        cfg = Config()
        for section in ('grids', 'processing', 'processing_bounds', 'export', 'logging', 'paths'):
            assert isinstance(cfg.settings[section], dict)

    def test_property_access(self):
        cfg = Config()

        assert cfg.grids['crs'] == 'EPSG:27700'
        assert cfg.processing['max_workers'] == 1
        assert cfg.export['csv']['on_error'] == 'raise'
        assert cfg.logging['backup_count'] == 3

    def test_defaults_not_shared(self):
        """Test that each Config gets its own copy of the defaults."""
        cfg = Config()
        cfg.settings['grids']['hexagonal']['zooms'].append(15)

        assert 15 not in defaults.GRIDS['hexagonal']['zooms']

    def test_shared_instance(self):
        assert isinstance(config, Config)


class TestGet:
    """Dot-notation lookup."""

    def test_nested_value(self):
        assert Config().get('grids.hexagonal.line_step_factor') == 0.5

    def test_missing_value(self):
        cfg = Config()

        assert cfg.get('grids.hexagonal.nope') is None
        assert cfg.get('nope.nope', 'fallback') == 'fallback'

    def test_walks_through_non_dict(self):
        assert Config().get('processing.max_workers.deeper', 7) == 7


class TestYamlOverride:
    """Merging YAML files over the defaults."""

    def test_deep_merge(self, tmp_path):
        path = tmp_path / 'config.yml'
        path.write_text(yaml.dump({
            'grids': {'hexagonal': {'default_zoom': 12}},
            'processing': {'max_workers': 4},
        }))

        cfg = Config(path)

        assert cfg.config_file == path
        assert cfg.get('grids.hexagonal.default_zoom') == 12
        assert cfg.get('grids.hexagonal.line_step_factor') == 0.5
        assert cfg.get('processing.max_workers') == 4
        assert cfg.get('processing.min_rows_per_worker') == 64

    def test_lists_replaced(self, tmp_path):
        path = tmp_path / 'config.yml'
        path.write_text(yaml.dump({'grids': {'hexagonal': {'zooms': [3]}}}))

        assert Config(path).get('grids.hexagonal.zooms') == [3]

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'config.yml'
        path.write_text('')

        assert Config(path).get('processing.max_workers') == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config(tmp_path / 'missing.yml')

    def test_non_mapping(self, tmp_path):
        path = tmp_path / 'config.yml'
        path.write_text('- just\n- a list\n')

        with pytest.raises(yaml.YAMLError):
            Config(path)

    def test_load_file(self, tmp_path):
        path = tmp_path / 'extra.yml'
        path.write_text(yaml.dump({'export': {'csv': {'on_error': 'skip'}}}))

        cfg = Config()
        cfg.load_file(path)

        assert cfg.get('export.csv.on_error') == 'skip'
        assert cfg.get('export.parquet.compression') == 'snappy'
        assert cfg.config_file == path

    def test_load_file_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config().load_file(tmp_path / 'missing.yml')


class TestDiscovery:
    """Auto-discovery of config.yml."""

    def test_found_in_working_directory(self, tmp_path, monkeypatch):
        (tmp_path / 'config.yml').write_text(yaml.dump({'processing': {'max_workers': 3}}))
        monkeypatch.chdir(tmp_path)

        cfg = Config()

        assert cfg.config_file == tmp_path / 'config.yml'
        assert cfg.get('processing.max_workers') == 3

    def test_broken_file_falls_back(self, tmp_path, monkeypatch, caplog):
        (tmp_path / 'config.yml').write_text('grids: [unclosed\n')
        monkeypatch.chdir(tmp_path)

        cfg = Config()

        assert cfg.config_file is None
        assert cfg.get('processing.max_workers') == 1
        assert 'using defaults' in caplog.text

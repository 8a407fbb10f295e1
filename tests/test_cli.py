"""Tests for the command line interface."""

import copy
import csv
import json
import logging

import pytest
import yaml
from click.testing import CliRunner

from bnghex.cli import cli
from bnghex.config import config
from bnghex.grid_systems import HexCell, HexGrid


@pytest.fixture(autouse=True)
def isolated_cli(monkeypatch):
    """Keep config and root logger changes made by a command inside the test."""
    monkeypatch.setattr(config, 'settings', copy.deepcopy(config.settings))
    monkeypatch.setattr(config, 'config_file', config.config_file)

    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def runner():
    return CliRunner()


class TestCellCommand:
    """bnghex cell X Y"""

    def test_reference_point(self, runner):
        result = runner.invoke(cli, ['cell', '383640', '398260', '--zoom', '12'])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert (data['row'], data['col'], data['zoom_level']) == (25548, 21313, 12)
        assert data['easting'] == 383634.0
        assert data['id'] == HexCell.from_address(25548, 21313, 12).id

    def test_polygon(self, runner):
        result = runner.invoke(cli, ['cell', '383640', '398260', '-z', '12', '--polygon'])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)['polygon'].startswith('POLYGON')

    def test_default_zoom(self, runner):
        result = runner.invoke(cli, ['cell', '383640', '398260'])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)['zoom_level'] == config.get('grids.hexagonal.default_zoom')

    def test_wgs84(self, runner):
        result = runner.invoke(cli, ['cell', '--crs', 'WGS84', '--zoom', '12', '--', '-0.1276', '51.5072'])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)['id'] == HexCell.from_wgs84((-0.1276, 51.5072), 12).id

    def test_outside_extent(self, runner):
        result = runner.invoke(cli, ['cell', '800000', '100', '--zoom', '12'])

        assert result.exit_code == 1
        assert '❌' in result.output

    def test_zoom_out_of_range(self, runner):
        result = runner.invoke(cli, ['cell', '1000', '1000', '--zoom', '16'])
        assert result.exit_code == 2

    def test_config_option(self, runner, tmp_path):
        path = tmp_path / 'config.yml'
        path.write_text(yaml.dump({'grids': {'hexagonal': {'default_zoom': 7}}}))

        result = runner.invoke(cli, ['--config', str(path), 'cell', '383640', '398260'])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)['zoom_level'] == 7


class TestDecodeCommand:
    """bnghex decode HEX_ID"""

    def test_round_trip(self, runner):
        cell = HexCell.from_address(812, 377, 10)

        result = runner.invoke(cli, ['decode', cell.id])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert (data['row'], data['col'], data['zoom_level']) == (812, 377, 10)
        assert data['id'] == cell.id

    def test_invalid(self, runner):
        result = runner.invoke(cli, ['decode', 'not+an+id'])

        assert result.exit_code == 1
        assert '❌' in result.output


class TestGridCommand:
    """bnghex grid MINX MINY MAXX MAXY"""

    def test_csv(self, runner, tmp_path):
        output = tmp_path / 'grid.csv'

        result = runner.invoke(cli, ['grid', '1000', '1000', '1300', '1200', '-z', '12', '-o', str(output)])

        assert result.exit_code == 0, result.output
        assert '✅ Wrote' in result.output
        with open(output, newline='') as f:
            rows = list(csv.reader(f))
        expected = HexGrid.from_extent(1000, 1000, 1300, 1200, 12)
        assert rows[0] == ['id', 'zoom_level', 'row', 'col', 'easting', 'northing', 'geometry']
        assert sorted(r[0] for r in rows[1:]) == sorted(expected.get_cell_ids())

    def test_parquet(self, runner, tmp_path):
        pytest.importorskip('pyarrow')
        import geopandas as gpd

        result = runner.invoke(cli, ['grid', '1000', '1000', '1300', '1200', '-z', '12',
                                     '-o', str(tmp_path / 'grid'), '--format', 'parquet'])

        assert result.exit_code == 0, result.output
        gdf = gpd.read_parquet(tmp_path / 'grid.parquet')
        assert len(gdf) == len(HexGrid.from_extent(1000, 1000, 1300, 1200, 12))

    def test_degenerate_extent(self, runner, tmp_path):
        result = runner.invoke(cli, ['grid', '1300', '1000', '1000', '1200', '-z', '12',
                                     '-o', str(tmp_path / 'grid.csv')])

        assert result.exit_code == 1
        assert 'Failed to build grid' in result.output
        assert not (tmp_path / 'grid.csv').exists()

    def test_log_file(self, runner, tmp_path):
        log_file = tmp_path / 'run.log'

        result = runner.invoke(cli, ['--log-file', str(log_file), 'grid', '1000', '1000', '1300', '1200',
                                     '-z', '12', '-o', str(tmp_path / 'grid.csv')])

        assert result.exit_code == 0, result.output
        records = [json.loads(line) for line in log_file.read_text().splitlines()]
        started = next(r for r in records if r['message'] == 'Run started: grid')
        assert started['context']['run_id']
        assert started['context']['command'] == 'grid'


class TestCsvCommand:
    """bnghex csv INPUT OUTPUT"""

    @pytest.fixture
    def points(self, tmp_path):
        path = tmp_path / 'points.csv'
        path.write_text('name,x,y\nmanchester,383640,398260\nsea,900000,10\n')
        return path

    def test_convert(self, runner, tmp_path, points):
        output = tmp_path / 'hex.csv'
        points.write_text('name,x,y\nmanchester,383640,398260\n')

        result = runner.invoke(cli, ['csv', str(points), str(output), '-z', '12',
                                     '--x-column', 'x', '--y-column', 'y'])

        assert result.exit_code == 0, result.output
        with open(output, newline='') as f:
            rows = list(csv.reader(f))
        assert rows == [['hex_id', 'name'],
                        [HexCell.from_bng((383640, 398260), 12).id, 'manchester']]

    def test_bad_row_aborts(self, runner, tmp_path, points):
        result = runner.invoke(cli, ['csv', str(points), str(tmp_path / 'hex.csv'), '-z', '12',
                                     '--x-column', 'x', '--y-column', 'y'])

        assert result.exit_code == 1
        assert 'Line 3' in result.output

    def test_skip_errors(self, runner, tmp_path, points):
        result = runner.invoke(cli, ['csv', str(points), str(tmp_path / 'hex.csv'), '-z', '12',
                                     '--x-column', 'x', '--y-column', 'y', '--skip-errors', '--gzip'])

        assert result.exit_code == 0, result.output
        assert 'Skipped 1 rows' in result.output
        assert 'line 3' in result.output
        assert (tmp_path / 'hex.csv.gz').exists()

    def test_geometry_column(self, runner, tmp_path):
        source = tmp_path / 'geoms.csv'
        source.write_text('geom,label\n"POINT (383640 398260)",a\n')

        result = runner.invoke(cli, ['csv', str(source), str(tmp_path / 'hex.csv'), '-z', '12',
                                     '--geometry-column', 'geom', '--hex-geometry', 'wkt'])

        assert result.exit_code == 0, result.output
        with open(tmp_path / 'hex.csv', newline='') as f:
            rows = list(csv.reader(f))
        assert rows[0] == ['hex_id', 'hex_geometry', 'label']

    def test_location_columns_required(self, runner, tmp_path, points):
        result = runner.invoke(cli, ['csv', str(points), str(tmp_path / 'hex.csv'), '-z', '12',
                                     '--x-column', 'x'])

        assert result.exit_code == 2
        assert '--geometry-column' in result.output

#!/usr/bin/env python3
"""
BNG hexagon command line tool.

Look up cells for coordinates, decode identifiers, build grids over an
extent and tag CSV rows with hex identifiers.
"""

import csv as csv_lib
import json
from pathlib import Path

import click

from .config import config
from .grid_systems import GridSystemError, HexCell, HexGrid, Crs
from .infrastructure.logging import LoggingContext, setup_logging
from .processors.exporters.base_exporter import ExportConfig, ExportError
from .processors.exporters.csv_exporter import CsvHexConfig, CsvHexExporter

CRS_CHOICE = click.Choice(['bng', 'wgs84'], case_sensitive=False)


def _cell_summary(cell: HexCell) -> dict:
    return {
        'id': cell.id,
        'zoom_level': cell.zoom_level,
        'row': cell.row,
        'col': cell.col,
        'easting': cell.easting,
        'northing': cell.northing,
    }


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', 'config_file', type=click.Path(exists=True, dir_okay=False),
              help='YAML file merged over the default configuration')
@click.option('--log-file', type=click.Path(dir_okay=False), help='Also write JSON logs to this file')
@click.pass_context
def cli(ctx, verbose, config_file, log_file):
    """Hexagonal cell indexing for British National Grid."""
    if config_file:
        config.load_file(Path(config_file))

    setup_logging(
        config,
        log_file=log_file,
        console=True,
        file=log_file is not None,
        log_level='DEBUG' if verbose else 'WARNING',
    )
    ctx.obj = LoggingContext()


@cli.command()
@click.argument('x', type=float)
@click.argument('y', type=float)
@click.option('--zoom', '-z', type=click.IntRange(0, 15), default=None,
              help='Zoom level (defaults to grids.hexagonal.default_zoom)')
@click.option('--crs', type=CRS_CHOICE, default='bng', show_default=True,
              help='Coordinate system of X and Y')
@click.option('--polygon', is_flag=True, help='Include the hexagon as WKT')
def cell(x, y, zoom, crs, polygon):
    """Show the cell containing a coordinate."""
    if zoom is None:
        zoom = config.get('grids.hexagonal.default_zoom', 10)
    try:
        if Crs.parse(crs) is Crs.WGS84:
            hex_cell = HexCell.from_wgs84((x, y), zoom)
        else:
            hex_cell = HexCell.from_bng((x, y), zoom)
    except GridSystemError as e:
        click.echo(f"❌ {e}", err=True)
        raise click.Abort()

    summary = _cell_summary(hex_cell)
    if polygon:
        summary['polygon'] = hex_cell.to_polygon().wkt
    click.echo(json.dumps(summary, indent=2))


@cli.command()
@click.argument('hex_id')
def decode(hex_id):
    """Decode a hex identifier to its cell."""
    try:
        hex_cell = HexCell.from_hex_id(hex_id)
    except GridSystemError as e:
        click.echo(f"❌ {e}", err=True)
        raise click.Abort()

    click.echo(json.dumps(_cell_summary(hex_cell), indent=2))


@cli.command()
@click.argument('min_x', type=float)
@click.argument('min_y', type=float)
@click.argument('max_x', type=float)
@click.argument('max_y', type=float)
@click.option('--zoom', '-z', type=click.IntRange(0, 15), required=True, help='Zoom level')
@click.option('--output', '-o', type=click.Path(dir_okay=False), required=True, help='Output file')
@click.option('--format', 'fmt', type=click.Choice(['csv', 'parquet']), default='csv', show_default=True)
@click.option('--workers', type=click.IntRange(min=1), default=None,
              help='Worker processes (defaults to processing.max_workers)')
@click.pass_obj
def grid(ctx, min_x, min_y, max_x, max_y, zoom, output, fmt, workers):
    """Build the grid covering a BNG extent and write it out."""
    output = Path(output)
    try:
        with ctx.run('grid'), ctx.grid(zoom):
            with ctx.operation('build_grid', zoom=zoom):
                hex_grid = HexGrid.from_extent(min_x, min_y, max_x, max_y, zoom, max_workers=workers)

            with ctx.operation('write_grid', format=fmt):
                if fmt == 'parquet':
                    from .processors.exporters.parquet_exporter import cells_to_geoparquet
                    output = cells_to_geoparquet(hex_grid, output)
                else:
                    _write_grid_csv(hex_grid, output)
    except (GridSystemError, ExportError) as e:
        click.echo(f"❌ Failed to build grid: {e}", err=True)
        raise click.Abort()

    click.echo(f"✅ Wrote {len(hex_grid):,} cells to {output}")


def _write_grid_csv(hex_grid: HexGrid, output: Path):
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, 'w', newline='', encoding='utf-8') as f:
        writer = csv_lib.writer(f)
        writer.writerow(['id', 'zoom_level', 'row', 'col', 'easting', 'northing', 'geometry'])
        for c in hex_grid:
            writer.writerow([c.id, c.zoom_level, c.row, c.col, c.easting, c.northing, c.to_polygon().wkt])


@cli.command()
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False))
@click.argument('output_path', type=click.Path(dir_okay=False))
@click.option('--zoom', '-z', type=click.IntRange(0, 15), required=True, help='Zoom level')
@click.option('--geometry-column', help='Column holding WKT or GeoJSON')
@click.option('--x-column', help='Column holding easting or longitude')
@click.option('--y-column', help='Column holding northing or latitude')
@click.option('--crs', type=CRS_CHOICE, default='bng', show_default=True,
              help='Coordinate system of the input')
@click.option('--exclude', multiple=True, help='Column to drop from the output (repeatable)')
@click.option('--hex-geometry', type=click.Choice(['wkt', 'geojson']), default=None,
              help='Add the hexagon polygon as a hex_geometry column')
@click.option('--skip-errors', is_flag=True, help='Skip rows that cannot be converted')
@click.option('--gzip', 'use_gzip', is_flag=True, help='Compress the output')
@click.pass_obj
def csv(ctx, input_path, output_path, zoom, geometry_column, x_column, y_column,
        crs, exclude, hex_geometry, skip_errors, use_gzip):
    """Tag each CSV row with the hex id of the cells it covers."""
    if not geometry_column and not (x_column and y_column):
        raise click.UsageError('Give --geometry-column, or both --x-column and --y-column')

    try:
        hex_config = CsvHexConfig(
            zoom_level=zoom,
            geometry_column=geometry_column,
            x_column=x_column,
            y_column=y_column,
            crs=crs,
            exclude_columns=list(exclude),
            hex_geometry=hex_geometry,
            on_error='skip' if skip_errors else None,
        )
        exporter = CsvHexExporter(hex_config)
        with ctx.run('csv'), ctx.source(input_path), ctx.grid(zoom):
            output = exporter.export(input_path, ExportConfig(
                output_path=Path(output_path),
                compression='gzip' if use_gzip else None,
            ))
    except (GridSystemError, ExportError) as e:
        click.echo(f"❌ Failed to convert CSV: {e}", err=True)
        raise click.Abort()

    stats = exporter.get_export_stats()
    click.echo(f"✅ Wrote {stats['rows_exported']:,} rows to {output}")
    if stats['rows_skipped']:
        click.echo(f"⚠️  Skipped {stats['rows_skipped']:,} rows", err=True)
        for skipped in stats['skipped'][:10]:
            click.echo(f"   line {skipped['line']}: {skipped['reason']}", err=True)


def main():
    cli()


if __name__ == '__main__':
    main()

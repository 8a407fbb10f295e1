"""GeoParquet export of hexagon cells via GeoPandas."""

from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Union

import geopandas as gpd
import pandas as pd

from ...config import config
from ...grid_systems.hex_cell import HexCell
from ...grid_systems.hexagonal_grid import HexGrid
from ...grid_systems.projection import BNG_CRS
from ...infrastructure.logging import get_logger
from ...infrastructure.logging.decorators import log_operation
from .base_exporter import BaseExporter, ExportConfig, ExportError, ProgressCallback

logger = get_logger(__name__)

CELL_COLUMNS = ['id', 'zoom_level', 'row', 'col', 'easting', 'northing']
GEOMETRY_KINDS = ('polygon', 'point')


def cells_to_geodataframe(cells: Union[HexGrid, Iterable[HexCell]],
                          geometry: Optional[str] = None) -> gpd.GeoDataFrame:
    """
    Tabulate cells as a GeoDataFrame in EPSG:27700.

    Args:
        cells: A grid or any iterable of cells
        geometry: 'polygon' for hexagons or 'point' for centers
            (defaults to ``export.parquet.geometry``)
    """
    geometry = geometry or config.get('export.parquet.geometry', 'polygon')
    if geometry not in GEOMETRY_KINDS:
        raise ExportError(f"Unsupported geometry kind: {geometry}. Supported: {GEOMETRY_KINDS}")

    cells = list(cells)
    frame = pd.DataFrame(
        [(c.id, c.zoom_level, c.row, c.col, c.easting, c.northing) for c in cells],
        columns=CELL_COLUMNS
    )
    if geometry == 'polygon':
        geoms = [c.to_polygon() for c in cells]
    else:
        geoms = [c.center for c in cells]

    return gpd.GeoDataFrame(frame, geometry=geoms, crs=BNG_CRS)


class GeoParquetExporter(BaseExporter):
    """Write cells to a GeoParquet file."""

    supported_compressions = {'snappy', 'gzip', 'brotli', 'zstd', None}

    @log_operation("cells_to_geoparquet")
    def export(self,
               cells: Union[HexGrid, Iterable[HexCell]],
               config: ExportConfig,
               progress_callback: Optional[ProgressCallback] = None) -> Path:
        """
        Export cells to GeoParquet.

        Args:
            cells: Grid or iterable of cells
            config: Export configuration; ``geometry`` may be passed as an
                additional option ('polygon' or 'point')
            progress_callback: Called once with the row count when written

        Returns:
            Path to exported file
        """
        self._validate_config(config)
        self._reset_stats()

        gdf = cells_to_geodataframe(cells, config.additional_options.get('geometry'))
        self.export_stats['rows_read'] = len(gdf)

        output_file = config.output_path
        if output_file.suffix != '.parquet':
            output_file = output_file.with_suffix('.parquet')
        output_file.parent.mkdir(parents=True, exist_ok=True)

        gdf.to_parquet(output_file, compression=config.compression, index=False)

        self.export_stats['rows_exported'] = len(gdf)
        self.export_stats['chunks_processed'] = 1
        self.export_stats['end_time'] = datetime.now()
        if progress_callback:
            progress_callback({'rows_exported': len(gdf)})

        if config.include_metadata:
            self._create_metadata_file(output_file, {'cells': len(gdf), 'crs': BNG_CRS}, config)

        logger.info(f"Exported {len(gdf):,} cells to {output_file}")
        return output_file

    def validate_export(self, output_path: Path) -> bool:
        """Check the file reads back with the expected columns and CRS."""
        output_path = Path(output_path)
        if not output_path.exists():
            logger.error(f"Export file not found: {output_path}")
            return False

        gdf = gpd.read_parquet(output_path)
        missing = [c for c in CELL_COLUMNS if c not in gdf.columns]
        if missing:
            logger.error(f"Export file is missing columns {missing}: {output_path}")
            return False
        return gdf.crs is not None and gdf.crs.to_epsg() == 27700


def cells_to_geoparquet(cells: Union[HexGrid, Iterable[HexCell]],
                        output_path: Union[str, Path],
                        geometry: Optional[str] = None,
                        compression: Optional[str] = None) -> Path:
    """Write cells to ``output_path`` as GeoParquet and return the path."""
    if compression is None:
        compression = config.get('export.parquet.compression', 'snappy')
    options = {'geometry': geometry} if geometry else {}
    return GeoParquetExporter().export(cells, ExportConfig(
        output_path=Path(output_path),
        compression=compression,
        **options
    ))

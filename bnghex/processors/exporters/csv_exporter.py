# bnghex/processors/exporters/csv_exporter.py
"""CSV exporter that tags each input row with the hexagon cells it falls in."""

import csv
import gzip
import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from shapely.geometry import mapping

from ...config import config
from ...grid_systems.exceptions import GridSystemError
from ...grid_systems.hex_cell import HexCell
from ...grid_systems.lattice import validate_zoom
from ...grid_systems.projection import Crs
from ...infrastructure.logging import get_logger
from ...infrastructure.logging.decorators import log_operation
from ..geometry_parser import parse_geometry
from .base_exporter import BaseExporter, ExportConfig, ExportError, ProgressCallback

logger = get_logger(__name__)

HEX_GEOMETRY_FORMATS = ('wkt', 'geojson')
ON_ERROR_POLICIES = ('raise', 'skip')


@dataclass
class CsvHexConfig:
    """
    How to find locations in an input CSV and what to write out.

    Either ``geometry_column`` (WKT or GeoJSON text) or both ``x_column``
    and ``y_column`` must be set. The source columns are always dropped from
    the output, as are any named in ``exclude_columns``.
    """
    zoom_level: int
    geometry_column: Optional[str] = None
    x_column: Optional[str] = None
    y_column: Optional[str] = None
    crs: Union[Crs, str] = Crs.BNG
    exclude_columns: List[str] = field(default_factory=list)
    hex_geometry: Optional[str] = None
    on_error: Optional[str] = None

    def __post_init__(self):
        self.zoom_level = validate_zoom(self.zoom_level)
        try:
            self.crs = Crs.parse(self.crs)
        except ValueError as e:
            raise ExportError(str(e), original_exception=e)

        if self.geometry_column is not None:
            if not self.geometry_column:
                raise ExportError("Geometry column name cannot be empty")
            if self.x_column or self.y_column:
                raise ExportError("Use either a geometry column or x/y columns, not both")
        else:
            if not self.x_column:
                raise ExportError("X column name cannot be empty")
            if not self.y_column:
                raise ExportError("Y column name cannot be empty")

        if self.hex_geometry is None:
            self.hex_geometry = config.get('export.csv.hex_geometry')
        if self.hex_geometry is not None:
            self.hex_geometry = str(self.hex_geometry).lower()
            if self.hex_geometry not in HEX_GEOMETRY_FORMATS:
                raise ExportError(
                    f"Unsupported hex geometry format: {self.hex_geometry}. "
                    f"Supported: {HEX_GEOMETRY_FORMATS}"
                )

        if self.on_error is None:
            self.on_error = config.get('export.csv.on_error', 'raise')
        if self.on_error not in ON_ERROR_POLICIES:
            raise ExportError(f"on_error must be one of {ON_ERROR_POLICIES}, got: {self.on_error!r}")

    @classmethod
    def from_geometry_column(cls, column: str, zoom_level: int, **kwargs) -> 'CsvHexConfig':
        return cls(zoom_level=zoom_level, geometry_column=column, **kwargs)

    @classmethod
    def from_coords(cls, x_column: str, y_column: str, zoom_level: int, **kwargs) -> 'CsvHexConfig':
        return cls(zoom_level=zoom_level, x_column=x_column, y_column=y_column, **kwargs)

    @property
    def source_columns(self) -> List[str]:
        if self.geometry_column is not None:
            return [self.geometry_column]
        return [self.x_column, self.y_column]


def _open_text(path: Path, mode: str):
    if path.suffix == '.gz':
        return gzip.open(path, mode + 't', newline='', encoding='utf-8')
    return open(path, mode, newline='', encoding='utf-8')


class CsvHexExporter(BaseExporter):
    """Convert a CSV of points or geometries into a CSV keyed by hex id."""

    supported_compressions = {'gzip', 'gz', None}

    def __init__(self, hex_config: CsvHexConfig):
        super().__init__()
        self.hex_config = hex_config

    @log_operation("csv_to_hex")
    def export(self,
               input_path: Union[str, Path],
               config: ExportConfig,
               progress_callback: Optional[ProgressCallback] = None) -> Path:
        """
        Stream the input CSV to the output, one row per covering cell.

        Args:
            input_path: Source CSV (``.gz`` is read as gzip)
            config: Export configuration (output path, compression, metadata)
            progress_callback: Called every ``config.chunk_size`` input rows

        Returns:
            Path to exported CSV file

        Raises:
            ExportError: missing columns, or a bad row when on_error='raise'
        """
        input_path = Path(input_path)
        self._validate_config(config)
        self._reset_stats()

        if not input_path.exists():
            raise ExportError(f"Input file not found: {input_path}")

        output_file = self._get_output_path(config)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        with _open_text(input_path, 'r') as src, _open_text(output_file, 'w') as out:
            self._export_rows(csv.reader(src), csv.writer(out), config, progress_callback)

        self.export_stats['end_time'] = datetime.now()

        if config.include_metadata:
            self._create_metadata_file(output_file, {
                'input_file': str(input_path),
                'zoom_level': self.hex_config.zoom_level,
                'crs': self.hex_config.crs.value,
                'source_columns': self.hex_config.source_columns,
            }, config)

        logger.info(f"Export completed: {output_file}")
        logger.info(
            f"Exported {self.export_stats['rows_exported']:,} rows from "
            f"{self.export_stats['rows_read']:,} input rows "
            f"({self.export_stats['rows_skipped']:,} skipped)"
        )
        return output_file

    def _export_rows(self, reader, writer, config: ExportConfig,
                     progress_callback: Optional[ProgressCallback]):
        try:
            headers = next(reader)
        except StopIteration:
            raise ExportError("Input CSV is empty")

        source_idx = []
        for column in self.hex_config.source_columns:
            if column not in headers:
                raise ExportError(f"Column '{column}' not found. Available: {headers}")
            source_idx.append(headers.index(column))

        excluded = set(source_idx)
        excluded.update(i for i, h in enumerate(headers) if h in self.hex_config.exclude_columns)
        kept = [i for i in range(len(headers)) if i not in excluded]

        out_header = ['hex_id']
        if self.hex_config.hex_geometry:
            out_header.append('hex_geometry')
        out_header.extend(headers[i] for i in kept)
        writer.writerow(out_header)

        for record in reader:
            if not record:
                continue
            self.export_stats['rows_read'] += 1
            line = reader.line_num

            try:
                cells = self._cells_for_record(record, source_idx)
            except (GridSystemError, ValueError, IndexError) as e:
                if self.hex_config.on_error == 'raise':
                    raise ExportError(str(e), line=line, original_exception=e)
                self.export_stats['rows_skipped'] += 1
                self.export_stats['skipped'].append({'line': line, 'reason': str(e)})
                logger.warning(f"Skipping line {line}: {e}")
                continue

            passthrough = [record[i] if i < len(record) else '' for i in kept]
            for cell in cells:
                row = [cell.id]
                if self.hex_config.hex_geometry:
                    row.append(self._format_hex_geometry(cell))
                row.extend(passthrough)
                writer.writerow(row)
                self.export_stats['rows_exported'] += 1

            if self.export_stats['rows_read'] % config.chunk_size == 0:
                self.export_stats['chunks_processed'] += 1
                if progress_callback:
                    progress_callback({
                        'rows_read': self.export_stats['rows_read'],
                        'rows_exported': self.export_stats['rows_exported'],
                        'rows_skipped': self.export_stats['rows_skipped'],
                    })

    def _cells_for_record(self, record: List[str], source_idx: List[int]) -> List[HexCell]:
        zoom = self.hex_config.zoom_level
        crs = self.hex_config.crs

        if self.hex_config.geometry_column is not None:
            if source_idx[0] >= len(record):
                raise IndexError(f"Missing geometry column at index {source_idx[0]}")
            geometry = parse_geometry(record[source_idx[0]])
            return HexCell.from_geometry(geometry, zoom, crs)

        x_idx, y_idx = source_idx
        if x_idx >= len(record) or y_idx >= len(record):
            raise IndexError("Missing coordinate column")
        x_str, y_str = record[x_idx].strip(), record[y_idx].strip()
        try:
            x = float(x_str)
        except ValueError:
            raise ValueError(f"Invalid X coordinate: '{x_str}'")
        try:
            y = float(y_str)
        except ValueError:
            raise ValueError(f"Invalid Y coordinate: '{y_str}'")

        if crs is Crs.WGS84:
            return [HexCell.from_wgs84((x, y), zoom)]
        return [HexCell.from_bng((x, y), zoom)]

    def _format_hex_geometry(self, cell: HexCell) -> str:
        polygon = cell.to_polygon()
        if self.hex_config.hex_geometry == 'geojson':
            return json.dumps(mapping(polygon))
        return polygon.wkt

    def _get_output_path(self, config: ExportConfig) -> Path:
        """Output path, with ``.gz`` appended for gzip output."""
        output_path = config.output_path
        if config.compression in ('gzip', 'gz') and output_path.suffix != '.gz':
            output_path = output_path.with_name(output_path.name + '.gz')
        return output_path

    def validate_export(self, output_path: Path) -> bool:
        """Check the output exists and starts with a hex_id header."""
        output_path = Path(output_path)
        if not output_path.exists():
            logger.error(f"Export file not found: {output_path}")
            return False

        with _open_text(output_path, 'r') as f:
            header = next(csv.reader(f), None)

        if not header or header[0] != 'hex_id':
            logger.error(f"Export file has no hex_id header: {output_path}")
            return False
        return True


def csv_to_hex_csv(input_path: Union[str, Path],
                   output_path: Union[str, Path],
                   hex_config: CsvHexConfig,
                   compression: Optional[str] = None,
                   include_metadata: bool = False) -> Dict[str, Any]:
    """
    Convert ``input_path`` to a hex-tagged CSV at ``output_path``.

    Returns:
        Export statistics, including any skipped rows
    """
    exporter = CsvHexExporter(hex_config)
    exporter.export(input_path, ExportConfig(
        output_path=Path(output_path),
        compression=compression,
        include_metadata=include_metadata,
    ))
    return exporter.get_export_stats()

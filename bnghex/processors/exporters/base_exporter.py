# bnghex/processors/exporters/base_exporter.py
"""Base exporter for cell export operations."""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, Callable
from pathlib import Path
import json
from datetime import datetime

from ...infrastructure.logging import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[Dict[str, Any]], None]


class ExportError(Exception):
    """Raised when an export cannot be completed."""

    def __init__(self, message: str, line: Optional[int] = None,
                 original_exception: Optional[Exception] = None):
        if line is not None:
            message = f"Line {line}: {message}"
        super().__init__(message)
        self.line = line
        self.original_exception = original_exception


class ExportConfig:
    """Configuration for export operations."""

    def __init__(self,
                 output_path: Path,
                 chunk_size: int = 10000,
                 include_metadata: bool = False,
                 compression: Optional[str] = None,
                 **kwargs):
        self.output_path = Path(output_path)
        self.chunk_size = chunk_size
        self.include_metadata = include_metadata
        self.compression = compression
        self.additional_options = kwargs


class BaseExporter(ABC):
    """Abstract base class for cell exporters."""

    supported_compressions: set = {None}

    def __init__(self):
        self.export_stats: Dict[str, Any] = {
            'rows_read': 0,
            'rows_exported': 0,
            'rows_skipped': 0,
            'skipped': [],
            'chunks_processed': 0,
            'start_time': None,
            'end_time': None
        }

    @abstractmethod
    def export(self, *args, **kwargs) -> Path:
        """
        Export data to the exporter's format.

        Returns:
            Path to exported file
        """
        pass

    @abstractmethod
    def validate_export(self, output_path: Path) -> bool:
        """Validate the exported file."""
        pass

    def get_export_stats(self) -> Dict[str, Any]:
        """Get export statistics."""
        stats = self.export_stats.copy()
        if stats['start_time'] and stats['end_time']:
            stats['duration_seconds'] = (
                stats['end_time'] - stats['start_time']
            ).total_seconds()
        return stats

    def _reset_stats(self):
        self.export_stats.update(
            rows_read=0, rows_exported=0, rows_skipped=0, skipped=[],
            chunks_processed=0, start_time=datetime.now(), end_time=None
        )

    def _validate_config(self, config: ExportConfig):
        """Validate export configuration."""
        if config.compression not in self.supported_compressions:
            raise ExportError(
                f"Unsupported compression: {config.compression}. "
                f"Supported: {sorted(str(c) for c in self.supported_compressions)}"
            )

    def _create_metadata_file(self, output_file: Path,
                              source_info: Dict[str, Any],
                              config: ExportConfig) -> Path:
        """Write a ``.meta.json`` file describing the export next to the output."""
        metadata = {
            'export_timestamp': datetime.now().isoformat(),
            'output_file': str(output_file),
            'export_stats': self.get_export_stats(),
            'source': source_info,
            'configuration': {
                'chunk_size': config.chunk_size,
                'compression': config.compression,
                **config.additional_options
            }
        }

        metadata_file = output_file.with_name(output_file.name + '.meta.json')
        with open(metadata_file, 'w') as f:
            json.dump(metadata, f, indent=2, default=str)

        logger.info(f"Metadata saved to: {metadata_file}")
        return metadata_file

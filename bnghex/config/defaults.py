# bnghex/config/defaults.py
"""Default configuration values for hexagonal indexing and export."""

from pathlib import Path

# Project path
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = PROJECT_ROOT / 'logs'
OUTPUT_DIR = PROJECT_ROOT / 'outputs'

PATHS = {
    'project_root': str(PROJECT_ROOT),
    'logs_dir': str(LOGS_DIR),
    'output_dir': str(OUTPUT_DIR),
}

GRIDS = {
    'crs': 'EPSG:27700',  # British National Grid
    'hexagonal': {
        'default_zoom': 10,
        'zooms': [8, 10, 12],
        # Path sampling step as a fraction of the cell circumradius
        'line_step_factor': 0.5,
    },
}

PROCESSING = {
    'max_workers': 1,          # 1 = serial grid construction
    'min_rows_per_worker': 64,  # Fewer rows per worker keeps the build serial
}

# Named BNG extents in metres: [min_x, min_y, max_x, max_y]
PROCESSING_BOUNDS = {
    'custom': {},
}

EXPORT = {
    'csv': {
        'on_error': 'raise',   # 'raise' or 'skip'
        'hex_geometry': None,  # None, 'wkt' or 'geojson'
    },
    'parquet': {
        'geometry': 'polygon',  # 'polygon' or 'point'
        'compression': 'snappy',
    },
}

LOGGING = {
    'level': 'INFO',
    'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    'file': LOGS_DIR / 'bnghex.log',
    'max_file_size': 10 * 1024 * 1024,  # 10MB
    'backup_count': 3,
}

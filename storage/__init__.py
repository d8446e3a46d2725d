"""
Storage module for overpass correction outputs.

Provides persistence for:
- Coverage rasters (ESRI ASCII grid, NumPy archive)
- Latitude-correction tables (CSV, Parquet)
- JSON run summaries

Usage:
    from storage import write_raster, write_correction_table

    write_raster(grid, "output/aqua-terra-overpasses-per-day.asc")
    write_correction_table(correction, "output/aqua-terra-overpass-corrections-table.csv")
"""

from .raster_storage import write_raster, read_raster
from .table_storage import (
    correction_to_frame,
    write_correction_table,
    read_correction_table,
    write_run_summary,
)

__all__ = [
    'write_raster',
    'read_raster',
    'correction_to_frame',
    'write_correction_table',
    'read_correction_table',
    'write_run_summary',
]

"""
Coverage raster storage.

Writes the overpasses-per-day grid as a single-band ESRI ASCII raster (.asc)
or a compressed NumPy archive (.npz), and reads either back as a CoverageGrid
for coordinate lookups by downstream consumers.
"""
from pathlib import Path
from typing import Dict, Union
import logging

import numpy as np

from core.models.coverage_grid import CoverageGrid, GridSpec

logger = logging.getLogger(__name__)

NODATA_VALUE = -9999.0

_ASC_KEYS = ("ncols", "nrows", "xllcorner", "yllcorner", "cellsize", "nodata_value")


def write_raster(grid: CoverageGrid, path: Union[str, Path]) -> Path:
    """Write a coverage grid; the format follows the file extension.

    Args:
        grid: Coverage grid (row 0 is the northernmost row)
        path: Output path ending in .asc or .npz

    Returns:
        Path of the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    suffix = path.suffix.lower()

    if suffix == ".asc":
        _write_ascii_grid(grid, path)
    elif suffix == ".npz":
        spec = grid.spec
        np.savez_compressed(
            path,
            values=grid.values,
            extent=np.array([spec.xmin, spec.xmax, spec.ymin, spec.ymax]),
            cell_size=np.array(spec.cell_size),
        )
    else:
        raise ValueError(f"Unsupported raster format: {suffix}")

    logger.info(f"Wrote {grid.spec.nrows}x{grid.spec.ncols} raster to {path}")
    return path


def _write_ascii_grid(grid: CoverageGrid, path: Path) -> None:
    spec = grid.spec
    header = "\n".join([
        f"ncols {spec.ncols}",
        f"nrows {spec.nrows}",
        f"xllcorner {spec.xmin!r}",
        f"yllcorner {spec.ymin!r}",
        f"cellsize {spec.cell_size!r}",
        f"NODATA_value {NODATA_VALUE!r}",
    ])
    values = np.where(np.isnan(grid.values), NODATA_VALUE, grid.values)
    np.savetxt(path, values, fmt="%.10g", header=header, comments="")


def read_raster(path: Union[str, Path]) -> CoverageGrid:
    """Read a coverage grid written by write_raster.

    Args:
        path: .asc or .npz file

    Returns:
        CoverageGrid with NODATA cells as NaN
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Raster not found: {path}")
    suffix = path.suffix.lower()

    if suffix == ".npz":
        with np.load(path) as data:
            xmin, xmax, ymin, ymax = data["extent"].tolist()
            spec = GridSpec(cell_size=float(data["cell_size"]),
                            xmin=xmin, xmax=xmax, ymin=ymin, ymax=ymax)
            return CoverageGrid(spec, data["values"].astype(np.float64))

    if suffix != ".asc":
        raise ValueError(f"Unsupported raster format: {suffix}")

    header: Dict[str, float] = {}
    with open(path, "r", encoding="utf-8") as f:
        for _ in _ASC_KEYS:
            key, value = f.readline().split()
            header[key.lower()] = float(value)

    missing = [k for k in _ASC_KEYS if k not in header]
    if missing:
        raise ValueError(f"ASCII grid header missing keys: {missing}")

    cell = header["cellsize"]
    spec = GridSpec(
        cell_size=cell,
        xmin=header["xllcorner"],
        xmax=header["xllcorner"] + int(header["ncols"]) * cell,
        ymin=header["yllcorner"],
        ymax=header["yllcorner"] + int(header["nrows"]) * cell,
    )
    values = np.loadtxt(path, skiprows=len(_ASC_KEYS), dtype=np.float64, ndmin=2)
    values[values == header["nodata_value"]] = np.nan
    return CoverageGrid(spec, values)

"""
Correction table storage.

The latitude-correction table is written as CSV or Parquet with columns
latitude, mean_overpasses, min_overpasses, max_overpasses (one row per sampled
latitude, sorted by latitude).
"""
from pathlib import Path
from typing import Any, Dict, Union
import json
import logging

import pandas as pd

from core.models.latitude_correction import LatitudeCorrection

logger = logging.getLogger(__name__)


def correction_to_frame(correction: LatitudeCorrection) -> pd.DataFrame:
    """Convert a correction table to a DataFrame with the fixed column order"""
    frame = pd.DataFrame(correction.to_records(), columns=list(LatitudeCorrection.COLUMNS))
    return frame.sort_values("latitude").reset_index(drop=True)


def write_correction_table(correction: LatitudeCorrection, path: Union[str, Path]) -> Path:
    """Write the correction table; .csv or .parquet by extension.

    Args:
        correction: Latitude correction table
        path: Output path

    Returns:
        Path of the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame = correction_to_frame(correction)

    suffix = path.suffix.lower()
    if suffix == ".csv":
        frame.to_csv(path, index=False)
    elif suffix == ".parquet":
        frame.to_parquet(path, engine="pyarrow", compression="snappy", index=False)
    else:
        raise ValueError(f"Unsupported table format: {suffix}")

    logger.info(f"Wrote {len(frame)} correction rows to {path}")
    return path


def read_correction_table(path: Union[str, Path]) -> LatitudeCorrection:
    """Read a correction table written by write_correction_table"""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Correction table not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        frame = pd.read_csv(path)
    elif suffix == ".parquet":
        frame = pd.read_parquet(path, engine="pyarrow")
    else:
        raise ValueError(f"Unsupported table format: {suffix}")

    missing = [c for c in LatitudeCorrection.COLUMNS if c not in frame.columns]
    if missing:
        raise ValueError(f"Correction table missing columns: {missing}")

    return LatitudeCorrection.from_records(frame.to_dict(orient="records"))


def write_run_summary(summary: Dict[str, Any], path: Union[str, Path]) -> Path:
    """Write the JSON run summary"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2, ensure_ascii=False, default=str)
    return path

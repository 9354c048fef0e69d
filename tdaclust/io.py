"""
Series Loader: read tabular files into a {label: series} mapping.

Supports:
  - CSV/TSV in wide format (columns = series, rows = timepoints)
  - CSV/TSV in long format (signal_id, value, optional time/index column)
  - Parquet files in either layout

Column name aliases are auto-detected. Missing values are dropped per
series, since embeddings assume gap-free samples.
"""

import logging
import numpy as np
import polars as pl
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)


# Canonical column names -> common aliases (case-insensitive matching)
COLUMN_ALIASES = {
    'I': ['i', 'index', 'time', 'timestamp', 't', 'step', 'sample', 'date',
          'timepoint', 'time_step', 'timestep', 'year', 'month', 'week'],
    'signal_id': ['signal_id', 'signal', 'series', 'series_id', 'sensor', 'channel',
                  'variable', 'name', 'label', 'region', 'country'],
    'value': ['value', 'val', 'measurement', 'reading', 'y', 'count', 'cases'],
}


def load_series(
    path: Union[str, Path],
    time_column: Optional[str] = None,
    columns: Optional[List[str]] = None
) -> Dict[str, np.ndarray]:
    """
    Load every series in a file.

    Args:
        path: CSV, TSV or parquet file
        time_column: Column that orders samples (auto-detected if omitted)
        columns: Restrict to these series labels

    Returns:
        Ordered {label: float64 array} with missing values removed

    Raises:
        FileNotFoundError: If path doesn't exist
        ValueError: If no numeric series can be found
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Input not found: {path}")

    df = _read_table(path)
    if df.height == 0:
        raise ValueError(f"No rows in {path}")

    if time_column is not None and time_column not in df.columns:
        raise ValueError(f"Time column '{time_column}' not in {df.columns}")

    mapping = _detect_long_format(df)
    if mapping is not None:
        series = _long_to_series(df, mapping, time_column)
    else:
        series = _wide_to_series(df, time_column)

    if columns is not None:
        missing = [c for c in columns if c not in series]
        if missing:
            raise ValueError(f"Series not found: {missing}. Available: {list(series)}")
        series = {c: series[c] for c in columns}

    logger.info(f"Loaded {len(series)} series from {path.name}")
    return series


def _read_table(path: Path) -> pl.DataFrame:
    if path.suffix == '.parquet':
        return pl.read_parquet(path)

    sep = '\t' if path.suffix == '.tsv' else ','
    if path.suffix != '.tsv':
        with open(path) as f:
            first_line = f.readline()
            if '\t' in first_line and ',' not in first_line:
                sep = '\t'

    return pl.read_csv(path, separator=sep, infer_schema_length=5000, null_values=['NA', 'NaN', ''])


def _find_column(df: pl.DataFrame, canonical: str, exclude=()) -> Optional[str]:
    cols_lower = {c.lower().strip(): c for c in df.columns}
    for alias in COLUMN_ALIASES[canonical]:
        if alias in cols_lower and cols_lower[alias] not in exclude:
            return cols_lower[alias]
    return None


def _detect_long_format(df: pl.DataFrame) -> Optional[Dict[str, str]]:
    """
    Detect long format: needs both a label column and a numeric value column.

    Returns:
        {canonical: actual column name}, or None if the table is wide
    """
    signal_col = _find_column(df, 'signal_id')
    value_col = _find_column(df, 'value', exclude={signal_col})
    if signal_col is None or value_col is None:
        return None
    if not df[value_col].dtype.is_numeric():
        return None

    mapping = {'signal_id': signal_col, 'value': value_col}
    time_col = _find_column(df, 'I', exclude={signal_col, value_col})
    if time_col is not None:
        mapping['I'] = time_col
    return mapping


def _finite(values: np.ndarray, label: str) -> np.ndarray:
    values = np.asarray(values, dtype=np.float64)
    mask = np.isfinite(values)
    dropped = int((~mask).sum())
    if dropped:
        logger.debug(f"  {label}: dropped {dropped} missing values")
    return values[mask]


def _long_to_series(
    df: pl.DataFrame,
    mapping: Dict[str, str],
    time_column: Optional[str]
) -> Dict[str, np.ndarray]:
    signal_col = mapping['signal_id']
    value_col = mapping['value']
    order_col = time_column or mapping.get('I')

    df = df.filter(pl.col(signal_col).is_not_null())
    df = df.with_columns(pl.col(signal_col).cast(pl.Utf8))

    series = {}
    for label in df[signal_col].unique(maintain_order=True).to_list():
        part = df.filter(pl.col(signal_col) == label)
        if order_col is not None:
            part = part.sort(order_col)
        values = part[value_col].cast(pl.Float64).to_numpy()
        series[label] = _finite(values, label)

    if not series:
        raise ValueError("No series found in long-format input")
    return series


def _wide_to_series(df: pl.DataFrame, time_column: Optional[str]) -> Dict[str, np.ndarray]:
    index_col = time_column or _find_column(df, 'I')
    if index_col is not None:
        df = df.sort(index_col)

    signal_cols = [
        c for c in df.columns
        if c != index_col and df[c].dtype.is_numeric()
    ]

    if not signal_cols:
        raise ValueError(
            f"No numeric series columns found. "
            f"Index column: '{index_col}', columns: {df.columns}"
        )

    return {c: _finite(df[c].cast(pl.Float64).to_numpy(), c) for c in signal_cols}

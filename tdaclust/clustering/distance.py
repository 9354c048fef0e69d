"""
Landscape matrix and pairwise distances.

Landscapes for N series are stacked row-wise into an N x R matrix and
compared with a SciPy distance metric.
"""

import numpy as np
import polars as pl
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple
from scipy.spatial.distance import pdist, squareform

from tdaclust.errors import DimensionMismatchError, InsufficientSeriesError, InvalidMetricError


# Accepted names -> scipy.spatial.distance metric
METRICS = {
    'euclidean': 'euclidean',
    'l2': 'euclidean',
    'manhattan': 'cityblock',
    'cityblock': 'cityblock',
    'l1': 'cityblock',
    'chebyshev': 'chebyshev',
    'linf': 'chebyshev',
    'minkowski': 'minkowski',
}


def resolve_metric(metric: str) -> str:
    """Map a metric name to its scipy name, or raise InvalidMetricError."""
    key = str(metric).lower()
    if key not in METRICS:
        raise InvalidMetricError(
            f"Unsupported distance metric '{metric}'. "
            f"Available: {', '.join(sorted(METRICS))}"
        )
    return METRICS[key]


@dataclass(frozen=True, eq=False)
class LandscapeMatrix:
    """Landscape vectors as rows, one per label, all of length R."""
    labels: Tuple[str, ...]
    values: np.ndarray

    @classmethod
    def from_landscapes(cls, landscapes: Mapping[str, np.ndarray]) -> 'LandscapeMatrix':
        """
        Stack a {label: landscape} mapping, preserving its order.

        Raises
        ------
        DimensionMismatchError
            If landscapes differ in length.
        """
        labels = tuple(str(label) for label in landscapes)
        vectors = [np.asarray(v, dtype=np.float64).ravel() for v in landscapes.values()]

        lengths = {label: len(v) for label, v in zip(labels, vectors)}
        if len(set(lengths.values())) > 1:
            raise DimensionMismatchError(f"Landscape lengths differ: {lengths}")

        if not vectors:
            return cls(labels=(), values=np.zeros((0, 0)))
        return cls(labels=labels, values=np.vstack(vectors))

    @property
    def resolution(self) -> int:
        return self.values.shape[1] if self.values.ndim == 2 else 0

    def __len__(self) -> int:
        return len(self.labels)


@dataclass(frozen=True, eq=False)
class DistanceMatrix:
    """Symmetric N x N distance matrix with zero diagonal."""
    labels: Tuple[str, ...]
    values: np.ndarray
    metric: str = 'euclidean'

    def condensed(self) -> np.ndarray:
        """Upper triangle as a flat vector (scipy's condensed form)."""
        return squareform(self.values, checks=False)

    def distance(self, a: str, b: str) -> float:
        i = self.labels.index(a)
        j = self.labels.index(b)
        return float(self.values[i, j])

    def to_frame(self) -> pl.DataFrame:
        """Labelled table: a 'label' column followed by one column per label."""
        data = {'label': list(self.labels)}
        for j, label in enumerate(self.labels):
            data[label] = self.values[:, j]
        return pl.DataFrame(data)

    def __len__(self) -> int:
        return len(self.labels)


def pairwise_distances(
    matrix: LandscapeMatrix,
    metric: str = 'euclidean',
    p: Optional[float] = None
) -> DistanceMatrix:
    """
    Pairwise distances between every pair of landscape rows.

    Parameters
    ----------
    matrix : LandscapeMatrix
    metric : str
        euclidean (default), manhattan/cityblock, chebyshev or minkowski
    p : float, optional
        Order for minkowski (default 2)

    Returns
    -------
    DistanceMatrix
    """
    scipy_metric = resolve_metric(metric)

    if len(matrix) < 2:
        raise InsufficientSeriesError(
            f"Need at least 2 landscapes for pairwise distances, got {len(matrix)}"
        )

    if scipy_metric == 'minkowski':
        order = 2.0 if p is None else float(p)
        if order < 1:
            raise InvalidMetricError(f"Minkowski order must be >= 1 to be a metric, got {order}")
        condensed = pdist(matrix.values, metric='minkowski', p=order)
    else:
        condensed = pdist(matrix.values, metric=scipy_metric)

    values = squareform(condensed)
    np.fill_diagonal(values, 0.0)
    return DistanceMatrix(labels=matrix.labels, values=values, metric=scipy_metric)

"""
Persistent Homology Computation

Computes persistent homology using Vietoris-Rips complexes.
Tracks topological features (components, loops, voids) across scales.

ripser is the only homology backend and is used nowhere else in the
package, so it can be swapped behind compute_persistence.
"""

import logging
import warnings
import numpy as np
from typing import Optional, Tuple
from dataclasses import dataclass

import ripser

from tdaclust.errors import DegenerateCloudError

logger = logging.getLogger(__name__)


def _frozen(values, dtype) -> np.ndarray:
    arr = np.array(values, dtype=dtype).ravel()
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class PersistenceDiagram:
    """
    Immutable set of (homology_dimension, birth, death) triples.

    Stored as three parallel read-only arrays. birth <= death holds
    for every feature.
    """
    dimensions: np.ndarray
    birth_times: np.ndarray
    death_times: np.ndarray

    def __post_init__(self):
        dims = _frozen(self.dimensions, np.int64)
        births = _frozen(self.birth_times, np.float64)
        deaths = _frozen(self.death_times, np.float64)

        if not (len(dims) == len(births) == len(deaths)):
            raise ValueError(
                f"Diagram arrays differ in length: {len(dims)}, {len(births)}, {len(deaths)}"
            )
        if np.any(deaths < births):
            raise ValueError("Diagram contains a feature with death < birth")

        object.__setattr__(self, 'dimensions', dims)
        object.__setattr__(self, 'birth_times', births)
        object.__setattr__(self, 'death_times', deaths)

    @classmethod
    def empty(cls) -> 'PersistenceDiagram':
        return cls(np.array([], dtype=np.int64), np.array([]), np.array([]))

    @classmethod
    def from_triples(cls, triples) -> 'PersistenceDiagram':
        """Build from an iterable of (dimension, birth, death)."""
        arr = np.asarray(list(triples), dtype=np.float64).reshape(-1, 3)
        return cls(arr[:, 0].astype(np.int64), arr[:, 1], arr[:, 2])

    @property
    def persistence(self) -> np.ndarray:
        """Lifetime of each feature."""
        return self.death_times - self.birth_times

    @property
    def n_features(self) -> int:
        return len(self.birth_times)

    @property
    def homology_dimensions(self) -> Tuple[int, ...]:
        return tuple(int(d) for d in np.unique(self.dimensions))

    def select(self, dimension: int) -> 'PersistenceDiagram':
        """Keep only features of one homology dimension."""
        mask = self.dimensions == dimension
        return PersistenceDiagram(
            dimensions=self.dimensions[mask],
            birth_times=self.birth_times[mask],
            death_times=self.death_times[mask]
        )

    def filter_by_persistence(self, min_persistence: float) -> 'PersistenceDiagram':
        """Keep only features with persistence above threshold."""
        mask = self.persistence >= min_persistence
        return PersistenceDiagram(
            dimensions=self.dimensions[mask],
            birth_times=self.birth_times[mask],
            death_times=self.death_times[mask]
        )

    def to_array(self) -> np.ndarray:
        """(n_features, 3) array of (dimension, birth, death)."""
        return np.column_stack([self.dimensions, self.birth_times, self.death_times])

    def __len__(self) -> int:
        return self.n_features

    def __repr__(self):
        counts = ', '.join(
            f"H{d}={int(np.sum(self.dimensions == d))}" for d in self.homology_dimensions
        )
        return f"PersistenceDiagram({counts or 'empty'})"


def compute_persistence(
    point_cloud: np.ndarray,
    max_dimension: int = 1,
    distance_threshold: float = np.inf,
    n_landmarks: Optional[int] = None
) -> PersistenceDiagram:
    """
    Compute persistent homology using a Vietoris-Rips filtration.

    Parameters
    ----------
    point_cloud : array, shape (n_points, n_dims)
        Point cloud data
    max_dimension : int
        Maximum homology dimension to compute (1 tracks H0 and H1)
    distance_threshold : float
        Edges longer than this are never added. Features still alive at
        the threshold get their death truncated to it; with an infinite
        threshold they are dropped (this removes the essential H0 class).
    n_landmarks : int, optional
        If provided and smaller than the cloud, subsample with ripser's
        greedy permutation (deterministic)

    Returns
    -------
    diagram : PersistenceDiagram

    Raises
    ------
    DegenerateCloudError
        If the cloud has fewer than 2 points.
    """
    point_cloud = np.asarray(point_cloud, dtype=np.float64)
    if point_cloud.ndim == 1:
        point_cloud = point_cloud.reshape(-1, 1)

    n = len(point_cloud)
    if n < 2:
        raise DegenerateCloudError(f"Point cloud has {n} point(s); need at least 2")
    if max_dimension < 0:
        raise ValueError(f"max_dimension must be >= 0, got {max_dimension}")
    if not distance_threshold > 0:
        raise ValueError(f"distance_threshold must be > 0, got {distance_threshold}")

    kwargs = {'maxdim': max_dimension, 'thresh': distance_threshold, 'distance_matrix': False}
    if n_landmarks is not None and n_landmarks < n:
        if n_landmarks < 2:
            raise DegenerateCloudError(f"n_landmarks={n_landmarks}; need at least 2")
        kwargs['n_perm'] = n_landmarks

    # Input is always a point cloud; a square one (n_points == n_dims)
    # only trips ripser's distance-matrix guess
    with warnings.catch_warnings():
        warnings.filterwarnings('ignore', message='The input matrix is square')
        result = ripser.ripser(point_cloud, **kwargs)

    dims, births, deaths = [], [], []
    for dim, dgm in enumerate(result['dgms']):
        if len(dgm) == 0:
            continue
        b = dgm[:, 0]
        d = dgm[:, 1]
        infinite = ~np.isfinite(d)
        if np.isfinite(distance_threshold):
            d = np.where(infinite, distance_threshold, d)
        else:
            b, d = b[~infinite], d[~infinite]
        dims.append(np.full(len(b), dim, dtype=np.int64))
        births.append(b)
        deaths.append(d)

    if not dims:
        return PersistenceDiagram.empty()

    diagram = PersistenceDiagram(
        dimensions=np.concatenate(dims),
        birth_times=np.concatenate(births),
        death_times=np.concatenate(deaths)
    )
    logger.debug(f"Rips persistence on {n} points: {diagram!r}")
    return diagram

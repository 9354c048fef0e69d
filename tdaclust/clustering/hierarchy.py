"""
Agglomerative hierarchical clustering of landscape distances.

Merges follow the Lance-Williams update for the chosen linkage. The
result is a SciPy-compatible linkage matrix so scipy.cluster.hierarchy
can cut, order and render it.

Tie-breaking: when several cluster pairs share the minimum distance,
the pair with the lexicographically smallest (id_a, id_b) merges first.
Leaves take ids 0..N-1 in input order; the merge at step s gets id N+s.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple
from scipy.cluster import hierarchy as sch
from sklearn.metrics import silhouette_score

from tdaclust.errors import InsufficientSeriesError, InvalidMetricError
from .distance import DistanceMatrix, LandscapeMatrix, pairwise_distances

logger = logging.getLogger(__name__)


LINKAGES = ('ward', 'single', 'complete', 'average')


class Merge(NamedTuple):
    """One internal node of the dendrogram."""
    left: int
    right: int
    height: float
    size: int


def _lance_williams(
    method: str,
    d_a: np.ndarray,
    d_b: np.ndarray,
    d_ab: float,
    n_a: float,
    n_b: float,
    n_k: np.ndarray
) -> np.ndarray:
    """Distance from every other cluster k to the union of a and b."""
    if method == 'single':
        return np.minimum(d_a, d_b)
    if method == 'complete':
        return np.maximum(d_a, d_b)
    if method == 'average':
        return (n_a * d_a + n_b * d_b) / (n_a + n_b)
    # ward
    total = n_a + n_b + n_k
    sq = ((n_a + n_k) * d_a ** 2 + (n_b + n_k) * d_b ** 2 - n_k * d_ab ** 2) / total
    return np.sqrt(np.maximum(sq, 0.0))


def agglomerate(distances: np.ndarray, method: str = 'ward') -> np.ndarray:
    """
    Agglomerative clustering over a square distance matrix.

    Leaves take ids 0..n-1 in row order and the merge at step s creates
    id n+s. When several pairs share the minimum distance, the pair with
    the lexicographically smallest (id_a, id_b) merges first, so the
    result is reproducible for any input with ties.

    Parameters
    ----------
    distances : array, shape (n, n)
        Symmetric, zero diagonal, finite
    method : str
        'ward', 'single', 'complete' or 'average'

    Returns
    -------
    Z : array, shape (n - 1, 4)
        SciPy linkage matrix: [id_a, id_b, height, size] per merge,
        with id_a < id_b.
    """
    if method not in LINKAGES:
        raise InvalidMetricError(
            f"Unsupported linkage '{method}'. Available: {', '.join(LINKAGES)}"
        )

    distances = np.asarray(distances, dtype=np.float64)
    if distances.ndim != 2 or distances.shape[0] != distances.shape[1]:
        raise ValueError(f"Distance matrix must be square, got shape {distances.shape}")
    if not np.all(np.isfinite(distances)):
        raise ValueError("Distance matrix contains NaN or infinite values")
    if not np.allclose(distances, distances.T):
        raise ValueError("Distance matrix is not symmetric")

    n = distances.shape[0]
    if n < 2:
        raise InsufficientSeriesError(f"Need at least 2 items to cluster, got {n}")

    size = 2 * n - 1
    D = np.full((size, size), np.inf)
    D[:n, :n] = distances
    np.fill_diagonal(D, np.inf)

    counts = np.zeros(size)
    counts[:n] = 1

    active = list(range(n))
    Z = np.zeros((n - 1, 4))

    for step in range(n - 1):
        act = np.asarray(active)
        rows, cols = np.triu_indices(len(act), k=1)
        candidates = D[act[rows], act[cols]]

        # active is sorted and triu_indices is row-major, so argmin
        # lands on the lexicographically smallest tied pair
        best = int(np.argmin(candidates))
        a, b = int(act[rows[best]]), int(act[cols[best]])
        height = float(candidates[best])
        new = n + step

        others = act[(act != a) & (act != b)]
        if len(others):
            updated = _lance_williams(
                method, D[a, others], D[b, others], height,
                counts[a], counts[b], counts[others]
            )
            D[new, others] = updated
            D[others, new] = updated

        counts[new] = counts[a] + counts[b]
        Z[step] = [a, b, height, counts[new]]
        active = [c for c in active if c != a and c != b] + [new]

    return Z


@dataclass(frozen=True, eq=False)
class Dendrogram:
    """
    Binary merge tree over labelled series.

    linkage_matrix follows the scipy.cluster.hierarchy convention.
    """
    labels: Tuple[str, ...]
    linkage_matrix: np.ndarray
    method: str = 'ward'
    metric: str = 'euclidean'

    @property
    def n_leaves(self) -> int:
        return len(self.labels)

    @property
    def merges(self) -> List[Merge]:
        return [
            Merge(int(row[0]), int(row[1]), float(row[2]), int(row[3]))
            for row in self.linkage_matrix
        ]

    @property
    def heights(self) -> np.ndarray:
        return self.linkage_matrix[:, 2].copy()

    def node_label(self, node_id: int) -> str:
        """Leaf label, or 'cluster_<id>' for an internal node."""
        if node_id < self.n_leaves:
            return self.labels[node_id]
        return f"cluster_{node_id}"

    def leaves_order(self) -> List[str]:
        """Leaf labels in dendrogram drawing order."""
        return [self.labels[i] for i in sch.leaves_list(self.linkage_matrix)]

    def cut(self, n_clusters: int) -> Dict[str, int]:
        """
        Flat clustering into at most n_clusters groups.

        Returns {label: cluster_id} with 0-based ids.
        """
        if n_clusters < 1:
            raise ValueError(f"n_clusters must be >= 1, got {n_clusters}")
        assignments = sch.fcluster(self.linkage_matrix, t=n_clusters, criterion='maxclust') - 1
        return dict(zip(self.labels, (int(a) for a in assignments)))

    def cut_at_height(self, height: float) -> Dict[str, int]:
        """Flat clustering keeping only merges at or below height."""
        assignments = sch.fcluster(self.linkage_matrix, t=height, criterion='distance') - 1
        return dict(zip(self.labels, (int(a) for a in assignments)))

    def to_tree(self) -> sch.ClusterNode:
        return sch.to_tree(self.linkage_matrix)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation."""
        return {
            'labels': list(self.labels),
            'method': self.method,
            'metric': self.metric,
            'merges': [
                {
                    'id': self.n_leaves + i,
                    'left': self.node_label(m.left),
                    'right': self.node_label(m.right),
                    'height': m.height,
                    'size': m.size,
                }
                for i, m in enumerate(self.merges)
            ],
            'leaves_order': self.leaves_order(),
        }


def cluster_distance_matrix(
    distance_matrix: DistanceMatrix,
    linkage: str = 'ward'
) -> Dendrogram:
    """Cluster a precomputed DistanceMatrix."""
    if linkage == 'ward' and distance_matrix.metric != 'euclidean':
        logger.warning(
            f"Ward linkage assumes Euclidean distances; got metric '{distance_matrix.metric}'"
        )
    Z = agglomerate(distance_matrix.values, method=linkage)
    return Dendrogram(
        labels=distance_matrix.labels,
        linkage_matrix=Z,
        method=linkage,
        metric=distance_matrix.metric,
    )


def cluster(
    landscapes: Mapping[str, np.ndarray],
    metric: str = 'euclidean',
    linkage: str = 'ward',
    p: Optional[float] = None
) -> Dendrogram:
    """
    Hierarchical clustering of labelled landscape vectors.

    Parameters
    ----------
    landscapes : mapping
        {label: landscape vector}, all of equal length
    metric : str
        Distance between landscapes (euclidean default)
    linkage : str
        'ward' (default), 'single', 'complete' or 'average'
    p : float, optional
        Minkowski order

    Returns
    -------
    Dendrogram
    """
    if linkage not in LINKAGES:
        raise InvalidMetricError(
            f"Unsupported linkage '{linkage}'. Available: {', '.join(LINKAGES)}"
        )
    matrix = LandscapeMatrix.from_landscapes(landscapes)
    distances = pairwise_distances(matrix, metric=metric, p=p)
    return cluster_distance_matrix(distances, linkage=linkage)


def suggest_n_clusters(
    dendrogram: Dendrogram,
    distance_matrix: DistanceMatrix,
    max_clusters: int = 10
) -> Tuple[int, float]:
    """
    Pick the flat cut with the best silhouette score.

    Sweeps k = 2 .. min(n - 1, max_clusters). Returns (1, nan) when
    fewer than three series make the score undefined.

    Returns
    -------
    (best_k, best_score)
    """
    n = dendrogram.n_leaves
    if n < 3:
        return 1, float('nan')

    best_k, best_score = 1, float('nan')
    for k in range(2, min(n - 1, max_clusters) + 1):
        assignment = dendrogram.cut(k)
        labels = np.array([assignment[label] for label in distance_matrix.labels])
        n_unique = len(np.unique(labels))
        if n_unique < 2 or n_unique > n - 1:
            continue
        score = float(silhouette_score(distance_matrix.values, labels, metric='precomputed'))
        if np.isnan(best_score) or score > best_score:
            best_k, best_score = k, score

    return best_k, best_score

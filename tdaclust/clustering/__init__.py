"""
Clustering layer

Stacks landscapes into a matrix, computes pairwise distances and builds
a dendrogram by agglomerative clustering.
"""

from .distance import (
    METRICS,
    LandscapeMatrix,
    DistanceMatrix,
    pairwise_distances,
    resolve_metric,
)
from .hierarchy import (
    LINKAGES,
    Merge,
    Dendrogram,
    agglomerate,
    cluster,
    cluster_distance_matrix,
    suggest_n_clusters,
)

__all__ = [
    'METRICS',
    'LandscapeMatrix',
    'DistanceMatrix',
    'pairwise_distances',
    'resolve_metric',
    'LINKAGES',
    'Merge',
    'Dendrogram',
    'agglomerate',
    'cluster',
    'cluster_distance_matrix',
    'suggest_n_clusters',
]

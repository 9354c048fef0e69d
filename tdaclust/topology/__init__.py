"""
Topology layer

Time-delay embeddings, Vietoris-Rips persistence and persistence
landscapes for scalar time series.
"""

from .point_cloud import (
    embed,
    sliding_window_embedding,
    standardize,
    subsample_point_cloud,
)
from .persistence import (
    PersistenceDiagram,
    compute_persistence,
)
from .features import (
    betti_numbers,
    betti_curve,
    persistence_statistics,
    persistence_landscape,
    landscape_domain,
    landscape_norm,
    to_landscape,
)

__all__ = [
    # Point cloud
    'embed',
    'sliding_window_embedding',
    'standardize',
    'subsample_point_cloud',
    # Persistence
    'PersistenceDiagram',
    'compute_persistence',
    # Features
    'betti_numbers',
    'betti_curve',
    'persistence_statistics',
    'persistence_landscape',
    'landscape_domain',
    'landscape_norm',
    'to_landscape',
]

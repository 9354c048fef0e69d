"""
tdaclust - Topological Clustering of Time Series
================================================

Shape, not scale: series are compared by the persistent homology of
their delay embeddings.

Architecture:
    - topology/:    embedding, Rips persistence (ripser), landscapes
    - clustering/:  landscape matrix, distances, agglomerative clustering
    - config/:      PipelineConfig and YAML loading
    - pipeline.py:  TopologyPipeline (parallel per-series driver)
    - io.py:        CSV/TSV/parquet series loader
    - cli.py:       Command line interface

Usage:
    # CLI
    python -m tdaclust cluster data.csv
    python -m tdaclust demo

    # Python
    from tdaclust import PipelineConfig, TopologyPipeline
    result = TopologyPipeline(PipelineConfig(dim_lag=3, sample_lag=5)).run(series)
    result.dendrogram.merges
"""

__version__ = "0.1.0"

from tdaclust.errors import (
    TopologyError,
    InsufficientLengthError,
    DegenerateCloudError,
    DimensionMismatchError,
    InvalidMetricError,
    InsufficientSeriesError,
    ConfigurationError,
    SeriesFailureError,
)
from tdaclust.topology import embed, compute_persistence, to_landscape, PersistenceDiagram
from tdaclust.clustering import cluster, Dendrogram, DistanceMatrix, LandscapeMatrix
from tdaclust.config import PipelineConfig, load_pipeline_config
from tdaclust.pipeline import TopologyPipeline, ClusteringResult, cluster_series

__all__ = [
    '__version__',
    # Errors
    'TopologyError',
    'InsufficientLengthError',
    'DegenerateCloudError',
    'DimensionMismatchError',
    'InvalidMetricError',
    'InsufficientSeriesError',
    'ConfigurationError',
    'SeriesFailureError',
    # Components
    'embed',
    'compute_persistence',
    'to_landscape',
    'PersistenceDiagram',
    'cluster',
    'Dendrogram',
    'DistanceMatrix',
    'LandscapeMatrix',
    # Pipeline
    'PipelineConfig',
    'load_pipeline_config',
    'TopologyPipeline',
    'ClusteringResult',
    'cluster_series',
]

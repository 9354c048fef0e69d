"""
Landscape Clustering Pipeline

Main orchestration: one uniform pass over a {label: series} mapping.

    series -> embed -> Rips diagram -> landscape    (per series, parallel)
    landscapes -> matrix -> distances -> dendrogram (after all series finish)

Per-series work shares no state and runs through joblib. A failing
series is recorded with its exception; on_error='abort' raises
SeriesFailureError after the barrier, on_error='exclude' drops it.
"""

import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from joblib import Parallel, delayed

from tdaclust.clustering import (
    Dendrogram,
    DistanceMatrix,
    LandscapeMatrix,
    cluster_distance_matrix,
    pairwise_distances,
    suggest_n_clusters,
)
from tdaclust.config import PipelineConfig
from tdaclust.errors import SeriesFailureError
from tdaclust.topology import (
    PersistenceDiagram,
    compute_persistence,
    embed,
    landscape_domain,
    standardize,
    to_landscape,
)

logger = logging.getLogger(__name__)


@dataclass
class SeriesTopology:
    """Everything derived from one series."""
    label: str
    n_samples: int
    point_cloud: np.ndarray
    diagram: PersistenceDiagram
    landscape: Optional[np.ndarray] = None
    domain: Optional[Tuple[float, float]] = None

    @property
    def n_points(self) -> int:
        return len(self.point_cloud)


def prepare_series(series, config: PipelineConfig) -> np.ndarray:
    """Drop missing values and optionally z-score, per config."""
    x = np.asarray(series, dtype=np.float64).ravel()
    if config.dropna:
        x = x[np.isfinite(x)]
    if config.standardize and len(x) > 0:
        x = standardize(x)
    return x


def compute_diagram(label: str, series, config: PipelineConfig) -> SeriesTopology:
    """Embed one series and compute its persistence diagram."""
    x = prepare_series(series, config)
    cloud = embed(x, dim_lag=config.dim_lag, sample_lag=config.sample_lag)
    diagram = compute_persistence(
        cloud,
        max_dimension=config.max_homology_dimension,
        distance_threshold=config.distance_threshold,
        n_landmarks=config.n_landmarks,
    )
    return SeriesTopology(label=label, n_samples=len(x), point_cloud=cloud, diagram=diagram)


def _diagram_task(label: str, series, config: PipelineConfig):
    """Worker entry point: never raises, returns (label, result, error)."""
    try:
        return label, compute_diagram(label, series, config), None
    except Exception as e:
        return label, None, e


@dataclass
class ClusteringResult:
    """Outputs of one clustering run."""
    dendrogram: Dendrogram
    distance_matrix: DistanceMatrix
    landscape_matrix: LandscapeMatrix
    series: Dict[str, SeriesTopology]
    failures: Dict[str, Exception] = field(default_factory=dict)
    config: PipelineConfig = field(default_factory=PipelineConfig)

    @property
    def labels(self) -> Tuple[str, ...]:
        return self.dendrogram.labels

    def assignments(self, n_clusters: Optional[int] = None) -> Dict[str, int]:
        """Flat clusters; picks k by silhouette when n_clusters is None."""
        if n_clusters is None:
            n_clusters, _ = suggest_n_clusters(self.dendrogram, self.distance_matrix)
        return self.dendrogram.cut(n_clusters)

    def to_dict(self, n_clusters: Optional[int] = None) -> Dict[str, Any]:
        """JSON-friendly summary of the run."""
        return {
            'config': self.config.to_dict(),
            'labels': list(self.labels),
            'dendrogram': self.dendrogram.to_dict(),
            'distance_matrix': self.distance_matrix.values.tolist(),
            'assignments': self.assignments(n_clusters),
            'failures': {label: f"{type(e).__name__}: {e}" for label, e in self.failures.items()},
            'series': {
                label: {
                    'n_samples': s.n_samples,
                    'n_points': s.n_points,
                    'n_features': s.diagram.select(self.config.homology_dimension).n_features,
                    'landscape_max': float(np.max(s.landscape)) if s.landscape is not None else 0.0,
                }
                for label, s in self.series.items()
            },
        }


class TopologyPipeline:
    """
    Cluster time series by the shape of their delay embeddings.

    Parameters
    ----------
    config : PipelineConfig, optional
        Defaults to PipelineConfig()
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    def analyze_series(self, label: str, series) -> SeriesTopology:
        """
        Full per-series chain for a single series.

        Without a fixed landscape domain, the landscape is sampled over
        this diagram's own birth-death range.
        """
        result = compute_diagram(label, series, self.config)
        domain = self.config.resolved_landscape_domain()
        self._attach_landscape(result, domain)
        return result

    def compute_landscapes(
        self,
        series: Mapping[str, Any]
    ) -> Tuple[Dict[str, SeriesTopology], Dict[str, Exception]]:
        """
        Diagrams and landscapes for every series.

        When no fixed domain is configured, all landscapes are sampled
        over the union range of the successful diagrams so their grids
        line up.

        Returns
        -------
        (results, failures) keyed by label, in input order
        """
        cfg = self.config
        labels = [str(label) for label in series]
        logger.info(f"Computing persistence for {len(labels)} series (n_jobs={cfg.n_jobs})")

        if cfg.n_jobs != 1 and len(labels) > 1:
            outcomes = Parallel(n_jobs=cfg.n_jobs)(
                delayed(_diagram_task)(str(label), values, cfg)
                for label, values in series.items()
            )
        else:
            outcomes = [_diagram_task(str(label), values, cfg) for label, values in series.items()]

        results: Dict[str, SeriesTopology] = {}
        failures: Dict[str, Exception] = {}
        for label, result, error in outcomes:
            if error is not None:
                failures[label] = error
            else:
                results[label] = result

        domain = cfg.resolved_landscape_domain()
        if domain is None:
            domain = landscape_domain(
                r.diagram.select(cfg.homology_dimension) for r in results.values()
            )
        for result in results.values():
            self._attach_landscape(result, domain)

        logger.debug(f"  landscape domain: {domain}")
        return results, failures

    def run(self, series: Mapping[str, Any]) -> ClusteringResult:
        """
        Cluster a {label: series} mapping.

        Raises
        ------
        SeriesFailureError
            If any series failed and on_error is 'abort'.
        InsufficientSeriesError
            If fewer than two series remain to cluster.
        """
        cfg = self.config
        results, failures = self.compute_landscapes(series)

        if failures:
            if cfg.on_error == 'abort':
                first = next(iter(failures.values()))
                raise SeriesFailureError(failures) from first
            for label, e in failures.items():
                logger.warning(f"Excluding series '{label}': {type(e).__name__}: {e}")

        landscapes = {label: r.landscape for label, r in results.items()}
        matrix = LandscapeMatrix.from_landscapes(landscapes)
        distances = pairwise_distances(matrix, metric=cfg.distance_metric, p=cfg.minkowski_p)
        dendrogram = cluster_distance_matrix(distances, linkage=cfg.linkage)

        logger.info(
            f"Clustered {len(matrix)} series ({len(failures)} excluded), "
            f"linkage={cfg.linkage}, metric={distances.metric}"
        )

        return ClusteringResult(
            dendrogram=dendrogram,
            distance_matrix=distances,
            landscape_matrix=matrix,
            series=results,
            failures=failures,
            config=cfg,
        )

    def _attach_landscape(self, result: SeriesTopology, domain: Optional[Tuple[float, float]]) -> None:
        cfg = self.config
        result.landscape = to_landscape(
            result.diagram,
            homology_dimension=cfg.homology_dimension,
            resolution=cfg.landscape_resolution,
            level=cfg.landscape_level,
            domain=domain,
        )
        result.domain = domain


def cluster_series(
    series: Mapping[str, Any],
    config: Optional[PipelineConfig] = None,
    **overrides
) -> ClusteringResult:
    """
    Convenience wrapper: TopologyPipeline(config.with_overrides(...)).run(series).
    """
    config = (config or PipelineConfig()).with_overrides(**overrides)
    return TopologyPipeline(config).run(series)

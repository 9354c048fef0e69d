"""
Pipeline configuration.

Every parameter the embed -> persistence -> landscape -> clustering
chain needs, passed explicitly into each run. Reads YAML files.

Usage:
    from tdaclust.config import load_pipeline_config

    config = load_pipeline_config('config/pipeline.yaml')
    config = config.with_overrides(linkage='average')
"""

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union
import math
import yaml

from tdaclust.clustering.distance import resolve_metric
from tdaclust.clustering.hierarchy import LINKAGES
from tdaclust.errors import ConfigurationError, InvalidMetricError


ERROR_POLICIES = ('abort', 'exclude')


@dataclass(frozen=True)
class PipelineConfig:
    """Parameters for one clustering run."""

    # Embedding
    dim_lag: int = 3
    sample_lag: int = 5
    standardize: bool = False
    dropna: bool = True

    # Persistence
    max_homology_dimension: int = 1
    distance_threshold: float = math.inf
    n_landmarks: Optional[int] = None

    # Landscape
    homology_dimension: int = 1
    landscape_resolution: int = 500
    landscape_level: int = 1
    landscape_domain: Optional[Tuple[float, float]] = None

    # Clustering
    distance_metric: str = 'euclidean'
    minkowski_p: Optional[float] = None
    linkage: str = 'ward'

    # Execution
    n_jobs: int = 1
    on_error: str = 'abort'

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raise ConfigurationError or InvalidMetricError on bad values."""
        checks = [
            (self.dim_lag >= 1, f"dim_lag must be >= 1, got {self.dim_lag}"),
            (self.sample_lag >= 1, f"sample_lag must be >= 1, got {self.sample_lag}"),
            (self.max_homology_dimension >= 0,
             f"max_homology_dimension must be >= 0, got {self.max_homology_dimension}"),
            (self.distance_threshold > 0,
             f"distance_threshold must be > 0, got {self.distance_threshold}"),
            (self.landscape_resolution > 0,
             f"landscape_resolution must be > 0, got {self.landscape_resolution}"),
            (self.landscape_level >= 1, f"landscape_level must be >= 1, got {self.landscape_level}"),
            (0 <= self.homology_dimension <= self.max_homology_dimension,
             f"homology_dimension must be in 0..{self.max_homology_dimension}, "
             f"got {self.homology_dimension}"),
            (self.n_landmarks is None or self.n_landmarks >= 2,
             f"n_landmarks must be >= 2, got {self.n_landmarks}"),
            (self.n_jobs != 0, "n_jobs must be non-zero"),
            (self.on_error in ERROR_POLICIES,
             f"on_error must be one of {ERROR_POLICIES}, got '{self.on_error}'"),
        ]
        for ok, message in checks:
            if not ok:
                raise ConfigurationError(message)

        if self.landscape_domain is not None:
            lo, hi = self.landscape_domain
            if not (math.isfinite(lo) and math.isfinite(hi)) or hi <= lo:
                raise ConfigurationError(f"landscape_domain must be finite with lo < hi, got {self.landscape_domain}")

        resolve_metric(self.distance_metric)
        if self.linkage not in LINKAGES:
            raise InvalidMetricError(
                f"Unsupported linkage '{self.linkage}'. Available: {', '.join(LINKAGES)}"
            )

    def resolved_landscape_domain(self) -> Optional[Tuple[float, float]]:
        """
        Fixed landscape domain, if one is known before any diagram exists.

        An explicit landscape_domain wins; otherwise a finite distance
        threshold bounds every death, giving [0, threshold].
        """
        if self.landscape_domain is not None:
            return self.landscape_domain
        if math.isfinite(self.distance_threshold):
            return (0.0, float(self.distance_threshold))
        return None

    def with_overrides(self, **overrides) -> 'PipelineConfig':
        """Copy with some fields replaced; None values are ignored."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(changes) - {f.name for f in dataclasses.fields(self)}
        if unknown:
            raise ConfigurationError(f"Unknown config fields: {sorted(unknown)}")
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Plain, strict-JSON mapping; an infinite threshold becomes None."""
        data = dataclasses.asdict(self)
        if not math.isfinite(data['distance_threshold']):
            data['distance_threshold'] = None
        if data['landscape_domain'] is not None:
            data['landscape_domain'] = list(data['landscape_domain'])
        return data

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'PipelineConfig':
        """
        Build from a plain mapping (e.g. parsed YAML).

        Accepts the fields flat or nested under a 'pipeline' key.
        """
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Config must be a mapping, got {type(raw).__name__}")
        if 'pipeline' in raw and isinstance(raw['pipeline'], dict):
            raw = raw['pipeline']

        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(raw) - known
        if unknown:
            raise ConfigurationError(f"Unknown config fields: {sorted(unknown)}")

        values = dict(raw)
        # null threshold means no cutoff
        if 'distance_threshold' in values and values['distance_threshold'] is None:
            del values['distance_threshold']
        try:
            if values.get('distance_threshold') is not None:
                values['distance_threshold'] = float(values['distance_threshold'])
            if values.get('landscape_domain') is not None:
                lo, hi = values['landscape_domain']
                values['landscape_domain'] = (float(lo), float(hi))
            if values.get('minkowski_p') is not None:
                values['minkowski_p'] = float(values['minkowski_p'])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Malformed config value: {e}") from e

        return cls(**values)


def load_pipeline_config(path: Union[str, Path]) -> PipelineConfig:
    """
    Load a PipelineConfig from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigurationError: If the YAML is malformed or has bad values
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    with open(path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    return PipelineConfig.from_dict(raw or {})

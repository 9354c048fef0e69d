"""
Point Cloud Construction for Topological Analysis

Methods for turning a scalar time series into a point cloud
for subsequent persistent homology computation.
"""

import numpy as np
from typing import Optional

from tdaclust.errors import InsufficientLengthError


def embed(
    series: np.ndarray,
    dim_lag: int,
    sample_lag: int
) -> np.ndarray:
    """
    Construct point cloud via time-delay embedding (Takens' theorem).

    Point i is [x[i], x[i + tau], ..., x[i + d*tau]] with d = dim_lag
    and tau = sample_lag. Rows keep the temporal order of their
    starting sample.

    Parameters
    ----------
    series : array, shape (n_samples,)
        Scalar time series, already free of missing values
    dim_lag : int
        Number of lags d (points live in R^(d+1))
    sample_lag : int
        Time delay tau between coordinates (in samples)

    Returns
    -------
    cloud : array, shape (n_samples - d*tau, d + 1)

    Raises
    ------
    InsufficientLengthError
        If len(series) <= dim_lag * sample_lag.
    """
    if dim_lag < 1 or sample_lag < 1:
        raise ValueError(
            f"dim_lag and sample_lag must be >= 1, got dim_lag={dim_lag}, sample_lag={sample_lag}"
        )

    x = np.asarray(series, dtype=np.float64).ravel()
    if not np.all(np.isfinite(x)):
        raise ValueError("Series contains NaN or infinite values; drop them before embedding")

    span = dim_lag * sample_lag
    n_points = len(x) - span

    if n_points <= 0:
        raise InsufficientLengthError(
            f"Series of length {len(x)} too short for dim_lag={dim_lag}, "
            f"sample_lag={sample_lag} (needs more than {span} samples)"
        )

    offsets = np.arange(dim_lag + 1) * sample_lag
    index = np.arange(n_points)[:, None] + offsets[None, :]
    return x[index]


def sliding_window_embedding(
    x: np.ndarray,
    window_size: int,
    step: int = 1
) -> np.ndarray:
    """
    Construct point cloud where each point is a window of the signal.

    Good for periodic/quasi-periodic signals where the window captures
    one or more complete cycles.

    Parameters
    ----------
    x : array
        Time series
    window_size : int
        Size of each window
    step : int
        Step between windows

    Returns
    -------
    embedded : array, shape (n_windows, window_size)
        Each row is a window of the signal
    """
    if window_size < 1 or step < 1:
        raise ValueError(f"window_size and step must be >= 1, got {window_size}, {step}")

    x = np.asarray(x, dtype=np.float64).ravel()
    n_windows = (len(x) - window_size) // step + 1

    if len(x) < window_size or n_windows <= 0:
        raise InsufficientLengthError(
            f"Series of length {len(x)} too short for window_size={window_size}"
        )

    starts = np.arange(n_windows) * step
    return x[starts[:, None] + np.arange(window_size)[None, :]]


def standardize(x: np.ndarray) -> np.ndarray:
    """Z-score a series. Constant series are only centred."""
    x = np.asarray(x, dtype=np.float64)
    sd = x.std()
    sd = 1.0 if sd == 0 else sd
    return (x - x.mean()) / sd


def subsample_point_cloud(
    point_cloud: np.ndarray,
    n_landmarks: int,
    method: str = 'maxmin',
    seed: Optional[int] = 0
) -> np.ndarray:
    """
    Subsample a point cloud for computational efficiency.

    Parameters
    ----------
    point_cloud : array
        Original point cloud
    n_landmarks : int
        Number of points to keep
    method : str
        'maxmin': Greedy max-min subsampling starting from the first point
                  (deterministic, better coverage)
        'random': Random subsampling with the given seed
    seed : int, optional
        Seed for 'random'

    Returns
    -------
    subsampled : array
        Selected points in their original order
    """
    point_cloud = np.asarray(point_cloud, dtype=np.float64)
    n = len(point_cloud)

    if n_landmarks < 1:
        raise ValueError(f"n_landmarks must be >= 1, got {n_landmarks}")

    if n <= n_landmarks:
        return point_cloud

    if method == 'random':
        rng = np.random.default_rng(seed)
        indices = np.sort(rng.choice(n, n_landmarks, replace=False))
        return point_cloud[indices]

    elif method == 'maxmin':
        indices = [0]
        dists = np.linalg.norm(point_cloud - point_cloud[0], axis=1)

        for _ in range(1, n_landmarks):
            # argmax takes the lowest index on ties
            nxt = int(np.argmax(dists))
            indices.append(nxt)
            dists = np.minimum(dists, np.linalg.norm(point_cloud - point_cloud[nxt], axis=1))

        return point_cloud[np.sort(indices)]

    else:
        raise ValueError(f"Unknown method: {method}")

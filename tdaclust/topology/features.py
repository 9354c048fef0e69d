"""
Topological Feature Extraction

Computes summary statistics and vectorizations from persistence diagrams.
"""

import numpy as np
from typing import Dict, Iterable, Optional, Tuple
from .persistence import PersistenceDiagram


def betti_numbers(
    diagram: PersistenceDiagram,
    threshold: float
) -> Dict[int, int]:
    """
    Compute Betti numbers at a given filtration threshold.

    beta_k(threshold) = number of k-dimensional features alive at threshold

    Parameters
    ----------
    diagram : PersistenceDiagram
    threshold : float
        Filtration value

    Returns
    -------
    betti : dict
        {dimension: count}
    """
    alive = (diagram.birth_times <= threshold) & (diagram.death_times > threshold)
    return {
        dim: int(np.sum(alive & (diagram.dimensions == dim)))
        for dim in diagram.homology_dimensions
    }


def betti_curve(
    diagram: PersistenceDiagram,
    n_points: int = 100
) -> Tuple[np.ndarray, Dict[int, np.ndarray]]:
    """
    Compute Betti numbers across the filtration range of the diagram.

    Parameters
    ----------
    diagram : PersistenceDiagram
    n_points : int
        Number of points in the curve

    Returns
    -------
    thresholds : array, shape (n_points,)
    curves : dict
        {dimension: betti_curve_array}
    """
    if diagram.n_features == 0:
        return np.zeros(n_points), {}

    thresholds = np.linspace(diagram.birth_times.min(), diagram.death_times.max(), n_points)

    curves = {}
    for dim in diagram.homology_dimensions:
        dgm = diagram.select(dim)
        alive = (
            (dgm.birth_times[:, None] <= thresholds[None, :])
            & (dgm.death_times[:, None] > thresholds[None, :])
        )
        curves[dim] = alive.sum(axis=0).astype(np.float64)

    return thresholds, curves


def persistence_statistics(dgm: PersistenceDiagram) -> Dict[str, float]:
    """
    Compute summary statistics from a persistence diagram.

    Select a single homology dimension first; statistics over mixed
    dimensions are rarely meaningful.

    Parameters
    ----------
    dgm : PersistenceDiagram

    Returns
    -------
    stats : dict
        Summary statistics
    """
    if dgm.n_features == 0:
        return {
            'n_features': 0,
            'total_persistence': 0.0,
            'max_persistence': 0.0,
            'mean_persistence': 0.0,
            'std_persistence': 0.0,
            'persistence_entropy': 0.0,
            'mean_birth': 0.0,
            'mean_death': 0.0,
        }

    pers = dgm.persistence

    # Persistence entropy
    pers_sum = pers.sum()
    if pers_sum > 0:
        pers_norm = pers / pers_sum
        pers_norm = pers_norm[pers_norm > 0]
        entropy = -np.sum(pers_norm * np.log(pers_norm)) if len(pers_norm) > 0 else 0.0
    else:
        entropy = 0.0

    return {
        'n_features': dgm.n_features,
        'total_persistence': float(np.sum(pers)),
        'max_persistence': float(np.max(pers)),
        'mean_persistence': float(np.mean(pers)),
        'std_persistence': float(np.std(pers)) if len(pers) > 1 else 0.0,
        'persistence_entropy': float(entropy),
        'mean_birth': float(np.mean(dgm.birth_times)),
        'mean_death': float(np.mean(dgm.death_times)),
    }


def landscape_domain(diagrams: Iterable[PersistenceDiagram]) -> Optional[Tuple[float, float]]:
    """
    Smallest [min birth, max death] interval covering every diagram.

    Infinite deaths are ignored. Returns None when no diagram has a
    finite pair.
    """
    lows, highs = [], []
    for dgm in diagrams:
        finite_mask = np.isfinite(dgm.death_times)
        if finite_mask.any():
            lows.append(dgm.birth_times[finite_mask].min())
            highs.append(dgm.death_times[finite_mask].max())
    if not lows:
        return None
    return float(min(lows)), float(max(highs))


def persistence_landscape(
    dgm: PersistenceDiagram,
    n_landscapes: int = 5,
    n_points: int = 100,
    domain: Optional[Tuple[float, float]] = None
) -> np.ndarray:
    """
    Compute persistence landscapes - a stable vectorization of persistence diagrams.

    Parameters
    ----------
    dgm : PersistenceDiagram
        Usually a single homology dimension (see PersistenceDiagram.select)
    n_landscapes : int
        Number of landscape functions
    n_points : int
        Resolution of each landscape
    domain : (float, float), optional
        Sampling interval. Defaults to [min birth, max death] of the diagram.

    Returns
    -------
    landscapes : array, shape (n_landscapes, n_points)
        Row k holds the (k+1)-th largest tent value at each sample point.
    """
    if n_landscapes < 1:
        raise ValueError(f"n_landscapes must be >= 1, got {n_landscapes}")
    if n_points < 1:
        raise ValueError(f"n_points must be >= 1, got {n_points}")

    # Essential classes have no tent
    finite_mask = np.isfinite(dgm.death_times) & np.isfinite(dgm.birth_times)
    births = dgm.birth_times[finite_mask]
    deaths = dgm.death_times[finite_mask]

    if len(births) == 0:
        return np.zeros((n_landscapes, n_points))

    if domain is None:
        lo, hi = float(births.min()), float(deaths.max())
    else:
        lo, hi = float(domain[0]), float(domain[1])
        if not (np.isfinite(lo) and np.isfinite(hi)) or hi < lo:
            raise ValueError(f"Invalid landscape domain: {domain}")

    t = np.linspace(lo, hi, n_points)

    # Tent functions: rise from b to the midpoint, fall to d
    tents = np.maximum(
        0.0,
        np.minimum(t[None, :] - births[:, None], deaths[:, None] - t[None, :])
    )

    landscapes = np.zeros((n_landscapes, n_points))
    k = min(n_landscapes, len(births))
    ordered = -np.sort(-tents, axis=0)
    landscapes[:k] = ordered[:k]
    return landscapes


def to_landscape(
    diagram: PersistenceDiagram,
    homology_dimension: int = 1,
    resolution: int = 500,
    level: int = 1,
    domain: Optional[Tuple[float, float]] = None
) -> np.ndarray:
    """
    Single landscape level for one homology dimension as a flat vector.

    Level 1 is the upper envelope of the tent functions; an empty
    diagram gives all zeros. The output always has `resolution` values.

    Parameters
    ----------
    diagram : PersistenceDiagram
        May contain several homology dimensions
    homology_dimension : int
        Which H_k to summarize
    resolution : int
        Number of evenly spaced sample points
    level : int
        Landscape level (1 = maximum tent height)
    domain : (float, float), optional
        Fixed sampling interval; defaults to the observed birth-death range

    Returns
    -------
    landscape : array, shape (resolution,)
    """
    if level < 1:
        raise ValueError(f"level must be >= 1, got {level}")

    dgm = diagram.select(homology_dimension)
    return persistence_landscape(dgm, n_landscapes=level, n_points=resolution, domain=domain)[level - 1]


def landscape_norm(landscape: np.ndarray, p: float = 2.0, domain: Optional[Tuple[float, float]] = None) -> float:
    """
    Lp norm of a sampled landscape.

    With a domain the sum is scaled by the grid spacing, approximating
    the integral norm; without one it is the plain vector norm.
    """
    landscape = np.asarray(landscape, dtype=np.float64)
    if landscape.size == 0:
        return 0.0
    weight = 1.0
    if domain is not None and landscape.size > 1:
        weight = (domain[1] - domain[0]) / (landscape.size - 1)
    if np.isinf(p):
        return float(np.max(np.abs(landscape)))
    return float((weight * np.sum(np.abs(landscape) ** p)) ** (1.0 / p))

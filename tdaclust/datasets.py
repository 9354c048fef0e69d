"""
Synthetic Series Generator
==========================

Reproducible test signals with known topology:
1. Sine wave       - one persistent loop in the delay embedding
2. Noisy sine      - the same loop, blurred
3. White noise     - no persistent loops
4. Random walk     - drifting, no loops

Usage:
    from tdaclust.datasets import synthetic_collection

    series = synthetic_collection(n_samples=200, seed=0)
"""

import numpy as np
from typing import Dict, Optional


def sine_wave(n_samples: int = 100, period: float = 10.0, amplitude: float = 1.0, phase: float = 0.0) -> np.ndarray:
    """amplitude * sin(2*pi*t/period + phase) for t = 0..n_samples-1."""
    t = np.arange(n_samples)
    return amplitude * np.sin(2 * np.pi * t / period + phase)


def noisy_sine(
    n_samples: int = 100,
    period: float = 10.0,
    noise: float = 0.2,
    seed: Optional[int] = None
) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return sine_wave(n_samples, period) + noise * rng.standard_normal(n_samples)


def white_noise(n_samples: int = 100, scale: float = 1.0, seed: Optional[int] = None) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return scale * rng.standard_normal(n_samples)


def random_walk(n_samples: int = 100, scale: float = 1.0, seed: Optional[int] = None) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return np.cumsum(scale * rng.standard_normal(n_samples))


def synthetic_collection(
    n_samples: int = 200,
    n_per_kind: int = 2,
    seed: int = 0
) -> Dict[str, np.ndarray]:
    """
    A labelled mix of periodic and aperiodic series.

    Labels look like 'sine_0', 'noisy_sine_1', 'noise_0', 'walk_1'.
    Each series gets its own child seed, so results are reproducible.
    Periods start at 20 samples so the default sample_lag of 5 sits at a
    quarter period and the delay embedding traces a loop.
    """
    seeds = np.random.SeedSequence(seed).spawn(3 * n_per_kind)
    child = iter(int(s.generate_state(1)[0]) for s in seeds)

    series = {}
    for i in range(n_per_kind):
        series[f'sine_{i}'] = sine_wave(n_samples, period=20.0 + 4 * i, phase=0.3 * i)
    for i in range(n_per_kind):
        series[f'noisy_sine_{i}'] = noisy_sine(n_samples, period=20.0 + 4 * i, seed=next(child))
    for i in range(n_per_kind):
        series[f'noise_{i}'] = white_noise(n_samples, seed=next(child))
    for i in range(n_per_kind):
        series[f'walk_{i}'] = random_walk(n_samples, scale=0.3, seed=next(child))
    return series

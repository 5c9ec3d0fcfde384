import warnings
from typing import Dict, Tuple

import numpy as np

from modeseek.errors import InvalidArgumentError


def bin_points(points: np.ndarray, bin_size: float) -> Dict[Tuple[int, ...], int]:
    """Count the points falling in each cell of a regular grid with cells of side bin_size.

    The cells are keyed by their integer coordinates as tuples, so two cells are the same key exactly when all of
    their coordinates match. The dictionary keeps the order in which the cells were first met.
    """
    cells = np.floor(points / bin_size).astype(np.int64)

    counts: Dict[Tuple[int, ...], int] = {}
    for cell in map(tuple, cells.tolist()):
        counts[cell] = counts.get(cell, 0) + 1
    return counts


def create_seeds(points: np.ndarray, bin_size: float = 0.0, min_bin_freq: int = 1) -> Tuple[np.ndarray, np.ndarray]:
    """Create the starting positions of the mean shift trajectories.

    Parameters
    ----------
        points: array, shape (n_samples, n_features)
            The data points.

        bin_size: float (default 0)
            The side of the grid cells used to collapse nearby points into a single seed. With 0, every point is its
            own seed.

        min_bin_freq: int (default 1)
            Only cells holding at least this many points produce a seed.

    Returns
    -------
        seeds: array, shape (n_seeds, n_features)
            A fresh array with the seed positions. Binned seeds sit on the lower corner of their cell.

        counts: array, shape (n_seeds, )
            The number of points represented by each seed.
    """
    points = np.asarray(points, dtype=np.float64)
    if bin_size < 0:
        raise InvalidArgumentError(f"The bin size cannot be negative, got {bin_size}.")

    if bin_size == 0:
        return points.copy(), np.ones(points.shape[0], dtype=np.int64)

    counts = bin_points(points, bin_size)
    kept = [(cell, count) for cell, count in counts.items() if count >= min_bin_freq]

    if len(kept) == 0:
        warnings.warn(
            f"No bin holds at least {min_bin_freq} points, falling back to one seed per point. "
            f"Consider lowering min_bin_freq.",
            UserWarning,
        )
        return points.copy(), np.ones(points.shape[0], dtype=np.int64)

    cells = np.array([cell for cell, _ in kept], dtype=np.float64).reshape(len(kept), points.shape[1])
    seeds = cells * bin_size
    return seeds, np.array([count for _, count in kept], dtype=np.int64)

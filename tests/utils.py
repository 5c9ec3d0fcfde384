from typing import Tuple

import numpy as np
from scipy.spatial.distance import cdist
from sklearn.datasets import make_blobs

# DATASETS

NINE_POINTS = np.array(
    [
        [-5, -2, -1],
        [-5, -5, -6],
        [2, 1, 1],
        [1, 1, 2],
        [1, 2, 2],
        [3, 1, 2],
        [11, 5, 4],
        [15, 5, 6],
        [10, 5, 6],
    ],
    dtype=np.float64,
)


def separated_blobs(
    n_samples: int = 150, cluster_std: float = 0.5, seed: int = 0
) -> Tuple[np.ndarray, np.ndarray]:
    """Three gaussian blobs whose centers lie much farther apart than their spread."""
    centers = np.array([[0.0, 0.0], [20.0, 20.0], [-20.0, 20.0]])
    return make_blobs(
        n_samples=n_samples, centers=centers, cluster_std=cluster_std, random_state=seed
    )


def random_points(n: int = 300, dimension: int = 3, seed: int = 0) -> np.ndarray:
    return np.random.RandomState(seed).uniform(-10, 10, size=(n, dimension))


# BRUTE FORCE REFERENCES


def brute_force_radius(
    points: np.ndarray, query: np.ndarray, radius: float, metric: str = "euclidean"
) -> set:
    distances = cdist(query[None, :], points, metric=metric)[0]
    return set(np.flatnonzero(distances <= radius).tolist())


def brute_force_k_nearest(
    points: np.ndarray, query: np.ndarray, k: int, metric: str = "euclidean"
) -> set:
    distances = cdist(query[None, :], points, metric=metric)[0]
    return set(np.argsort(distances, kind="stable")[:k].tolist())


def same_partition(labels_a: np.ndarray, labels_b: np.ndarray) -> bool:
    """True if two labelings define the same partition, whatever the label identifiers."""
    labels_a, labels_b = np.asarray(labels_a), np.asarray(labels_b)
    if labels_a.shape != labels_b.shape:
        return False
    pairs = set(zip(labels_a.tolist(), labels_b.tolist()))
    return len(pairs) == len(set(labels_a.tolist())) == len(set(labels_b.tolist()))

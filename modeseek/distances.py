from functools import partial
from typing import Callable, Union

import numpy as np
from scipy.spatial import distance as sp_distance
from sklearn.metrics import pairwise_distances

from modeseek.errors import InvalidArgumentError

Metric = Callable[[np.ndarray, np.ndarray], float]

# Order of the named "minkowski" metric. Other orders are available by passing
# functools.partial(scipy.spatial.distance.minkowski, p=...) as the metric.
MINKOWSKI_P = 3


def euclidean(a: np.ndarray, b: np.ndarray) -> float:
    diff = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return float(np.sqrt(np.dot(diff, diff)))


# Only metrics for which a single coordinate difference is a lower bound of the distance are listed, since the
# k-d tree prunes subtrees using the distance to the splitting hyperplane.
_NAMED_METRICS = {
    "euclidean": euclidean,
    "l2": euclidean,
    "cityblock": sp_distance.cityblock,
    "manhattan": sp_distance.cityblock,
    "l1": sp_distance.cityblock,
    "chebyshev": sp_distance.chebyshev,
    "minkowski": partial(sp_distance.minkowski, p=MINKOWSKI_P),
}


def resolve_metric(metric: Union[str, Metric]) -> Metric:
    """Turn a metric name or a callable into a distance function of two points.

    Parameters
    ----------
        metric: str or callable
            One of ['euclidean', 'l2', 'cityblock', 'manhattan', 'l1', 'chebyshev', 'minkowski'] or a function
            (a, b) -> float. Custom functions must satisfy the metric axioms and be bounded below by the absolute
            difference of any single coordinate, otherwise the tree queries are no longer exact.
            The named "minkowski" metric has order MINKOWSKI_P = 3; pass a partial of
            scipy.spatial.distance.minkowski for any other order.

    Returns
    -------
        distance: a function taking two points and returning a float.
    """
    if callable(metric):
        return metric
    try:
        return _NAMED_METRICS[str(metric).lower()]
    except KeyError:
        raise InvalidArgumentError(
            f"Invalid metric: {metric}. Please select one from: {', '.join(_NAMED_METRICS)}."
        )


def pairwise(points: np.ndarray, others: np.ndarray, metric: Union[str, Metric] = "euclidean") -> np.ndarray:
    """Dense (n, m) matrix with the distances between the rows of points and the rows of others."""
    distance = resolve_metric(metric)
    points = np.atleast_2d(np.asarray(points, dtype=np.float64))
    others = np.atleast_2d(np.asarray(others, dtype=np.float64))

    if callable(metric):
        return pairwise_distances(points, others, metric=distance)
    # Named metrics go through the vectorized implementations of scikit-learn and scipy.
    name = str(metric).lower()
    if name == "minkowski":
        return pairwise_distances(points, others, metric=name, p=MINKOWSKI_P)
    return pairwise_distances(points, others, metric=name)

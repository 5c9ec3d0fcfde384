from functools import partial

import numpy as np
import pytest
from scipy.spatial import distance as sp_distance
from sklearn.metrics import pairwise_distances
from utils import random_points

from modeseek import InvalidArgumentError
from modeseek.distances import MINKOWSKI_P, euclidean, pairwise, resolve_metric


def test_pairwise_matches_the_library_for_named_metrics():
    points = random_points(n=40, dimension=3, seed=8)
    others = random_points(n=25, dimension=3, seed=9)

    for metric in ["euclidean", "cityblock", "chebyshev"]:
        np.testing.assert_allclose(pairwise(points, others, metric), pairwise_distances(points, others, metric=metric))

    np.testing.assert_allclose(
        pairwise(points, others, "minkowski"),
        sp_distance.cdist(points, others, metric="minkowski", p=MINKOWSKI_P),
    )


def test_pairwise_with_a_callable_metric():
    points = random_points(n=10, dimension=2, seed=10)
    others = random_points(n=7, dimension=2, seed=11)
    minkowski_4 = partial(sp_distance.minkowski, p=4)

    np.testing.assert_allclose(
        pairwise(points, others, minkowski_4),
        sp_distance.cdist(points, others, metric="minkowski", p=4),
    )


def test_pairwise_single_point():
    distances = pairwise([0.0, 0.0], [[3.0, 4.0], [0.0, 1.0]])

    assert distances.shape == (1, 2)
    np.testing.assert_allclose(distances, [[5.0, 1.0]])


def test_resolve_metric():
    assert resolve_metric("L2") is euclidean
    assert resolve_metric("manhattan")([0.0, 0.0], [1.0, 2.0]) == 3.0
    assert resolve_metric("minkowski")([0.0], [2.0]) == pytest.approx(2.0)

    def custom(a, b):
        return 0.0

    assert resolve_metric(custom) is custom


def test_unknown_metric():
    with pytest.raises(InvalidArgumentError, match="Invalid metric"):
        resolve_metric("cosine")
    with pytest.raises(InvalidArgumentError):
        pairwise([[0.0]], [[1.0]], "cosine")

import numpy as np
import pandas as pd
import pytest
from utils import NINE_POINTS, random_points

from modeseek import InvalidArgumentError
from modeseek.seeding import bin_points, create_seeds


def test_no_binning_copies_the_points():
    seeds, counts = create_seeds(NINE_POINTS)

    np.testing.assert_array_equal(seeds, NINE_POINTS)
    np.testing.assert_array_equal(counts, np.ones(len(NINE_POINTS)))
    seeds[0, 0] = 100.0
    assert NINE_POINTS[0, 0] == -5.0


def test_bins_are_floored_cells():
    seeds, counts = create_seeds(NINE_POINTS, bin_size=3.0)

    # floor(-5 / 3) = -2, so the first point lands on the cell with lower corner (-6, -3, -3).
    expected_seeds = np.array(
        [
            [-6, -3, -3],
            [-6, -6, -6],
            [0, 0, 0],
            [3, 0, 0],
            [9, 3, 3],
            [15, 3, 6],
            [9, 3, 6],
        ],
        dtype=np.float64,
    )
    np.testing.assert_array_equal(seeds, expected_seeds)
    np.testing.assert_array_equal(counts, [1, 1, 3, 1, 1, 1, 1])


def test_bin_counts_match_a_group_by():
    points = random_points(n=500, dimension=2, seed=3)
    bin_size = 2.5

    counts = bin_points(points, bin_size)

    cells = pd.DataFrame(np.floor(points / bin_size).astype(int), columns=["x", "y"])
    expected = cells.groupby(["x", "y"]).size().to_dict()
    assert counts == expected
    assert sum(counts.values()) == len(points)


def test_cells_differing_in_one_coordinate_are_distinct():
    points = np.array([[0.5, 0.5, 0.5], [0.5, 0.5, 1.5], [1.5, 0.5, 0.5]])

    counts = bin_points(points, 1.0)

    assert counts == {(0, 0, 0): 1, (0, 0, 1): 1, (1, 0, 0): 1}


def test_min_bin_freq_filters_cells():
    points = np.array([[0.1, 0.1], [0.2, 0.3], [0.4, 0.2], [5.5, 5.5], [9.1, 0.1]])

    seeds, counts = create_seeds(points, bin_size=1.0, min_bin_freq=2)

    np.testing.assert_array_equal(seeds, [[0.0, 0.0]])
    np.testing.assert_array_equal(counts, [3])


def test_min_bin_freq_rejecting_every_cell_falls_back_to_points():
    points = np.array([[0.1, 0.1], [5.5, 5.5]])

    with pytest.warns(UserWarning, match="No bin holds at least 3 points"):
        seeds, counts = create_seeds(points, bin_size=1.0, min_bin_freq=3)

    np.testing.assert_array_equal(seeds, points)
    np.testing.assert_array_equal(counts, [1, 1])


def test_negative_bin_size():
    with pytest.raises(InvalidArgumentError):
        create_seeds(NINE_POINTS, bin_size=-1.0)

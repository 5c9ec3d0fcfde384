from dataclasses import dataclass
from typing import Iterator, Union

import numpy as np

from modeseek.distances import Metric
from modeseek.errors import DimensionMismatchError, InvalidArgumentError
from modeseek.kdtree import KDTree


@dataclass
class MeanShiftCluster:
    label: int
    mode: np.ndarray
    proportion: float


class MeanShiftClusters:
    """The clusters found by mean shift, able to classify new points.

    A point is given the label of the closest converged seed. The converged seeds sample densely the basins of
    attraction of the modes, which approximates assigning each point to the mode its own trajectory would reach.

    Parameters
    ----------
        modes: array, shape (n_clusters, n_features)
            The surviving modes, row i being the mode of label i.

        seeds: array, shape (n_seeds, n_features)
            The converged positions of all the seeds.

        seed_labels: array, shape (n_seeds, )
            The label of the mode closest to each seed.

        distance: str or callable (default 'euclidean')
            The metric of the assignment index.
    """

    def __init__(self, modes: np.ndarray, seeds: np.ndarray, seed_labels: np.ndarray,
                 distance: Union[str, Metric] = "euclidean"):
        modes = np.asarray(modes, dtype=np.float64)
        seed_labels = np.asarray(seed_labels, dtype=np.int64)
        if len(seeds) != len(seed_labels):
            raise InvalidArgumentError(
                f"Got {len(seed_labels)} labels for {len(seeds)} seeds, they should have the same length."
            )

        self.modes = modes
        self.seed_labels = seed_labels
        self.tree = KDTree.from_data(seeds, seed_labels.tolist(), distance)
        self.proportions = np.bincount(seed_labels, minlength=len(modes)) / max(len(seed_labels), 1)

    @property
    def dimension(self) -> int:
        return self.tree.dimension

    @property
    def count(self) -> int:
        return len(self.modes)

    def nearest(self, point) -> int:
        """The label of a single point."""
        node = self.tree.nearest(point)
        if node is None:
            raise InvalidArgumentError("Cannot classify points without any converged seed.")
        return int(node.value)

    def predict(self, points) -> np.ndarray:
        """The labels of the rows of points."""
        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2:
            raise InvalidArgumentError(
                f"Expected a 2D array of shape (n_samples, n_features), got an array with shape {points.shape}."
            )
        if points.shape[1] != self.dimension:
            raise DimensionMismatchError(self.dimension, points.shape[1], "data")
        return np.array([self.nearest(point) for point in points], dtype=np.int64)

    def __len__(self) -> int:
        return self.count

    def __getitem__(self, label: int) -> MeanShiftCluster:
        return MeanShiftCluster(label, self.modes[label], float(self.proportions[label]))

    def __iter__(self) -> Iterator[MeanShiftCluster]:
        for label in range(self.count):
            yield self[label]

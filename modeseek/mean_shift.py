from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from joblib import Parallel, delayed
from sklearn.base import BaseEstimator, ClusterMixin
from sklearn.utils import check_array
from sklearn.utils.validation import check_is_fitted
from tqdm import tqdm

from modeseek.clusters import MeanShiftClusters
from modeseek.distances import pairwise, resolve_metric
from modeseek.errors import DimensionMismatchError, InvalidArgumentError, SeedIterationError
from modeseek.kdtree import KDTree
from modeseek.kernels import get_kernel
from modeseek.neighbors import BoundedNeighborCollection
from modeseek.seeding import create_seeds

# Neighbors farther than this many bandwidths are ignored when shifting a seed. It truncates the support of kernels
# with infinite tails; kernels with heavier tails than the gaussian need a larger factor.
SUPPORT_FACTOR = 3.0


@dataclass
class TrajectoryOutcome:
    seed_index: int
    n_iter: int
    converged: bool
    error: Optional[BaseException] = None


def weighted_mean(position: np.ndarray, neighbors: BoundedNeighborCollection, kernel, bandwidth: float) -> np.ndarray:
    """Kernel weighted mean of the neighbors of position. The weight of a neighbor at distance d is -k'((d / h)²).
    When all weights vanish, the position itself is returned."""
    if len(neighbors) == 0:
        return position.copy()

    normalized = (neighbors.distances() / bandwidth) ** 2
    weights = -np.asarray(kernel.derivative(normalized), dtype=np.float64)
    total = weights.sum()
    if total == 0:
        return position.copy()

    mean = weights @ neighbors.positions() / total
    if not np.all(np.isfinite(mean)):
        raise FloatingPointError(
            f"The weighted mean around {position.tolist()} is not finite; the kernel returned weights "
            f"{weights.tolist()}."
        )
    return mean


def shift_seed(
    seed: np.ndarray,
    tree: KDTree,
    kernel,
    bandwidth: float,
    threshold: float,
    max_iterations: int,
) -> Tuple[int, bool]:
    """Move a seed in place towards a mode of the density until the mean shift vector becomes shorter than
    threshold * bandwidth, or vanishes.

    Returns
    -------
        n_iter: the number of iterations performed.

        converged: False if the iteration budget ran out before the convergence criterion was met.
    """
    radius = SUPPORT_FACTOR * bandwidth
    tolerance = threshold * bandwidth

    for iteration in range(1, max_iterations + 1):
        neighbors = tree.radius_query(seed, radius)
        mean = weighted_mean(seed, neighbors, kernel, bandwidth)

        shift = seed - mean
        seed[:] = mean

        # The magnitude of the mean shift vector goes to zero at a mode (Comaniciu & Meer 2002, p. 606). A seed that
        # did not move at all is at a fixed point, even with a zero tolerance.
        magnitude = np.linalg.norm(shift)
        if magnitude < tolerance or magnitude == 0:
            return iteration, True

    return max_iterations, False


def _trajectory_task(seeds, seed_index, tree, kernel, bandwidth, threshold, max_iterations) -> TrajectoryOutcome:
    try:
        n_iter, converged = shift_seed(seeds[seed_index], tree, kernel, bandwidth, threshold, max_iterations)
    except Exception as e:
        return TrajectoryOutcome(seed_index, 0, False, e)
    return TrajectoryOutcome(seed_index, n_iter, converged)


def suppress_duplicates(candidates: np.ndarray, bandwidth: float, metric="euclidean") -> np.ndarray:
    """Non-maximum suppression of candidate modes.

    Candidates are visited in order; every later candidate closer than bandwidth to a surviving one is a duplicate.

    Returns
    -------
        is_duplicate: boolean array, shape (n_candidates, )
    """
    n = len(candidates)
    is_duplicate = np.zeros(n, dtype=bool)
    for i in range(n - 1):
        if is_duplicate[i]:
            continue
        distances = pairwise(candidates[i], candidates[i + 1:], metric)[0]
        is_duplicate[i + 1:] |= distances < bandwidth
    return is_duplicate


def nearest_mode_labels(seeds: np.ndarray, modes: np.ndarray, metric="euclidean") -> np.ndarray:
    """Label every seed with the index of its closest mode; the first mode wins ties."""
    return np.argmin(pairwise(seeds, modes, metric), axis=1).astype(np.int64)


class MeanShift(ClusterMixin, BaseEstimator):
    """Mean shift clustering

     Finds the modes of the kernel density estimate of the data by gradient ascent from a set of seeds and groups
     together the points whose seeds reach the same mode. The number of clusters is not fixed in advance, it follows
     from the bandwidth.

     Parameters
     ----------
     bandwidth: float (default 1.0)
         The scale of the kernel. Neighbors within 3 * bandwidth are used to shift the seeds, modes closer than the
         bandwidth are merged and, with bin_seeding, points are binned on a grid with cells of side 2 * bandwidth.

     kernel: str or kernel object (default 'gaussian')
         One of ['uniform', 'flat', 'gaussian', 'epanechnikov'] or any object with a method derivative(x) giving the
         derivative of the kernel profile at the squared normalized distance x.

     metric: str or callable (default 'euclidean')
         The distance used by the spatial indices and when comparing modes. See `modeseek.distances`.

     dimension: Optional[int] (default None)
         The expected number of features. If set, data of any other dimension is rejected.

     bin_seeding: bool (default False)
         If true, seeds are placed on the occupied cells of a grid instead of on every point, which speeds up large
         datasets.

     min_bin_freq: int (default 1)
         With bin_seeding, only cells holding at least this many points produce a seed.

     threshold: float (default 1e-3)
         Relative convergence threshold: a seed stops once its shift is shorter than threshold * bandwidth.

     max_iter: int (default 100)
         The maximum number of iterations per seed. Seeds that exhaust it simply stop where they are; the
         converged_ attribute tells them apart.

     n_jobs: Optional[int] (default None)
         The number of threads moving seeds concurrently. None or 1 process the seeds strictly one after the other,
         -1 uses all processors. The result does not depend on this value.

     verbose: bool (default False)
         If true, print progress messages.

     Attributes
     ----------
     cluster_centers_: array, shape (n_clusters, n_features)
         The modes found, row i being the mode of cluster i.

     labels_: array, shape (n_samples, )
         The cluster of each point of the last fitted dataset.

     seeds_: array, shape (n_seeds, n_features)
         The final positions of the seeds.

     seed_labels_: array, shape (n_seeds, )
         The cluster of each seed.

     n_iter_: array, shape (n_seeds, )
         The iterations performed by each seed.

     converged_: array, shape (n_seeds, )
         Whether each seed met the convergence criterion within max_iter iterations.

     clusters_: MeanShiftClusters
         The cluster collection used to classify new points.

     References
     ----------
         [1] Comaniciu, Dorin, and Peter Meer. "Mean shift: A robust approach toward feature space analysis."
         IEEE Transactions on Pattern Analysis and Machine Intelligence 24.5 (2002): 603-619.
         [2] Conrad Lee. "Scalable mean-shift clustering in a few lines of python." The Sociograph blog, 2011.
    """

    def __init__(
        self,
        bandwidth: float = 1.0,
        kernel="gaussian",
        metric="euclidean",
        dimension: Optional[int] = None,
        bin_seeding: bool = False,
        min_bin_freq: int = 1,
        threshold: float = 1e-3,
        max_iter: int = 100,
        n_jobs: Optional[int] = None,
        verbose: bool = False,
    ):
        self.bandwidth = bandwidth
        self.kernel = kernel
        self.metric = metric
        self.dimension = dimension
        self.bin_seeding = bin_seeding
        self.min_bin_freq = min_bin_freq
        self.threshold = threshold
        self.max_iter = max_iter
        self.n_jobs = n_jobs
        self.verbose = verbose

    def _validate_data_and_parameters(self, points, threshold: float, max_iterations: int) -> np.ndarray:
        if self.bandwidth is None or not self.bandwidth > 0:
            raise InvalidArgumentError(f"The bandwidth should be positive, got {self.bandwidth}.")
        if max_iterations < 1:
            raise InvalidArgumentError(f"The maximum number of iterations should be positive, got {max_iterations}.")
        if threshold < 0:
            raise InvalidArgumentError(f"The convergence threshold cannot be negative, got {threshold}.")

        if points is None or len(points) == 0:
            raise InvalidArgumentError("Cannot cluster an empty set of points.")
        try:
            points = check_array(points, dtype=np.float64)
        except ValueError as e:
            raise InvalidArgumentError(str(e)) from e

        if self.dimension is not None and points.shape[1] != self.dimension:
            raise DimensionMismatchError(self.dimension, points.shape[1], "data")
        return points

    def _move_seeds(self, seeds, tree, kernel, threshold, max_iterations) -> List[TrajectoryOutcome]:
        indices = tqdm(range(len(seeds)), desc="Shifting seeds", disable=not self.verbose)
        task_arguments = (tree, kernel, self.bandwidth, threshold, max_iterations)

        if self.n_jobs is None or self.n_jobs == 1:
            return [_trajectory_task(seeds, i, *task_arguments) for i in indices]

        # Every task writes only to its own row of seeds and reads the shared tree, so threads need no locks.
        return Parallel(n_jobs=self.n_jobs, prefer="threads")(
            delayed(_trajectory_task)(seeds, i, *task_arguments) for i in indices
        )

    def compute(self, points, threshold: Optional[float] = None, max_iterations: Optional[int] = None) -> np.ndarray:
        """Divide the points into clusters.

        Parameters
        ----------
        points: array, shape (n_samples, n_features)
            The data to cluster.

        threshold: Optional[float] (default None)
            Overrides the relative convergence threshold of the estimator.

        max_iterations: Optional[int] (default None)
            Overrides the maximum number of iterations per seed of the estimator.

        Returns
        -------
        labels: array, shape (n_samples, )
            The cluster of each point.
        """
        threshold = self.threshold if threshold is None else threshold
        max_iterations = self.max_iter if max_iterations is None else max_iterations
        points = self._validate_data_and_parameters(points, threshold, max_iterations)

        kernel = get_kernel(self.kernel)
        distance = resolve_metric(self.metric)
        bandwidth = float(self.bandwidth)

        bin_size = 2 * bandwidth if self.bin_seeding else 0.0
        seeds, _ = create_seeds(points, bin_size, self.min_bin_freq)
        if self.verbose:
            print(f"Shifting {len(seeds)} seeds created from {len(points)} points...")

        tree = KDTree.from_data(points, distance=distance)
        outcomes = self._move_seeds(seeds, tree, kernel, threshold, max_iterations)

        failures = [(outcome.seed_index, outcome.error) for outcome in outcomes if outcome.error is not None]
        if failures:
            failures.sort(key=lambda failure: failure[0])
            raise SeedIterationError(failures) from failures[0][1]

        n_iter = np.array([outcome.n_iter for outcome in outcomes], dtype=np.int64)
        converged = np.array([outcome.converged for outcome in outcomes], dtype=bool)
        if self.verbose and not converged.all():
            print(f"{int((~converged).sum())} seeds stopped after {max_iterations} iterations without converging.")

        is_duplicate = suppress_duplicates(seeds, bandwidth, self.metric)
        modes = seeds[~is_duplicate]
        if self.verbose:
            print(f"Found {len(modes)} modes.")

        seed_labels = nearest_mode_labels(seeds, modes, self.metric)
        clusters = MeanShiftClusters(modes, seeds, seed_labels, distance)
        labels = clusters.predict(points)

        self.n_features_in_ = points.shape[1]
        self.cluster_centers_ = modes
        self.seeds_ = seeds
        self.seed_labels_ = seed_labels
        self.n_iter_ = n_iter
        self.converged_ = converged
        self.clusters_ = clusters
        self.labels_ = labels

        return labels

    def fit(self, X, y=None):
        """Compute the clusters of X.

        Parameters
        ----------
        X: array, shape (n_samples, n_features)
            The data to cluster.

        y: Ignored.
        """
        self.compute(X)
        return self

    def predict(self, X) -> np.ndarray:
        """Assign each row of X to the cluster of its closest converged seed."""
        check_is_fitted(self, "clusters_")
        try:
            X = check_array(X, dtype=np.float64)
        except ValueError as e:
            raise InvalidArgumentError(str(e)) from e
        return self.clusters_.predict(X)

from typing import Any, Iterator, Optional, Sequence, Union

import numpy as np

from modeseek.distances import Metric, resolve_metric
from modeseek.errors import DimensionMismatchError, InvalidArgumentError
from modeseek.neighbors import BoundedNeighborCollection


class KDTreeNode:
    """A node of a k-d tree. Points of the left subtree have coordinate `axis` lower or equal to the one of the node,
    points of the right subtree have it strictly greater."""

    __slots__ = ("position", "value", "axis", "index", "left", "right")

    def __init__(self, position: np.ndarray, value: Any = None, axis: int = 0, index: int = -1):
        self.position = position
        self.value = value
        self.axis = axis
        # Row of the point in the data the tree was built from; orders neighbors found at equal distance.
        self.index = index
        self.left: Optional["KDTreeNode"] = None
        self.right: Optional["KDTreeNode"] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def __repr__(self):
        return f"KDTreeNode(position={self.position.tolist()}, value={self.value!r}, axis={self.axis})"


def _build_nodes(points: np.ndarray, values: Sequence[Any]) -> Optional[KDTreeNode]:
    n, dimension = points.shape
    if n == 0:
        return None

    root = None
    # (row indices, depth, parent, attach to the left of the parent)
    stack = [(np.arange(n), 0, None, False)]
    while stack:
        indices, depth, parent, is_left = stack.pop()

        axis = depth % dimension
        order = np.argsort(points[indices, axis], kind="stable")
        indices = indices[order]
        coordinates = points[indices, axis]

        # Move the median to the end of its run of equal coordinates, so that duplicates all end up on the left.
        median = int(np.searchsorted(coordinates, coordinates[len(indices) // 2], side="right")) - 1

        row = int(indices[median])
        node = KDTreeNode(points[row], values[row], axis, row)
        if parent is None:
            root = node
        elif is_left:
            parent.left = node
        else:
            parent.right = node

        if median + 1 < len(indices):
            stack.append((indices[median + 1:], depth + 1, node, False))
        if median > 0:
            stack.append((indices[:median], depth + 1, node, True))

    return root


class KDTree:
    """A k-dimensional tree for exact radius and k-nearest neighbor queries.

    The tree is built once from a fixed set of points and is read only afterwards, so it can be queried concurrently
    from several threads without locking.

    Neighbors at equal distance from a query are reported in the order of their rows in the indexed data, as a
    brute force scan would find them.

    Parameters
    ----------
        dimension: int
            The dimension of the indexed points.

        distance: str or callable (default 'euclidean')
            The metric used for the queries, see `modeseek.distances.resolve_metric`.
    """

    def __init__(self, dimension: int, distance: Union[str, Metric] = "euclidean"):
        if dimension < 1:
            raise InvalidArgumentError(f"The dimension of a k-d tree should be positive, got {dimension}.")
        self.dimension = int(dimension)
        self.distance = resolve_metric(distance)
        self.root: Optional[KDTreeNode] = None
        self.count = 0

    @classmethod
    def from_data(
        cls,
        points,
        values: Optional[Sequence[Any]] = None,
        distance: Union[str, Metric] = "euclidean",
    ) -> "KDTree":
        """Build a balanced tree over the rows of points.

        Parameters
        ----------
            points: array, shape (n_samples, n_features)
                The points to index. They are copied, later changes to the array do not affect the tree.

            values: Optional sequence of length n_samples (default None)
                The values attached to the points. Defaults to the row indices of the points.

            distance: str or callable (default 'euclidean')
                The metric used for the queries.
        """
        points = np.array(points, dtype=np.float64)
        if points.ndim != 2:
            raise InvalidArgumentError(
                f"Expected a 2D array of shape (n_samples, n_features), got an array with shape {points.shape}."
            )
        if values is None:
            values = list(range(points.shape[0]))
        elif len(values) != points.shape[0]:
            raise InvalidArgumentError(
                f"Got {len(values)} values for {points.shape[0]} points, they should have the same length."
            )
        points.setflags(write=False)

        tree = cls(points.shape[1], distance)
        tree.root = _build_nodes(points, values)
        tree.count = points.shape[0]
        return tree

    def _check_position(self, position) -> np.ndarray:
        position = np.asarray(position, dtype=np.float64)
        if position.ndim != 1 or position.shape[0] != self.dimension:
            raise DimensionMismatchError(self.dimension, position.shape[-1] if position.ndim else 0, "query point")
        return position

    def _search(self, position: np.ndarray, neighbors: BoundedNeighborCollection, radius: Optional[float] = None):
        if self.root is None:
            return

        # Depth first traversal carrying a lower bound of the distance from the query to every point of a subtree.
        stack = [(self.root, 0.0)]
        while stack:
            node, lower_bound = stack.pop()

            if radius is not None:
                bound = radius
            elif neighbors.is_full:
                bound = neighbors.farthest.distance
            else:
                bound = np.inf
            if lower_bound > bound:
                continue

            distance = self.distance(position, node.position)
            if radius is None or distance <= radius:
                neighbors.try_add_ranked(node, distance, node.index)

            offset = position[node.axis] - node.position[node.axis]
            if offset <= 0:
                near, far = node.left, node.right
            else:
                near, far = node.right, node.left

            if far is not None:
                stack.append((far, max(lower_bound, abs(offset))))
            if near is not None:
                stack.append((near, lower_bound))

    def radius_query(self, position, radius: float) -> BoundedNeighborCollection:
        """All the indexed points within distance radius of position, sorted by ascending distance."""
        position = self._check_position(position)
        if radius < 0:
            raise InvalidArgumentError(f"The query radius cannot be negative, got {radius}.")

        neighbors = BoundedNeighborCollection()
        self._search(position, neighbors, radius=float(radius))
        return neighbors

    def k_nearest(self, position, k: int) -> BoundedNeighborCollection:
        """The k indexed points closest to position, sorted by ascending distance."""
        position = self._check_position(position)
        if k < 1:
            raise InvalidArgumentError(f"The number of neighbors should be positive, got {k}.")

        neighbors = BoundedNeighborCollection(capacity=k)
        self._search(position, neighbors)
        return neighbors

    def nearest(self, position) -> Optional[KDTreeNode]:
        """The indexed node closest to position, or None for an empty tree."""
        candidate = self.k_nearest(position, 1).nearest
        return None if candidate is None else candidate.node

    def depth(self) -> int:
        if self.root is None:
            return 0
        max_depth = 0
        stack = [(self.root, 1)]
        while stack:
            node, depth = stack.pop()
            max_depth = max(max_depth, depth)
            for child in (node.left, node.right):
                if child is not None:
                    stack.append((child, depth + 1))
        return max_depth

    def __iter__(self) -> Iterator[KDTreeNode]:
        """Iterate over the nodes in pre-order."""
        stack = [] if self.root is None else [self.root]
        while stack:
            node = stack.pop()
            yield node
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)

    def __len__(self) -> int:
        return self.count

    def __repr__(self):
        return f"KDTree(dimension={self.dimension}, count={self.count})"

from bisect import bisect_right
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional

import numpy as np

from modeseek.errors import InvalidArgumentError


@dataclass(frozen=True)
class NeighborCandidate:
    node: Any
    distance: float

    @property
    def position(self) -> np.ndarray:
        return self.node.position

    @property
    def value(self) -> Any:
        return self.node.value


class BoundedNeighborCollection:
    """An ordered collection of neighbor candidates with an optional maximum size.

    The candidates are kept sorted by ascending distance to the query. When a maximum size is set and the collection
    is full, a new candidate is only accepted if it is strictly closer than the current farthest candidate, which is
    then evicted. Candidates at equal distance keep the order in which they were added.

    Parameters
    ----------
        capacity: int (default 0)
            The maximum number of candidates. A value of 0 means that the collection has no upper limit.
    """

    def __init__(self, capacity: int = 0):
        if capacity < 0:
            raise InvalidArgumentError(
                f"The capacity of a neighbor collection cannot be negative, got {capacity}."
            )
        self.capacity = int(capacity)
        self._candidates: List[NeighborCandidate] = []
        self._distances: List[float] = []
        self._ranks: List[float] = []

    @property
    def has_maximum_size(self) -> bool:
        return self.capacity > 0

    @property
    def is_full(self) -> bool:
        return self.has_maximum_size and len(self._candidates) >= self.capacity

    @property
    def nearest(self) -> Optional[NeighborCandidate]:
        return self._candidates[0] if self._candidates else None

    @property
    def farthest(self) -> Optional[NeighborCandidate]:
        return self._candidates[-1] if self._candidates else None

    def try_add(self, node: Any, distance: float) -> bool:
        """Attempt to add a node at a given distance.

        Returns
        -------
            True if the node has been added, False if the collection is full and the node is not closer than the
            farthest candidate.
        """
        distance = float(distance)
        if self.is_full:
            if distance >= self._distances[-1]:
                return False
            self._pop_farthest()

        self._insert(NeighborCandidate(node, distance))
        return True

    def try_add_ranked(self, node: Any, distance: float, rank: int) -> bool:
        """Attempt to add a node, ordering candidates at equal distance by ascending rank.

        A full collection also evicts its farthest candidate for a node at the same distance but with a lower rank,
        so the kept candidates are the first ones of a scan in rank order whatever the order of the calls.
        """
        distance = float(distance)
        if self.is_full:
            if (distance, rank) >= (self._distances[-1], self._ranks[-1]):
                return False
            self._pop_farthest()

        i = bisect_right(self._distances, distance)
        while i > 0 and self._distances[i - 1] == distance and self._ranks[i - 1] > rank:
            i -= 1
        self._distances.insert(i, distance)
        self._ranks.insert(i, rank)
        self._candidates.insert(i, NeighborCandidate(node, distance))
        return True

    def _pop_farthest(self):
        self._candidates.pop()
        self._distances.pop()
        self._ranks.pop()

    def add(self, candidate: NeighborCandidate):
        """Insert a candidate at its sorted position, ignoring the maximum size."""
        self._insert(candidate)

    def _insert(self, candidate: NeighborCandidate):
        i = bisect_right(self._distances, candidate.distance)
        self._distances.insert(i, candidate.distance)
        # Unranked candidates sort after every ranked one at the same distance.
        self._ranks.insert(i, float("inf"))
        self._candidates.insert(i, candidate)

    def remove(self, candidate: NeighborCandidate) -> bool:
        try:
            i = self._candidates.index(candidate)
        except ValueError:
            return False
        del self._candidates[i]
        del self._distances[i]
        del self._ranks[i]
        return True

    def clear(self):
        self._candidates.clear()
        self._distances.clear()
        self._ranks.clear()

    def nodes(self) -> list:
        return [candidate.node for candidate in self._candidates]

    def values(self) -> list:
        return [candidate.node.value for candidate in self._candidates]

    def distances(self) -> np.ndarray:
        return np.array(self._distances, dtype=np.float64)

    def positions(self) -> np.ndarray:
        if not self._candidates:
            return np.empty((0, 0), dtype=np.float64)
        return np.stack([candidate.node.position for candidate in self._candidates])

    def __len__(self) -> int:
        return len(self._candidates)

    def __bool__(self) -> bool:
        return bool(self._candidates)

    def __getitem__(self, index):
        return self._candidates[index]

    def __iter__(self) -> Iterator[NeighborCandidate]:
        return iter(self._candidates)

    def __contains__(self, candidate) -> bool:
        return candidate in self._candidates

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(capacity={self.capacity}, size={len(self)}, "
            f"nearest={self._distances[0] if self._distances else None}, "
            f"farthest={self._distances[-1] if self._distances else None})"
        )

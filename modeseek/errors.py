from typing import List, Tuple


class InvalidArgumentError(ValueError):
    """Raised when an argument is outside of the domain accepted by an index or by the clustering engine."""


class DimensionMismatchError(InvalidArgumentError):
    """Raised when the dimension of a point differs from the dimension an index or an estimator was set up for."""

    def __init__(self, expected: int, actual: int, what: str = "point"):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"The {what} has dimension {actual}, but dimension {expected} was expected."
        )


class SeedIterationError(RuntimeError):
    """Raised after all seed trajectories have finished when at least one of them failed.

    Attributes
    ----------
        failures: list of (seed_index, exception) pairs, ordered by seed index.
    """

    def __init__(self, failures: List[Tuple[int, BaseException]]):
        self.failures = failures
        indices = ", ".join(str(index) for index, _ in failures[:10])
        if len(failures) > 10:
            indices += ", ..."
        first_index, first_error = failures[0]
        super().__init__(
            f"{len(failures)} seed trajectories failed (seeds {indices}). "
            f"First failure on seed {first_index}: {first_error!r}"
        )

from modeseek.clusters import MeanShiftCluster, MeanShiftClusters
from modeseek.errors import DimensionMismatchError, InvalidArgumentError, SeedIterationError
from modeseek.kdtree import KDTree, KDTreeNode
from modeseek.kernels import EpanechnikovKernel, GaussianKernel, UniformKernel, get_kernel
from modeseek.mean_shift import MeanShift
from modeseek.neighbors import BoundedNeighborCollection, NeighborCandidate

__version__ = "0.1.0"

__all__ = [
    "BoundedNeighborCollection",
    "DimensionMismatchError",
    "EpanechnikovKernel",
    "GaussianKernel",
    "InvalidArgumentError",
    "KDTree",
    "KDTreeNode",
    "MeanShift",
    "MeanShiftCluster",
    "MeanShiftClusters",
    "NeighborCandidate",
    "SeedIterationError",
    "UniformKernel",
    "get_kernel",
]

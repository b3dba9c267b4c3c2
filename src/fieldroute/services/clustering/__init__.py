"""Location clustering services."""

from .base import ClusteringResult, ClusteringStrategy
from .kmeans import KMeansClustering, cluster_locations

__all__ = [
    "ClusteringResult",
    "ClusteringStrategy",
    "KMeansClustering",
    "cluster_locations",
]

"""Base classes for clustering strategy implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np

from ...models.domain import Cluster, Location


class ClusteringStrategy(ABC):
    """Contract for strategies that split locations into work packages."""

    @abstractmethod
    def generate(
        self,
        *,
        locations: Sequence[Location],
        target_clusters: int,
        rng: np.random.Generator | None = None,
    ) -> "ClusteringResult":
        raise NotImplementedError


class ClusteringResult:
    """Container for the non-empty clusters of a run."""

    def __init__(self, clusters: list[Cluster], metadata: dict | None = None):
        self.clusters = clusters
        self.metadata = metadata or {}

    def counts(self) -> dict[int, int]:
        return {cluster.cluster_id: len(cluster) for cluster in self.clusters}

    def cluster_for_location(self, location_id: str) -> int | None:
        for cluster in self.clusters:
            if any(loc.location_id == location_id for loc in cluster.locations):
                return cluster.cluster_id
        return None

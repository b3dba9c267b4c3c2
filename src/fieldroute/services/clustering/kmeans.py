"""Geographic k-means clustering of service locations."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from ...config import settings
from ...models.domain import Cluster, Location
from ..geospatial import haversine_miles_matrix
from .base import ClusteringResult, ClusteringStrategy

logger = logging.getLogger(__name__)


class KMeansClustering(ClusteringStrategy):
    """Lloyd's algorithm on raw coordinates with great-circle distances.

    Features:
    - Centroids seeded from distinct input locations (sampled without replacement)
    - Membership decided by haversine distance, centroids updated as plain means
    - Clusters left empty after reassignment are dropped, so fewer than
      ``target_clusters`` may come back
    """

    def __init__(
        self,
        *,
        max_iterations: int | None = None,
        convergence_threshold: float | None = None,
        random_state: int | None = None,
        earth_radius: float | None = None,
    ) -> None:
        self.max_iterations = max_iterations if max_iterations is not None else settings.max_iterations
        self.convergence_threshold = (
            convergence_threshold if convergence_threshold is not None else settings.convergence_threshold
        )
        self.random_state = random_state if random_state is not None else settings.random_seed
        self.earth_radius = earth_radius if earth_radius is not None else settings.earth_radius_miles

    def _initial_centers(self, coordinates: np.ndarray, target_clusters: int, rng: np.random.Generator) -> np.ndarray:
        seeds = rng.choice(len(coordinates), size=target_clusters, replace=False)
        return coordinates[seeds].copy()

    def generate(
        self,
        *,
        locations: Sequence[Location],
        target_clusters: int,
        rng: np.random.Generator | None = None,
    ) -> ClusteringResult:
        if target_clusters < 1:
            raise ValueError(f"target_clusters must be >= 1, got {target_clusters}")

        if not locations:
            return ClusteringResult([], metadata={"strategy": "kmeans", "iterations": 0})

        if len(locations) <= target_clusters:
            clusters = [Cluster(cluster_id=idx, locations=[loc]) for idx, loc in enumerate(locations)]
            return ClusteringResult(
                clusters,
                metadata={"strategy": "singleton", "iterations": 0, "converged": True},
            )

        generator = rng if rng is not None else np.random.default_rng(self.random_state)
        coordinates = np.array([[loc.latitude, loc.longitude] for loc in locations], dtype=float)
        centers = self._initial_centers(coordinates, target_clusters, generator)

        labels = np.zeros(len(locations), dtype=int)
        iterations = 0
        converged = False
        while iterations < self.max_iterations:
            distances = haversine_miles_matrix(coordinates, centers, radius=self.earth_radius)
            labels = np.argmin(distances, axis=1)

            converged = True
            for idx in range(target_clusters):
                members = labels == idx
                if not members.any():
                    continue
                updated = coordinates[members].mean(axis=0)
                if np.any(np.abs(centers[idx] - updated) > self.convergence_threshold):
                    converged = False
                centers[idx] = updated

            iterations += 1
            if converged:
                break

        clusters: list[Cluster] = []
        for idx in range(target_clusters):
            member_indices = np.flatnonzero(labels == idx)
            if member_indices.size == 0:
                logger.debug("Dropping empty cluster %d after %d iterations", idx, iterations)
                continue
            clusters.append(
                Cluster(
                    cluster_id=len(clusters),
                    locations=[locations[i] for i in member_indices],
                )
            )

        metadata = {
            "strategy": "kmeans",
            "iterations": iterations,
            "converged": converged,
            "requested_clusters": target_clusters,
            "dropped_clusters": target_clusters - len(clusters),
            "centers": [[float(lat), float(lon)] for lat, lon in centers],
        }
        return ClusteringResult(clusters, metadata=metadata)


def cluster_locations(
    locations: Sequence[Location],
    target_clusters: int,
    *,
    rng: np.random.Generator | None = None,
    random_state: int | None = None,
) -> list[Cluster]:
    """Partition locations into at most ``target_clusters`` non-empty groups."""
    strategy = KMeansClustering(random_state=random_state)
    return strategy.generate(locations=locations, target_clusters=target_clusters, rng=rng).clusters

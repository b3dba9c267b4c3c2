"""Cluster-to-worker assignment with a soft load-balancing penalty."""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Sequence

from ...config import settings
from ...models.domain import Cluster, ClusterAssignment, Worker
from ..geospatial import haversine_miles

logger = logging.getLogger(__name__)


def eligible_workers(workers: Sequence[Worker]) -> list[Worker]:
    return [worker for worker in workers if worker.is_online]


def _nearest_worker(
    centroid: tuple[float, float],
    workers: Sequence[Worker],
    counts: Dict[str, int],
    penalty: float,
) -> tuple[Optional[Worker], float]:
    best: Optional[Worker] = None
    best_score = math.inf
    best_distance = math.inf
    for worker in workers:
        distance = haversine_miles(centroid[0], centroid[1], worker.latitude, worker.longitude)
        score = distance + penalty * counts.get(worker.worker_id, 0)
        if score < best_score:
            best, best_score, best_distance = worker, score, distance
    return best, best_distance


def assign_clusters(
    clusters: Sequence[Cluster],
    workers: Sequence[Worker],
    *,
    penalty: float | None = None,
    assignment_counts: Dict[str, int] | None = None,
) -> List[ClusterAssignment]:
    """Give each cluster to the online worker with the lowest penalized distance.

    The score for a worker is its distance to the cluster centroid plus
    ``penalty`` miles for every cluster it already holds. The penalty is
    additive, not a cap, so a clearly nearer worker can still collect several
    clusters. ``assignment_counts`` is updated in place when supplied.
    """
    penalty = settings.assignment_penalty if penalty is None else penalty
    if penalty < 0:
        raise ValueError("penalty must be >= 0")

    online = eligible_workers(workers)
    counts: Dict[str, int] = assignment_counts if assignment_counts is not None else {}
    results: list[ClusterAssignment] = []

    if not online:
        logger.warning("No online workers available; %d clusters left unassigned", len(clusters))
        return [
            ClusterAssignment(cluster=cluster, worker_id=None, distance_miles=math.inf)
            for cluster in clusters
            if cluster.locations
        ]

    for cluster in clusters:
        if not cluster.locations:
            continue

        worker, distance = _nearest_worker(cluster.centroid, online, counts, penalty)
        if worker is None:
            # only reachable when every score is NaN
            results.append(ClusterAssignment(cluster=cluster, worker_id=None, distance_miles=math.inf))
            continue

        counts[worker.worker_id] = counts.get(worker.worker_id, 0) + 1
        results.append(ClusterAssignment(cluster=cluster, worker_id=worker.worker_id, distance_miles=distance))

    return results

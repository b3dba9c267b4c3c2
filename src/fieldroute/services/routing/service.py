"""Routing orchestration service."""

from __future__ import annotations

import logging
import math
import time
from typing import Sequence

import numpy as np

from ...config import settings
from ...models.domain import (
    Assignment,
    Cluster,
    ClusterAssignment,
    Location,
    RoutePlan,
    RoutePreview,
    Worker,
)
from ..assignment.service import assign_clusters, eligible_workers
from ..clustering.base import ClusteringStrategy
from ..clustering.kmeans import KMeansClustering
from .sequence import order_route, total_route_distance

logger = logging.getLogger(__name__)


def cluster_count(location_count: int, worker_count: int, stops_per_cluster: int | None = None) -> int:
    """Number of work packages to aim for: one per worker, about N stops each.

    Returns 0 when there is nothing to plan (no locations or no workers).
    """
    stops = settings.stops_per_cluster if stops_per_cluster is None else stops_per_cluster
    if stops < 1:
        raise ValueError(f"stops_per_cluster must be >= 1, got {stops}")
    if location_count <= 0 or worker_count <= 0:
        return 0
    return max(1, min(worker_count, math.ceil(location_count / stops)))


def _flatten(cluster_assignment: ClusterAssignment, ordered: Sequence[Location]) -> list[Assignment]:
    return [
        Assignment(
            location_id=location.location_id,
            worker_id=cluster_assignment.worker_id,
            visit_order=order,
            cluster_id=cluster_assignment.cluster.cluster_id,
        )
        for order, location in enumerate(ordered, start=1)
    ]


def _solve(
    locations: Sequence[Location],
    online: Sequence[Worker],
    *,
    stops_per_cluster: int | None,
    penalty: float | None,
    rng: np.random.Generator | None,
    clusterer: ClusteringStrategy | None,
) -> tuple[list[ClusterAssignment], dict[int, list[Location]], dict]:
    target = cluster_count(len(locations), len(online), stops_per_cluster)
    if target < 1:
        raise ValueError(
            f"computed cluster count {target} for {len(locations)} locations and {len(online)} workers"
        )

    strategy = clusterer or KMeansClustering()
    clustering = strategy.generate(locations=locations, target_clusters=target, rng=rng)
    cluster_assignments = assign_clusters(clustering.clusters, online, penalty=penalty)

    positions = {worker.worker_id: worker.position for worker in online}
    ordered_routes: dict[int, list[Location]] = {}
    for cluster_assignment in cluster_assignments:
        if not cluster_assignment.is_assigned:
            continue
        start = positions[cluster_assignment.worker_id]
        ordered_routes[cluster_assignment.cluster.cluster_id] = order_route(
            cluster_assignment.cluster.locations, start
        )

    metadata = {"target_clusters": target, **clustering.metadata}
    return cluster_assignments, ordered_routes, metadata


def optimize_routes(
    locations: Sequence[Location],
    workers: Sequence[Worker],
    *,
    stops_per_cluster: int | None = None,
    penalty: float | None = None,
    rng: np.random.Generator | None = None,
    clusterer: ClusteringStrategy | None = None,
) -> list[Assignment]:
    """Cluster locations, hand clusters to workers and order each route.

    Returns a flat list of assignment records. Clusters that could not be
    matched to a worker contribute nothing; use ``plan_routes`` to see them.
    """
    online = eligible_workers(workers)
    if not locations or not online:
        logger.warning(
            "Cannot optimize routes: %d locations, %d online workers", len(locations), len(online)
        )
        return []

    cluster_assignments, ordered_routes, _ = _solve(
        locations,
        online,
        stops_per_cluster=stops_per_cluster,
        penalty=penalty,
        rng=rng,
        clusterer=clusterer,
    )

    assignments: list[Assignment] = []
    for cluster_assignment in cluster_assignments:
        ordered = ordered_routes.get(cluster_assignment.cluster.cluster_id)
        if ordered is None:
            continue
        assignments.extend(_flatten(cluster_assignment, ordered))
    return assignments


def _build_previews(
    cluster_assignments: Sequence[ClusterAssignment],
    ordered_routes: dict[int, list[Location]],
    online: Sequence[Worker],
) -> list[RoutePreview]:
    by_id = {worker.worker_id: worker for worker in online}
    previews: dict[str, RoutePreview] = {}
    for cluster_assignment in cluster_assignments:
        if not cluster_assignment.is_assigned:
            continue
        worker = by_id[cluster_assignment.worker_id]
        ordered = ordered_routes[cluster_assignment.cluster.cluster_id]
        preview = previews.get(worker.worker_id)
        if preview is None:
            preview = RoutePreview(
                worker_id=worker.worker_id,
                worker_name=worker.name,
                stop_count=0,
                location_ids=[],
                total_distance_miles=0.0,
            )
            previews[worker.worker_id] = preview
        preview.stop_count += len(ordered)
        preview.location_ids.extend(loc.location_id for loc in ordered)
        preview.total_distance_miles += total_route_distance(ordered, start=worker.position)
    return list(previews.values())


def plan_routes(
    locations: Sequence[Location],
    workers: Sequence[Worker],
    *,
    stops_per_cluster: int | None = None,
    penalty: float | None = None,
    rng: np.random.Generator | None = None,
    clusterer: ClusteringStrategy | None = None,
) -> RoutePlan:
    """Caller-facing wrapper around the optimizer that keeps unassigned work visible."""
    started = time.perf_counter()
    online = eligible_workers(workers)
    metadata: dict = {
        "location_count": len(locations),
        "worker_count": len(workers),
        "online_worker_count": len(online),
    }

    if not locations:
        metadata.update({"status": "empty", "duration_ms": 0.0})
        return RoutePlan(assignments=[], metadata=metadata)

    if not online:
        logger.warning("No workers available; %d locations left unassigned", len(locations))
        metadata.update(
            {
                "status": "no_workers",
                "duration_ms": round((time.perf_counter() - started) * 1000, 3),
            }
        )
        return RoutePlan(
            assignments=[],
            unassigned_clusters=[Cluster(cluster_id=0, locations=list(locations))],
            metadata=metadata,
        )

    cluster_assignments, ordered_routes, solve_metadata = _solve(
        locations,
        online,
        stops_per_cluster=stops_per_cluster,
        penalty=penalty,
        rng=rng,
        clusterer=clusterer,
    )

    assignments: list[Assignment] = []
    unassigned: list[Cluster] = []
    for cluster_assignment in cluster_assignments:
        ordered = ordered_routes.get(cluster_assignment.cluster.cluster_id)
        if ordered is None:
            unassigned.append(cluster_assignment.cluster)
            continue
        assignments.extend(_flatten(cluster_assignment, ordered))

    previews = _build_previews(cluster_assignments, ordered_routes, online)
    metadata.update(solve_metadata)
    metadata.update(
        {
            "status": "partial" if unassigned else "ok",
            "cluster_count": len(cluster_assignments),
            "assigned_count": len(assignments),
            "cluster_distances_miles": {
                str(ca.cluster.cluster_id): ca.distance_miles for ca in cluster_assignments if ca.is_assigned
            },
            "duration_ms": round((time.perf_counter() - started) * 1000, 3),
        }
    )
    logger.info(
        "Planned %d stops across %d clusters for %d workers (%d unassigned)",
        len(assignments),
        len(cluster_assignments),
        len(previews),
        sum(len(cluster) for cluster in unassigned),
    )
    return RoutePlan(
        assignments=assignments,
        unassigned_clusters=unassigned,
        previews=previews,
        metadata=metadata,
    )

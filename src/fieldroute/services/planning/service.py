"""Request-level planning: runs the optimizer and handles outputs."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from ...data.repository import load_locations, load_online_workers
from ...models.domain import Cluster, Location, RoutePlan, Worker
from ...persistence.database import save_assignments_to_database
from ...persistence.filesystem import FileStorage
from ...schemas.optimization import (
    AssignmentModel,
    DirectoryOptimizationRequest,
    OptimizationOptions,
    OptimizationRequest,
    OptimizationResponse,
    RoutePreviewModel,
    UnassignedClusterModel,
)
from ..outputs.formatter import assignments_to_csv, cluster_overlays, route_plan_to_json
from ..routing.service import plan_routes

logger = logging.getLogger(__name__)


def _run_plan(
    locations: Sequence[Location],
    workers: Sequence[Worker],
    options: OptimizationOptions,
) -> RoutePlan:
    rng = np.random.default_rng(options.seed) if options.seed is not None else None
    plan = plan_routes(
        locations,
        workers,
        stops_per_cluster=options.stops_per_cluster,
        penalty=options.assignment_penalty,
        rng=rng,
    )
    plan.metadata["seed"] = options.seed

    if options.include_overlays:
        by_id = {loc.location_id: loc for loc in locations}
        grouped: dict[int, list[Location]] = {}
        for assignment in plan.assignments:
            grouped.setdefault(assignment.cluster_id, []).append(by_id[assignment.location_id])
        clusters = [Cluster(cluster_id=cid, locations=locs) for cid, locs in grouped.items()]
        plan.metadata["map_overlays"] = {
            "clusters": cluster_overlays(clusters),
            "unassigned": cluster_overlays(plan.unassigned_clusters, source="unassigned"),
        }
    return plan


def _persist_files(plan: RoutePlan) -> None:
    run_dir = FileStorage().save_plan(route_plan_to_json(plan), assignments_to_csv(plan))
    plan.metadata["output_dir"] = str(run_dir)


def _to_response(plan: RoutePlan, saved_count: int = 0) -> OptimizationResponse:
    payload = route_plan_to_json(plan)
    return OptimizationResponse(
        assignments=[AssignmentModel(**row) for row in payload["assignments"]],
        unassigned_location_ids=payload["unassigned_location_ids"],
        unassigned_count=payload["unassigned_count"],
        unassigned_clusters=[UnassignedClusterModel(**row) for row in payload["unassigned_clusters"]],
        previews=[RoutePreviewModel(**row) for row in payload["previews"]],
        metadata=payload["metadata"],
        saved_count=saved_count,
    )


def process_optimization_request(payload: OptimizationRequest) -> OptimizationResponse:
    locations = [item.to_domain() for item in payload.locations]
    workers = [item.to_domain() for item in payload.workers]

    ids = [loc.location_id for loc in locations]
    if len(set(ids)) != len(ids):
        raise ValueError("Location ids must be unique.")

    plan = _run_plan(locations, workers, payload)
    if payload.persist:
        _persist_files(plan)
    return _to_response(plan)


def process_directory_request(payload: DirectoryOptimizationRequest) -> OptimizationResponse:
    """Plan every open location against the online workers stored in the database."""
    locations = load_locations()
    workers = load_online_workers()
    plan = _run_plan(locations, workers, payload)

    saved = 0
    if payload.save and plan.assignments:
        try:
            saved = save_assignments_to_database(plan.assignments)
        except Exception as exc:
            logger.error(f"Failed to save assignments to database: {exc}")
            plan.metadata["save_error"] = str(exc)

    if payload.persist:
        _persist_files(plan)
    return _to_response(plan, saved_count=saved)

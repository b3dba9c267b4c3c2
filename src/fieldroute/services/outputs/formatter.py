"""Serializers for route plans."""

from __future__ import annotations

import csv
import io
import math
from dataclasses import asdict
from typing import Sequence

from ...models.domain import Cluster, RoutePlan
from ..geospatial import hull_outline


def _finite(value: float) -> float | None:
    return value if math.isfinite(value) else None


def cluster_overlays(clusters: Sequence[Cluster], *, source: str = "convex_hull") -> list[dict]:
    """Map polygons around each cluster's members."""
    overlays: list[dict] = []
    for cluster in clusters:
        points = [(loc.latitude, loc.longitude) for loc in cluster.locations]
        outline = hull_outline(points)
        if not outline:
            continue
        lat, lon = cluster.centroid
        overlays.append(
            {
                "cluster_id": cluster.cluster_id,
                "coordinates": outline,
                "centroid": [lat, lon],
                "source": source,
                "location_count": len(cluster),
            }
        )
    return overlays


def route_plan_to_json(plan: RoutePlan) -> dict:
    metadata = {
        key: ({k: _finite(v) for k, v in value.items()} if key == "cluster_distances_miles" else value)
        for key, value in plan.metadata.items()
    }
    return {
        "metadata": metadata,
        "assignments": [asdict(assignment) for assignment in plan.assignments],
        "unassigned_location_ids": plan.unassigned_location_ids,
        "unassigned_count": plan.unassigned_count,
        "unassigned_clusters": [
            {
                "cluster_id": cluster.cluster_id,
                "location_ids": [loc.location_id for loc in cluster.locations],
            }
            for cluster in plan.unassigned_clusters
        ],
        "previews": [asdict(preview) for preview in plan.previews],
    }


def assignments_to_csv(plan: RoutePlan) -> str:
    buffer = io.StringIO()
    fieldnames = ["cluster_id", "worker_id", "visit_order", "location_id"]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for assignment in plan.assignments:
        writer.writerow(asdict(assignment))
    for location_id in plan.unassigned_location_ids:
        writer.writerow({"cluster_id": "", "worker_id": "", "visit_order": "", "location_id": location_id})
    return buffer.getvalue()

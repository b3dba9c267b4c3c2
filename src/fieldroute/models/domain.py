"""Domain models for service locations, field workers and route assignments."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(slots=True, frozen=True)
class Location:
    """A service address from the location directory. Read-only for a run."""

    location_id: str
    latitude: float
    longitude: float
    label: str = ""
    customer_name: Optional[str] = None
    service_type: Optional[str] = None


@dataclass(slots=True, frozen=True)
class Worker:
    """A field worker's most recent known position from the presence feed."""

    worker_id: str
    latitude: float
    longitude: float
    is_online: bool = True
    name: Optional[str] = None

    @property
    def position(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(slots=True)
class Cluster:
    """Geographic work package produced within a single optimization run."""

    cluster_id: int
    locations: list[Location]

    @property
    def centroid(self) -> tuple[float, float]:
        lat = sum(loc.latitude for loc in self.locations) / len(self.locations)
        lon = sum(loc.longitude for loc in self.locations) / len(self.locations)
        return (lat, lon)

    def __len__(self) -> int:
        return len(self.locations)


@dataclass(slots=True)
class ClusterAssignment:
    cluster: Cluster
    worker_id: Optional[str]
    distance_miles: float

    @property
    def is_assigned(self) -> bool:
        return self.worker_id is not None


@dataclass(slots=True, frozen=True)
class Assignment:
    """Hand-off record for the persistence sink."""

    location_id: str
    worker_id: str
    visit_order: int
    cluster_id: int


@dataclass(slots=True)
class RoutePreview:
    worker_id: str
    worker_name: Optional[str]
    stop_count: int
    location_ids: list[str]
    total_distance_miles: float


@dataclass(slots=True)
class RoutePlan:
    assignments: list[Assignment]
    unassigned_clusters: list[Cluster] = field(default_factory=list)
    previews: list[RoutePreview] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)

    @property
    def unassigned_location_ids(self) -> list[str]:
        return [loc.location_id for cluster in self.unassigned_clusters for loc in cluster.locations]

    @property
    def unassigned_count(self) -> int:
        return sum(len(cluster) for cluster in self.unassigned_clusters)

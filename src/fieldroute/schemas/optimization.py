"""Route optimization request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.domain import Location, Worker


class LocationModel(BaseModel):
    id: str
    label: str = Field(default="", description="Street address or other human-readable label.")
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    customer_name: Optional[str] = None
    service_type: Optional[str] = None

    def to_domain(self) -> Location:
        return Location(
            location_id=self.id,
            latitude=self.latitude,
            longitude=self.longitude,
            label=self.label,
            customer_name=self.customer_name,
            service_type=self.service_type,
        )


class WorkerModel(BaseModel):
    id: str
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    is_online: bool = True
    name: Optional[str] = None

    def to_domain(self) -> Worker:
        return Worker(
            worker_id=self.id,
            latitude=self.latitude,
            longitude=self.longitude,
            is_online=self.is_online,
            name=self.name,
        )


class OptimizationOptions(BaseModel):
    stops_per_cluster: Optional[int] = Field(None, ge=1, description="Overrides the configured stops per cluster.")
    assignment_penalty: Optional[float] = Field(None, ge=0.0, description="Miles added per cluster already held.")
    seed: Optional[int] = Field(None, description="Seed for centroid initialization.")
    include_overlays: bool = Field(default=False, description="Attach cluster hull polygons to metadata.")
    persist: bool = Field(default=False, description="Whether to persist outputs to files.")


class OptimizationRequest(OptimizationOptions):
    locations: List[LocationModel]
    workers: List[WorkerModel]


class DirectoryOptimizationRequest(OptimizationOptions):
    save: bool = Field(default=True, description="Insert the resulting assignments into the database.")


class AssignmentModel(BaseModel):
    location_id: str
    worker_id: str
    visit_order: int
    cluster_id: int


class UnassignedClusterModel(BaseModel):
    cluster_id: int
    location_ids: List[str]


class RoutePreviewModel(BaseModel):
    worker_id: str
    worker_name: Optional[str] = None
    stop_count: int
    location_ids: List[str]
    total_distance_miles: float


class OptimizationResponse(BaseModel):
    assignments: List[AssignmentModel]
    unassigned_location_ids: List[str]
    unassigned_count: int
    unassigned_clusters: List[UnassignedClusterModel]
    previews: List[RoutePreviewModel]
    metadata: dict
    saved_count: int = 0


class RouteDistanceRequest(BaseModel):
    locations: List[LocationModel]
    start: Optional[tuple[float, float]] = Field(
        default=None, description="Optional (lat, lon) to measure the first leg from."
    )

    @field_validator("start")
    @classmethod
    def validate_start(cls, value: Optional[tuple[float, float]]) -> Optional[tuple[float, float]]:
        if value is None:
            return value
        lat, lon = value
        if not -90.0 <= lat <= 90.0:
            raise ValueError("start latitude must be between -90 and 90")
        if not -180.0 <= lon <= 180.0:
            raise ValueError("start longitude must be between -180 and 180")
        return value


class RouteDistanceResponse(BaseModel):
    stop_count: int
    total_distance_miles: float

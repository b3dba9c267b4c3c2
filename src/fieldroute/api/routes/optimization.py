"""Route optimization endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.optimization import (
    DirectoryOptimizationRequest,
    OptimizationRequest,
    OptimizationResponse,
    RouteDistanceRequest,
    RouteDistanceResponse,
)
from ...services.planning.service import process_directory_request, process_optimization_request
from ...services.routing.sequence import total_route_distance

router = APIRouter(prefix="/optimize", tags=["optimization"])
logger = logging.getLogger(__name__)


@router.post("", response_model=OptimizationResponse, status_code=status.HTTP_200_OK)
def optimize(payload: OptimizationRequest) -> OptimizationResponse:
    try:
        return process_optimization_request(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error optimizing routes: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize routes: {str(exc)}",
        ) from exc


@router.post("/from-directory", response_model=OptimizationResponse, status_code=status.HTTP_200_OK)
def optimize_from_directory(payload: DirectoryOptimizationRequest) -> OptimizationResponse:
    """Plan all open locations against the workers currently online."""
    try:
        return process_directory_request(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error optimizing routes from directory: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize routes: {str(exc)}",
        ) from exc


@router.post("/distance", response_model=RouteDistanceResponse, status_code=status.HTTP_200_OK)
def route_distance(payload: RouteDistanceRequest) -> RouteDistanceResponse:
    locations = [item.to_domain() for item in payload.locations]
    return RouteDistanceResponse(
        stop_count=len(locations),
        total_distance_miles=total_route_distance(locations, start=payload.start),
    )

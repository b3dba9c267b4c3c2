"""Database persistence for route assignments."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Sequence

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import Assignment

logger = logging.getLogger(__name__)


def assignment_records(assignments: Sequence[Assignment], *, optimized_at: datetime | None = None) -> list[dict[str, Any]]:
    """Rows for the assignment table, keyed by location."""
    stamp = (optimized_at or datetime.now(timezone.utc)).isoformat()
    return [
        {
            "house_id": assignment.location_id,
            "employee_id": assignment.worker_id,
            "status": "assigned",
            "route_order": assignment.visit_order,
            "cluster_id": assignment.cluster_id,
            "optimized_at": stamp,
        }
        for assignment in assignments
    ]


def save_assignments_to_database(assignments: Sequence[Assignment], *, client=None) -> int:
    """Insert assignment rows into Supabase.

    Returns:
        Number of rows written. 0 when the database is not configured or there is nothing to write.
    """
    supabase = client or get_supabase_client()
    if not supabase:
        logger.info("Supabase not configured - assignments will only be saved to files")
        return 0
    if not assignments:
        return 0

    rows = assignment_records(assignments)
    response = supabase.table(settings.assignments_table).insert(rows).execute()
    written = len(response.data or rows)
    logger.info(f"Saved {written} assignments to {settings.assignments_table}")
    return written

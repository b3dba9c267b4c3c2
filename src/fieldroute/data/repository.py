"""Data access helpers for the location directory and the worker-presence feed."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, Optional

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import Location, Worker

logger = logging.getLogger(__name__)

OPEN_ASSIGNMENT_STATUSES = ("pending", "assigned")


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(str(value).replace(",", ""))
    except ValueError as exc:
        raise ValueError(f"Unable to parse float from value '{value}'") from exc


def _require_client(client):
    client = client or get_supabase_client()
    if client is None:
        raise RuntimeError(
            "Supabase not configured. Set FIELDROUTE_SUPABASE_URL and FIELDROUTE_SUPABASE_KEY environment variables."
        )
    return client


def location_from_record(record: dict) -> Optional[Location]:
    lat = _coerce_float(record.get("latitude"))
    lon = _coerce_float(record.get("longitude"))
    if lat is None or lon is None:
        return None
    return Location(
        location_id=str(record["id"]),
        latitude=lat,
        longitude=lon,
        label=(record.get("address") or "").strip(),
        customer_name=record.get("customer_name"),
        service_type=record.get("service_type"),
    )


def worker_from_record(record: dict) -> Optional[Worker]:
    lat = _coerce_float(record.get("latitude"))
    lon = _coerce_float(record.get("longitude"))
    if lat is None or lon is None:
        return None
    return Worker(
        worker_id=str(record["employee_id"]),
        latitude=lat,
        longitude=lon,
        is_online=bool(record.get("is_online")),
        name=record.get("name"),
    )


def _open_assignment_ids(client) -> set[str]:
    response = (
        client.table(settings.assignments_table)
        .select("house_id")
        .in_("status", list(OPEN_ASSIGNMENT_STATUSES))
        .execute()
    )
    return {str(row["house_id"]) for row in (response.data or []) if row.get("house_id")}


def _parse(records: Iterable[dict], parser) -> list:
    parsed = []
    skipped = 0
    for record in records:
        item = parser(record)
        if item is None:
            skipped += 1
            continue
        parsed.append(item)
    if skipped:
        logger.info(f"Skipped {skipped} records without coordinates")
    return parsed


def load_locations(*, client=None, exclude_assigned: bool = True) -> tuple[Location, ...]:
    """Load service locations, skipping those already holding an open assignment."""
    client = _require_client(client)
    response = client.table(settings.locations_table).select("*").execute()
    locations = _parse(response.data or [], location_from_record)

    if exclude_assigned:
        taken = _open_assignment_ids(client)
        locations = [loc for loc in locations if loc.location_id not in taken]

    logger.info(f"Loaded {len(locations)} locations from {settings.locations_table}")
    return tuple(locations)


def _worker_names(client, worker_ids: list[str]) -> dict[str, str]:
    if not worker_ids:
        return {}
    response = (
        client.table(settings.profiles_table)
        .select("id, full_name, email")
        .in_("id", worker_ids)
        .execute()
    )
    names = {}
    for row in response.data or []:
        name = row.get("full_name") or row.get("email")
        if name:
            names[str(row["id"])] = name
    return names


def load_online_workers(*, client=None) -> tuple[Worker, ...]:
    """Load online workers and label them with their profile name (full name, else email)."""
    client = _require_client(client)
    response = client.table(settings.worker_presence_table).select("*").eq("is_online", True).execute()
    workers = _parse(response.data or [], worker_from_record)
    names = _worker_names(client, [worker.worker_id for worker in workers])
    workers = [
        replace(worker, name=names[worker.worker_id]) if worker.worker_id in names else worker
        for worker in workers
    ]
    logger.info(f"Loaded {len(workers)} online workers from {settings.worker_presence_table}")
    return tuple(workers)

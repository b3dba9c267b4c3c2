import numpy as np
import pytest

from src.fieldroute.data import repository


def test_load_locations_skips_open_assignments_and_missing_coordinates(fake_supabase):
    locations = repository.load_locations(client=fake_supabase)

    assert [loc.location_id for loc in locations] == ["H1", "H2"]
    assert locations[1].latitude == 40.02
    assert locations[0].label == "1 Elm St"


def test_load_locations_can_include_assigned(fake_supabase):
    locations = repository.load_locations(client=fake_supabase, exclude_assigned=False)
    assert [loc.location_id for loc in locations] == ["H1", "H2", "H3"]


def test_load_online_workers_only_returns_online(fake_supabase):
    workers = repository.load_online_workers(client=fake_supabase)

    assert [worker.worker_id for worker in workers] == ["E1"]
    assert workers[0].is_online is True
    assert workers[0].position == (40.0, -75.0)


def test_unparseable_coordinates_raise():
    with pytest.raises(ValueError):
        repository.location_from_record({"id": "X", "latitude": "north", "longitude": "1.0"})


def test_loaders_require_configured_database(monkeypatch):
    monkeypatch.setattr(repository, "get_supabase_client", lambda: None)

    with pytest.raises(RuntimeError):
        repository.load_locations()
    with pytest.raises(RuntimeError):
        repository.load_online_workers()


def test_online_workers_take_their_profile_name(fake_supabase):
    workers = repository.load_online_workers(client=fake_supabase)
    assert workers[0].name == "Jane Doe"


def test_profile_email_used_when_full_name_missing(fake_supabase):
    fake_supabase.tables["employee_locations"][1]["is_online"] = True

    workers = repository.load_online_workers(client=fake_supabase)

    assert {worker.worker_id: worker.name for worker in workers} == {"E1": "Jane Doe", "E2": "sam@example.com"}


def test_worker_without_profile_keeps_no_name(fake_supabase):
    fake_supabase.tables["profiles"] = []
    workers = repository.load_online_workers(client=fake_supabase)
    assert workers[0].name is None


def test_profile_name_reaches_route_preview(fake_supabase):
    from src.fieldroute.services.routing.service import plan_routes

    locations = repository.load_locations(client=fake_supabase)
    workers = repository.load_online_workers(client=fake_supabase)

    plan = plan_routes(locations, workers, rng=np.random.default_rng(0))

    assert [preview.worker_name for preview in plan.previews] == ["Jane Doe"]

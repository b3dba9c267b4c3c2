import math

import pytest

from src.fieldroute.models.domain import Cluster, Location, Worker
from src.fieldroute.services.assignment.service import assign_clusters, eligible_workers
from src.fieldroute.services.geospatial import haversine_miles


def _cluster(cid: int, *points: tuple[float, float]) -> Cluster:
    return Cluster(
        cluster_id=cid,
        locations=[Location(location_id=f"C{cid}-{i}", latitude=lat, longitude=lon) for i, (lat, lon) in enumerate(points)],
    )


def _worker(wid: str, lat: float, lon: float, online: bool = True) -> Worker:
    return Worker(worker_id=wid, latitude=lat, longitude=lon, is_online=online)


def test_cluster_goes_to_nearest_worker_with_raw_distance():
    cluster = _cluster(0, (40.0, -75.0), (40.02, -75.0))
    near = _worker("near", 40.01, -75.01)
    far = _worker("far", 41.0, -74.0)

    (result,) = assign_clusters([cluster], [far, near])

    assert result.worker_id == "near"
    assert result.distance_miles == pytest.approx(haversine_miles(40.01, -75.0, 40.01, -75.01))


def test_offline_workers_are_never_chosen():
    cluster = _cluster(0, (40.0, -75.0))
    offline = _worker("offline", 40.0, -75.0, online=False)
    online = _worker("online", 40.5, -75.0)

    (result,) = assign_clusters([cluster], [offline, online])

    assert result.worker_id == "online"
    assert eligible_workers([offline, online]) == [online]


def test_no_online_workers_leaves_every_cluster_unassigned():
    clusters = [_cluster(0, (40.0, -75.0)), _cluster(1, (41.0, -74.0))]

    results = assign_clusters(clusters, [_worker("w1", 40.0, -75.0, online=False)])

    assert [r.cluster.cluster_id for r in results] == [0, 1]
    assert all(r.worker_id is None for r in results)
    assert all(math.isinf(r.distance_miles) for r in results)
    assert not any(r.is_assigned for r in results)


def test_penalty_prefers_slightly_farther_idle_worker():
    first = _cluster(0, (40.0, -75.0))
    second = _cluster(1, (40.0, -75.0))
    busy = _worker("w1", 40.01, -75.0)
    idle = _worker("w2", 40.015, -75.0)

    results = assign_clusters([first, second], [busy, idle])

    assert [r.worker_id for r in results] == ["w1", "w2"]


def test_zero_penalty_lets_nearest_worker_take_everything():
    first = _cluster(0, (40.0, -75.0))
    second = _cluster(1, (40.0, -75.0))

    results = assign_clusters(
        [first, second],
        [_worker("w1", 40.01, -75.0), _worker("w2", 40.015, -75.0)],
        penalty=0.0,
    )

    assert [r.worker_id for r in results] == ["w1", "w1"]


def test_clearly_nearest_worker_can_hold_several_clusters():
    clusters = [_cluster(i, (40.0, -75.0)) for i in range(3)]
    results = assign_clusters(clusters, [_worker("close", 40.0, -75.0), _worker("distant", 40.5, -75.0)])
    assert [r.worker_id for r in results] == ["close", "close", "close"]


def test_running_tally_is_explicit_and_updated_in_place():
    counts = {"w1": 3}
    cluster = _cluster(0, (40.0, -75.0))

    (result,) = assign_clusters(
        [cluster],
        [_worker("w1", 40.01, -75.0), _worker("w2", 40.015, -75.0)],
        assignment_counts=counts,
    )

    assert result.worker_id == "w2"
    assert counts == {"w1": 3, "w2": 1}


def test_calls_do_not_share_state():
    clusters = [_cluster(0, (40.0, -75.0))]
    workers = [_worker("w1", 40.01, -75.0), _worker("w2", 40.015, -75.0)]

    assert assign_clusters(clusters, workers)[0].worker_id == "w1"
    assert assign_clusters(clusters, workers)[0].worker_id == "w1"


def test_empty_clusters_are_skipped():
    results = assign_clusters([Cluster(cluster_id=0, locations=[])], [_worker("w1", 40.0, -75.0)])
    assert results == []


def test_negative_penalty_is_rejected():
    with pytest.raises(ValueError):
        assign_clusters([_cluster(0, (40.0, -75.0))], [_worker("w1", 40.0, -75.0)], penalty=-1.0)

import numpy as np
import pytest

from src.fieldroute.models.domain import Location
from src.fieldroute.services.clustering import KMeansClustering, cluster_locations


def _location(lid: str, lat: float, lon: float) -> Location:
    return Location(location_id=lid, latitude=lat, longitude=lon, label=f"{lid} Main St")


def _two_neighbourhoods() -> tuple[list[Location], set[str], set[str]]:
    offsets = [(0.0, 0.0), (0.01, 0.0), (0.0, 0.01), (0.01, 0.01)]
    west = [_location(f"W{i}", 40.0 + dlat, -75.0 + dlon) for i, (dlat, dlon) in enumerate(offsets)]
    east = [_location(f"E{i}", 41.0 + dlat, -74.0 + dlon) for i, (dlat, dlon) in enumerate(offsets)]
    return west + east, {loc.location_id for loc in west}, {loc.location_id for loc in east}


def _ids(clusters) -> list[set[str]]:
    return [{loc.location_id for loc in cluster.locations} for cluster in clusters]


def test_empty_input_returns_no_clusters():
    assert cluster_locations([], 3) == []


def test_non_positive_cluster_count_fails_fast():
    with pytest.raises(ValueError):
        cluster_locations([_location("A", 40.0, -75.0)], 0)


def test_fewer_locations_than_clusters_gives_singletons_in_input_order():
    locations = [_location("A", 40.0, -75.0), _location("B", 40.1, -75.1), _location("C", 40.2, -75.2)]

    clusters = cluster_locations(locations, 5)

    assert [cluster.cluster_id for cluster in clusters] == [0, 1, 2]
    assert [cluster.locations for cluster in clusters] == [[loc] for loc in locations]


def test_equal_locations_and_clusters_gives_singletons():
    locations = [_location("A", 40.0, -75.0), _location("B", 40.1, -75.1)]
    clusters = cluster_locations(locations, 2)
    assert _ids(clusters) == [{"A"}, {"B"}]


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4, 5, 6, 7])
def test_separated_neighbourhoods_split_cleanly(seed):
    locations, west, east = _two_neighbourhoods()

    clusters = cluster_locations(locations, 2, rng=np.random.default_rng(seed))

    groups = _ids(clusters)
    assert len(groups) == 2
    assert west in groups
    assert east in groups


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_separated_neighbourhoods_converge_before_iteration_cap(seed):
    locations, _, _ = _two_neighbourhoods()

    result = KMeansClustering(max_iterations=50).generate(
        locations=locations, target_clusters=2, rng=np.random.default_rng(seed)
    )

    assert result.metadata["converged"] is True
    assert 1 <= result.metadata["iterations"] < 50
    assert result.metadata["dropped_clusters"] == 0


def test_every_location_lands_in_exactly_one_cluster():
    generator = np.random.default_rng(11)
    locations = [
        _location(f"L{i}", float(lat), float(lon))
        for i, (lat, lon) in enumerate(zip(generator.uniform(39.5, 40.5, 37), generator.uniform(-75.5, -74.5, 37)))
    ]

    clusters = cluster_locations(locations, 4, random_state=3)

    seen = [loc.location_id for cluster in clusters for loc in cluster.locations]
    assert sorted(seen) == sorted(loc.location_id for loc in locations)
    assert 1 <= len(clusters) <= 4
    assert all(cluster.locations for cluster in clusters)


def test_same_seed_reproduces_clusters():
    generator = np.random.default_rng(5)
    locations = [
        _location(f"L{i}", float(lat), float(lon))
        for i, (lat, lon) in enumerate(zip(generator.uniform(39.0, 41.0, 25), generator.uniform(-76.0, -74.0, 25)))
    ]

    first = cluster_locations(locations, 3, random_state=42)
    second = cluster_locations(locations, 3, random_state=42)

    assert _ids(first) == _ids(second)


def test_clusters_left_empty_are_dropped():
    locations = [_location(lid, 40.0, -75.0) for lid in ("A", "B", "C")]

    result = KMeansClustering(random_state=7).generate(locations=locations, target_clusters=2)

    assert len(result.clusters) == 1
    assert _ids(result.clusters) == [{"A", "B", "C"}]
    assert result.metadata["dropped_clusters"] == 1
    assert result.metadata["converged"] is True


def test_iteration_cap_is_respected():
    locations, _, _ = _two_neighbourhoods()

    result = KMeansClustering(max_iterations=1, random_state=0).generate(locations=locations, target_clusters=2)

    assert result.metadata["iterations"] == 1
    assert sum(len(cluster) for cluster in result.clusters) == len(locations)


def test_result_helpers_report_membership():
    locations, _, _ = _two_neighbourhoods()
    result = KMeansClustering(random_state=1).generate(locations=locations, target_clusters=2)

    counts = result.counts()
    assert sum(counts.values()) == len(locations)
    assert result.cluster_for_location("W0") in counts
    assert result.cluster_for_location("missing") is None

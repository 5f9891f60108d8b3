import math

import numpy as np
import pytest
import torch

from autocluster import GeoLocation, Location
from autocluster.base import metric_of


def test_construction_from_sequences_arrays_and_tensors():
    a = Location([1.0, 2.0])
    b = Location(np.array([1.0, 2.0]))
    c = Location(torch.tensor([1.0, 2.0], dtype=torch.float32))
    assert a == b == c
    assert a.dimension == 2
    assert a.tolist() == [1.0, 2.0]
    assert list(a) == [1.0, 2.0]
    assert a[1] == 2.0


@pytest.mark.parametrize("coords", [[], [[1.0, 2.0]]])
def test_rejects_empty_or_non_vector_coordinates(coords):
    with pytest.raises(ValueError):
        Location(coords)


def test_arithmetic():
    a = Location([1.0, 2.0])
    b = Location([3.0, 6.0])
    assert a + b == Location([4.0, 8.0])
    assert b - a == Location([2.0, 4.0])
    assert b / 2 == Location([1.5, 3.0])
    assert Location.zero(3) == Location([0.0, 0.0, 0.0])


def test_arithmetic_does_not_mutate_operands():
    a = Location([1.0, 1.0])
    b = Location([2.0, 2.0])
    _ = a + b
    assert a == Location([1.0, 1.0])


def test_division_by_zero_raises():
    with pytest.raises(ZeroDivisionError):
        Location([1.0]) / 0


def test_dimension_mismatch_raises():
    with pytest.raises(ValueError):
        Location([1.0]) + Location([1.0, 2.0])
    with pytest.raises(ValueError):
        Location([1.0]).distance(Location([1.0, 2.0]))


def test_euclidean_distance_is_a_metric():
    a = Location([0.0, 0.0])
    b = Location([3.0, 4.0])
    c = Location([6.0, 0.0])
    assert a.distance(b) == pytest.approx(5.0)
    assert a.distance(b) == pytest.approx(b.distance(a))
    assert a.distance(a) == 0.0
    assert a.distance(c) <= a.distance(b) + b.distance(c) + 1e-12


def test_pairwise_distances_match_scalar_distance(rng):
    locs = [Location(rng.normal(size=3)) for _ in range(7)]
    D = Location.pairwise_distances(Location.stack(locs), Location.stack(locs))
    assert D.shape == (7, 7)
    for i in range(7):
        for j in range(7):
            assert D[i, j].item() == pytest.approx(locs[i].distance(locs[j]), abs=1e-12)


def test_equal_locations_hash_equal():
    assert hash(Location([1.0, 2.0])) == hash(Location([1.0, 2.0]))
    assert len({Location([1.0, 2.0]), Location([1.0, 2.0]), Location([2.0, 1.0])}) == 2


def test_stack_checks_dimensions():
    assert Location.stack([]).shape == (0, 0)
    with pytest.raises(ValueError):
        Location.stack([Location([1.0]), Location([1.0, 2.0])])


def test_repr():
    assert repr(Location([1.0, 2.0])) == "Location([1.0, 2.0])"


def test_haversine_paris_london():
    paris = GeoLocation(48.8566, 2.3522)
    london = GeoLocation(51.5074, -0.1278)
    assert paris.distance(london) == pytest.approx(343.5, abs=1.5)
    assert london.distance(paris) == pytest.approx(paris.distance(london))


def test_haversine_quarter_meridian():
    equator = GeoLocation(0.0, 0.0)
    pole = GeoLocation(90.0, 0.0)
    assert equator.distance(pole) == pytest.approx(math.pi / 2 * 6371.0088, rel=1e-9)


def test_geolocation_keeps_its_type_through_arithmetic():
    a = GeoLocation(10.0, 20.0)
    b = GeoLocation(12.0, 22.0)
    mid = (a + b) / 2
    assert isinstance(mid, GeoLocation)
    assert mid.latitude == pytest.approx(11.0)
    assert mid.longitude == pytest.approx(21.0)
    assert isinstance(GeoLocation.zero(2), GeoLocation)


def test_metric_of():
    assert metric_of([]) is Location
    assert metric_of([Location([1.0])]) is Location
    assert metric_of([GeoLocation(0.0, 0.0)]) is GeoLocation

import pytest

from openingplacer.engine.placement import PlacementCalculator
from openingplacer.errors import BarrierResolutionError
from openingplacer.model.elements import Barrier, ElementKind, FailureKind, RayHit
from openingplacer.model.geometry_primitives import Point

from conftest import DictResolver


class LevellessResolver:
    def resolve(self, barrier_id, linked_id=None):
        return Barrier(id=barrier_id, linked_id=linked_id, level_id=None)


def test_position_along_direction(make_element):
    calc = PlacementCalculator(DictResolver({("A", None): "L1"}))
    spec = calc.compute(make_element(), RayHit(120.0, "A"))
    assert spec.position == Point(120.0, 0.0, 0.0)


def test_position_from_offset_start(make_element):
    calc = PlacementCalculator(DictResolver({("A", None): "L1"}))
    element = make_element(start=(10.0, 20.0, 30.0), direction=(0.0, 1.0, 0.0), length=500.0)
    spec = calc.compute(element, RayHit(50.0, "A"))
    assert spec.position == Point(10.0, 70.0, 30.0)


def test_square_footprint_sized_to_diameter(make_element):
    calc = PlacementCalculator(DictResolver({("A", None): "L1"}))
    spec = calc.compute(make_element(diameter=200.0), RayHit(10.0, "A"))
    assert spec.width == 200.0
    assert spec.height == 200.0


def test_clearance_added_on_both_sides(make_element):
    calc = PlacementCalculator(DictResolver({("A", None): "L1"}), clearance=25.0)
    spec = calc.compute(make_element(diameter=200.0), RayHit(10.0, "A"))
    assert spec.width == spec.height == 250.0


def test_negative_clearance_rejected():
    with pytest.raises(ValueError):
        PlacementCalculator(DictResolver({}), clearance=-1.0)


def test_level_and_context_fields(make_element):
    calc = PlacementCalculator(DictResolver({("W", 900): "L2"}))
    spec = calc.compute(make_element(id=7, kind=ElementKind.PIPE), RayHit(10.0, "W", 900))
    assert spec.level_id == "L2"
    assert spec.barrier_id == "W"
    assert spec.linked_id == 900
    assert spec.element_id == 7
    assert spec.element_kind == ElementKind.PIPE


def test_resolution_uses_barrier_and_link(make_element):
    resolver = DictResolver({("W", 900): "L2"})
    PlacementCalculator(resolver).compute(make_element(), RayHit(10.0, "W", 900))
    assert resolver.calls == [("W", 900)]


def test_unresolvable_barrier_raises_with_context(make_element):
    calc = PlacementCalculator(DictResolver({}))
    with pytest.raises(BarrierResolutionError) as exc_info:
        calc.compute(make_element(), RayHit(10.0, "stale", 3))
    assert exc_info.value.barrier_id == "stale"
    assert exc_info.value.linked_id == 3


def test_barrier_without_level_raises(make_element):
    with pytest.raises(BarrierResolutionError):
        PlacementCalculator(LevellessResolver()).compute(make_element(), RayHit(10.0, "A"))


def test_compute_all_skips_only_failing_hit(make_element):
    calc = PlacementCalculator(DictResolver({("A", None): "L1", ("C", None): "L1"}))
    specs, failures = calc.compute_all(
        make_element(id=5),
        [RayHit(10.0, "A"), RayHit(20.0, "B"), RayHit(30.0, "C")],
    )
    assert [s.barrier_id for s in specs] == ["A", "C"]
    assert len(failures) == 1
    assert failures[0].kind == FailureKind.BARRIER_RESOLUTION
    assert failures[0].element_id == 5
    assert failures[0].barrier_id == "B"


def test_host_parameter_names(make_element):
    spec = PlacementCalculator(DictResolver({("A", None): "L1"})).compute(
        make_element(diameter=160.0), RayHit(10.0, "A")
    )
    assert spec.parameters("Ширина", "Высота") == {"Ширина": 160.0, "Высота": 160.0}

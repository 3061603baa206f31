import pytest

from openingplacer.engine.ray_caster import RayCaster
from openingplacer.errors import BarrierResolutionError, GeometryQueryError
from openingplacer.model.elements import BarrierClass, RayHit, SearchContext
from openingplacer.model.geometry_primitives import Point, Vector

from conftest import StaticQuery


class ExplodingQuery:
    def cast(self, origin, direction, barrier_class, context, max_distance=None):
        raise RuntimeError("index corrupted")


class NegativeHitQuery:
    """Backend that also reports a hit behind the ray origin."""

    def cast(self, origin, direction, barrier_class, context, max_distance=None):
        return [RayHit(-5.0, "X"), RayHit(5.0, "Y")]


class ResolvingQuery:
    """Backend that fails with an engine error of the wrong kind."""

    def cast(self, origin, direction, barrier_class, context, max_distance=None):
        raise BarrierResolutionError("Barrier 12 not found.", barrier_id=12)


def test_cast_passes_filter_and_context(view_3d):
    origin = Point(0, 0, 0)
    query = StaticQuery({origin: [RayHit(10.0, "A")]})
    caster = RayCaster(query=query, context=view_3d)

    hits = caster.cast(origin, Vector(1, 0, 0))

    assert hits == [RayHit(10.0, "A")]
    _, direction, barrier_class, context, max_distance = query.calls[0]
    assert direction == Vector(1, 0, 0)
    assert barrier_class == BarrierClass.WALL
    assert context is view_3d
    assert max_distance is None


def test_zero_direction_is_degenerate(view_3d):
    caster = RayCaster(query=StaticQuery({}), context=view_3d)
    with pytest.raises(GeometryQueryError):
        caster.cast(Point(0, 0, 0), Vector(0, 0, 0))


def test_missing_context(view_3d):
    with pytest.raises(GeometryQueryError):
        RayCaster(query=StaticQuery({}), context=None).cast(Point(0, 0, 0), Vector(1, 0, 0))


def test_missing_index(view_3d):
    with pytest.raises(GeometryQueryError):
        RayCaster(query=None, context=view_3d).cast(Point(0, 0, 0), Vector(1, 0, 0))


def test_view_template_context_rejected():
    caster = RayCaster(query=StaticQuery({}), context=SearchContext(name="Template", is_template=True))
    with pytest.raises(GeometryQueryError):
        caster.cast(Point(0, 0, 0), Vector(1, 0, 0))


def test_negative_max_distance(view_3d):
    caster = RayCaster(query=StaticQuery({}), context=view_3d)
    with pytest.raises(GeometryQueryError):
        caster.cast(Point(0, 0, 0), Vector(1, 0, 0), max_distance=-1.0)


def test_backend_exception_wrapped(view_3d):
    caster = RayCaster(query=ExplodingQuery(), context=view_3d)
    with pytest.raises(GeometryQueryError, match="index corrupted"):
        caster.cast(Point(0, 0, 0), Vector(1, 0, 0))


def test_hits_behind_origin_dropped(view_3d):
    caster = RayCaster(query=NegativeHitQuery(), context=view_3d)
    assert caster.cast(Point(0, 0, 0), Vector(1, 0, 0)) == [RayHit(5.0, "Y")]


def test_cast_along_tags_element_id(make_element, view_3d):
    element = make_element(id=42, direction=(0.0, 0.0, 0.0))
    caster = RayCaster(query=StaticQuery({}), context=view_3d)
    with pytest.raises(GeometryQueryError) as exc_info:
        caster.cast_along(element)
    assert exc_info.value.element_id == 42


def test_cast_along_uses_start_and_direction(make_element, view_3d):
    element = make_element(start=(5.0, 6.0, 7.0), direction=(0.0, 1.0, 0.0))
    query = StaticQuery({Point(5.0, 6.0, 7.0): [RayHit(1.0, "A")]})
    hits = RayCaster(query=query, context=view_3d).cast_along(element)
    assert hits == [RayHit(1.0, "A")]
    assert query.calls[0][0] == Point(5.0, 6.0, 7.0)
    assert query.calls[0][1] == Vector(0.0, 1.0, 0.0)


def test_other_engine_errors_from_backend_wrapped(view_3d):
    caster = RayCaster(query=ResolvingQuery(), context=view_3d)
    with pytest.raises(GeometryQueryError, match="Barrier 12 not found"):
        caster.cast(Point(0, 0, 0), Vector(1, 0, 0))

"""Pytest fixtures and collaborator fakes for openingplacer tests."""
import os
import sys
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from openingplacer.config import SAMPLE_SCENE_PATH  # noqa: E402
from openingplacer.errors import BarrierResolutionError  # noqa: E402
from openingplacer.model.elements import (  # noqa: E402
    Barrier,
    BarrierClass,
    ElementKind,
    LinearElement,
    OpeningTemplate,
    RayHit,
    SearchContext,
)
from openingplacer.model.geometry_primitives import Point, Vector  # noqa: E402
from openingplacer.scene.model import Level, SceneModel  # noqa: E402
from openingplacer.scene.walls import WallSolid  # noqa: E402


class StaticQuery:
    """SpatialQuery returning canned hits keyed by ray origin."""

    def __init__(self, hits_by_origin: Dict[Point, Sequence[RayHit]]):
        self.hits_by_origin = hits_by_origin
        self.calls: List[Tuple[Point, Vector, BarrierClass, SearchContext, Optional[float]]] = []

    def cast(self, origin, direction, barrier_class, context, max_distance=None):
        self.calls.append((origin, direction, barrier_class, context, max_distance))
        return list(self.hits_by_origin.get(origin, []))


class DictResolver:
    """BarrierResolver backed by a {(barrier_id, linked_id): level_id} map."""

    def __init__(self, levels: Dict[Tuple[object, object], object]):
        self.levels = levels
        self.calls: List[Tuple[object, object]] = []

    def resolve(self, barrier_id, linked_id=None):
        self.calls.append((barrier_id, linked_id))
        key = (barrier_id, linked_id)
        if key not in self.levels:
            raise BarrierResolutionError(f"Barrier {barrier_id} not found.")
        return Barrier(id=barrier_id, linked_id=linked_id, level_id=self.levels[key])


class StaticProvider:
    def __init__(self, elements: Dict[ElementKind, Sequence[LinearElement]]):
        self.elements = elements

    def linear_elements(self, kind):
        return list(self.elements.get(kind, []))


@pytest.fixture
def make_element():
    """Factory for linear elements along +X unless told otherwise."""

    def _make(
        id=1,
        kind=ElementKind.DUCT,
        start=(0.0, 0.0, 0.0),
        direction=(1.0, 0.0, 0.0),
        length=300.0,
        diameter=200.0,
    ):
        return LinearElement(
            id=id,
            kind=kind,
            start=Point(*start),
            direction=Vector(*direction),
            length=length,
            diameter=diameter,
        )

    return _make


@pytest.fixture
def view_3d():
    return SearchContext(name="{3D}")


@pytest.fixture
def active_template():
    return OpeningTemplate(family_name="Отверстие", type_name="Прямоугольное", is_active=True)


@pytest.fixture
def two_wall_scene():
    """Two local walls crossing the X axis at x=1000 and x=3000, plus one linked wall at x=5000."""
    return SceneModel(
        title="Test_AR",
        source_title="Test_ОВ",
        levels=[Level(id=10, name="Level 1", elevation=0.0)],
        walls=[
            WallSolid(id=1, start=Point(1000, -2000), end=Point(1000, 2000), thickness=200,
                      height=3000, base_elevation=0.0, level_id=10),
            WallSolid(id=2, start=Point(3000, -2000), end=Point(3000, 2000), thickness=100,
                      height=3000, base_elevation=0.0, level_id=10),
            WallSolid(id=1, linked_id=77, start=Point(5000, -2000), end=Point(5000, 2000), thickness=300,
                      height=3000, base_elevation=0.0, level_id=10),
        ],
        ducts=[
            LinearElement.from_endpoints(100, ElementKind.DUCT, Point(0, 0, 1000), Point(4000, 0, 1000), 400.0),
        ],
        pipes=[
            LinearElement.from_endpoints(200, ElementKind.PIPE, Point(0, 500, 500), Point(6000, 500, 500), 50.0),
            LinearElement.from_endpoints(201, ElementKind.PIPE, Point(0, 900, 500), Point(800, 900, 500), 20.0),
        ],
        templates=[OpeningTemplate(family_name="Отверстие", is_active=True)],
        contexts=[SearchContext(name="{3D}")],
    )


@pytest.fixture
def sample_scene_path():
    return SAMPLE_SCENE_PATH

"""
Element Records
===============
Immutable snapshots of the host model's linear elements and barriers, plus the
records produced while placing openings (ray hits, opening specifications,
failures).

Every record is created fresh for a run; nothing here is cached between runs.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Dict, Optional, Tuple, TypeAlias, Union

from openingplacer.model.geometry_primitives import BoundingBox, LineSegment, Point, Vector

# Host element ids are scalars so they survive JSON and HDF5 round trips
ElementId: TypeAlias = Union[int, str]


class ElementKind(StrEnum):
    DUCT = "Duct"
    PIPE = "Pipe"


class BarrierClass(StrEnum):
    WALL = "Wall"


class FailureKind(StrEnum):
    GEOMETRY_QUERY = "GeometryQuery"
    BARRIER_RESOLUTION = "BarrierResolution"


def _point_from(data: Any) -> Point:
    if isinstance(data, dict):
        return Point(float(data["x"]), float(data["y"]), float(data.get("z", 0.0)))
    return Point.from_array(data)


def _vector_from(data: Any) -> Vector:
    if isinstance(data, dict):
        return Vector(float(data["x"]), float(data["y"]), float(data.get("z", 0.0)))
    return Vector.from_array(data)


@dataclass(frozen=True)
class LinearElement:
    """A duct or pipe modeled as a straight centerline with a diameter."""
    id: ElementId
    kind: ElementKind
    start: Point
    direction: Vector
    length: float
    diameter: float

    def __post_init__(self) -> None:
        if self.length < 0.0:
            raise ValueError(f"Element {self.id}: length must be non-negative, got {self.length}.")
        if self.diameter <= 0.0:
            raise ValueError(f"Element {self.id}: diameter must be positive, got {self.diameter}.")
        # a zero direction is reported per element by the ray caster
        if not (self.direction.is_unit() or self.direction.is_zero()):
            raise ValueError(f"Element {self.id}: direction must be a unit vector, got {self.direction}.")

    @property
    def segment(self) -> LineSegment:
        return LineSegment(start=self.start, direction=self.direction, length=self.length)

    @staticmethod
    def from_endpoints(id: ElementId, kind: ElementKind, start: Point, end: Point, diameter: float) -> LinearElement:
        seg = LineSegment.from_points(start, end)
        return LinearElement(
            id=id,
            kind=ElementKind(kind),
            start=seg.start,
            direction=seg.direction,
            length=seg.length,
            diameter=float(diameter),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "start": [self.start.x, self.start.y, self.start.z],
            "end": [self.segment.end.x, self.segment.end.y, self.segment.end.z],
            "diameter": self.diameter,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any], kind: Optional[ElementKind] = None) -> LinearElement:
        """
        Build an element either from "start"/"end" or from
        "start"/"direction"/"length". The second form keeps the direction as given.
        """
        element_kind = ElementKind(data.get("kind", kind))
        start = _point_from(data["start"])
        if "end" in data:
            return LinearElement.from_endpoints(
                id=data["id"],
                kind=element_kind,
                start=start,
                end=_point_from(data["end"]),
                diameter=float(data["diameter"]),
            )
        return LinearElement(
            id=data["id"],
            kind=element_kind,
            start=start,
            direction=_vector_from(data["direction"]),
            length=float(data["length"]),
            diameter=float(data["diameter"]),
        )


@dataclass(frozen=True)
class Barrier:
    """A wall a linear element may cross. linked_id is None for local barriers."""
    id: ElementId
    linked_id: Optional[ElementId]
    level_id: Optional[ElementId]


@dataclass(frozen=True)
class RayHit:
    """
    One intersection between a cast ray and a barrier surface.

    proximity is the distance from the ray origin along its direction.
    Backends may report hits behind the origin (negative proximity);
    RayCaster drops those, so the engine only ever sees proximity >= 0.
    """
    proximity: float
    barrier_id: ElementId
    linked_id: Optional[ElementId] = None

    @property
    def key(self) -> Tuple[ElementId, Optional[ElementId]]:
        return (self.barrier_id, self.linked_id)


# The hit kept to represent all hits on one barrier for a single cast
CanonicalHit: TypeAlias = RayHit


@dataclass(frozen=True)
class OpeningSpec:
    """Where and how big one opening must be. Materialization is up to the sink."""
    position: Point
    barrier_id: ElementId
    level_id: ElementId
    width: float
    height: float
    element_id: Optional[ElementId] = None
    element_kind: Optional[ElementKind] = None
    linked_id: Optional[ElementId] = None

    def parameters(self, width_name: str, height_name: str) -> Dict[str, float]:
        """Host parameter values to set on the created opening instance."""
        return {width_name: self.width, height_name: self.height}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": [self.position.x, self.position.y, self.position.z],
            "barrier_id": self.barrier_id,
            "level_id": self.level_id,
            "width": self.width,
            "height": self.height,
            "element_id": self.element_id,
            "element_kind": self.element_kind.value if self.element_kind else None,
            "linked_id": self.linked_id,
        }


@dataclass(frozen=True)
class PlacementFailure:
    """A crossing that could not be turned into an opening, with its context."""
    kind: FailureKind
    element_id: ElementId
    message: str
    barrier_id: Optional[ElementId] = None
    linked_id: Optional[ElementId] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "element_id": self.element_id,
            "message": self.message,
            "barrier_id": self.barrier_id,
            "linked_id": self.linked_id,
        }

    def __str__(self) -> str:
        where = f"element {self.element_id}"
        if self.barrier_id is not None:
            where += f", barrier {self.barrier_id}"
            if self.linked_id is not None:
                where += f" (link {self.linked_id})"
        return f"[{self.kind.value}] {where}: {self.message}"


@dataclass(frozen=True)
class OpeningTemplate:
    """The opening family type the host instantiates for every OpeningSpec."""
    family_name: str
    type_name: str = ""
    category: str = "GenericModel"
    is_active: bool = False

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> OpeningTemplate:
        return OpeningTemplate(
            family_name=data["family_name"],
            type_name=data.get("type_name", ""),
            category=data.get("category", "GenericModel"),
            is_active=bool(data.get("is_active", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "family_name": self.family_name,
            "type_name": self.type_name,
            "category": self.category,
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class SearchContext:
    """The 3D view bounding every ray search. View templates cannot be searched."""
    name: str
    is_template: bool = False
    section_box: Optional[BoundingBox] = None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> SearchContext:
        box = data.get("section_box")
        return SearchContext(
            name=data["name"],
            is_template=bool(data.get("is_template", False)),
            section_box=BoundingBox(_point_from(box["min"]), _point_from(box["max"])) if box else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"name": self.name, "is_template": self.is_template}
        if self.section_box is not None:
            b = self.section_box
            d["section_box"] = {
                "min": [b.min.x, b.min.y, b.min.z],
                "max": [b.max.x, b.max.y, b.max.z],
            }
        return d

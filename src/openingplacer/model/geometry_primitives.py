"""
Geometric Primitives for ray casting and opening placement.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence, Union, TYPE_CHECKING
import numpy as np
import math

if TYPE_CHECKING:
    import numpy.typing as npt

# Tolerance for parameter range checks along a segment
SEGMENT_EPS: float = 1e-9


@dataclass(frozen=True)
class Vector:
    """
    A vector in 3D space representing direction and magnitude.
    """
    x: float
    y: float
    z: float = 0.0

    def __add__(self, other: Vector) -> Vector:
        return Vector(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector) -> Vector:
        return Vector(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector:
        return Vector(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vector:
        if scalar == 0.0: raise ZeroDivisionError
        return Vector(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> Vector:
        return Vector(-self.x, -self.y, -self.z)

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    def normalize(self) -> Vector:
        mag = self.magnitude
        if mag == 0.0: return Vector(0.0, 0.0, 0.0)
        return self / mag

    def is_zero(self, eps: float = 1e-9) -> bool:
        return self.magnitude <= eps

    def is_unit(self, eps: float = 1e-6) -> bool:
        return abs(self.magnitude - 1.0) <= eps

    def dot(self, other: Vector) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector) -> Vector:
        return Vector(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x
        )

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @staticmethod
    def from_array(values: Sequence[float]) -> Vector:
        return Vector(float(values[0]), float(values[1]), float(values[2]))


@dataclass(frozen=True)
class Point:
    """A simple geometric point in 3D space."""
    x: float
    y: float
    z: float = 0.0

    def __add__(self, other: Vector) -> Point:
        # Point + Vector = Point (Translation)
        if isinstance(other, Vector):
            return Point(self.x + other.x, self.y + other.y, self.z + other.z)
        raise TypeError("Can only add a Vector to a Point.")

    def __sub__(self, other: Union[Vector, Point]) -> Union[Vector, Point]:
        # Point - Point = Vector (Direction)
        if isinstance(other, Point):
            return Vector(self.x - other.x, self.y - other.y, self.z - other.z)
        # Point - Vector = Point (Inverse translation)
        if isinstance(other, Vector):
            return Point(self.x - other.x, self.y - other.y, self.z - other.z)
        raise TypeError("Can only subtract a Vector or Point to a Point.")

    def distance_to(self, other: Point) -> float:
        return math.sqrt((self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2)

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @staticmethod
    def from_array(values: Sequence[float]) -> Point:
        return Point(float(values[0]), float(values[1]), float(values[2]))


@dataclass(frozen=True)
class LineSegment:
    """
    A bounded straight centerline: start point, unit direction and length.

    The direction is stored as given. Callers holding a direction that is
    already unit length (e.g. read from a host curve) keep it bit-for-bit;
    only `from_points` normalises, and does so once.
    """
    start: Point
    direction: Vector
    length: float

    def __post_init__(self) -> None:
        if self.length < 0.0:
            raise ValueError(f"Segment length must be non-negative, got {self.length}.")

    @staticmethod
    def from_points(start: Point, end: Point) -> LineSegment:
        delta = end - start
        length = delta.magnitude
        if length == 0.0:
            raise ValueError("Cannot build a segment from two coincident points.")
        return LineSegment(start=start, direction=delta / length, length=length)

    def point_at(self, t: float) -> Point:
        """Point at distance `t` from start, for t in [0, length]."""
        if t < -SEGMENT_EPS or t > self.length + SEGMENT_EPS:
            raise ValueError(f"Parameter {t} outside segment range [0, {self.length}].")
        return self.start + self.direction * t

    @property
    def end(self) -> Point:
        return self.start + self.direction * self.length


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box, used as the section box of a search context."""
    min: Point
    max: Point

    def __post_init__(self) -> None:
        if self.min.x > self.max.x or self.min.y > self.max.y or self.min.z > self.max.z:
            raise ValueError(f"Invalid bounding box: min {self.min} exceeds max {self.max}.")

    def contains(self, point: Point, eps: float = 1e-9) -> bool:
        return (
            self.min.x - eps <= point.x <= self.max.x + eps and
            self.min.y - eps <= point.y <= self.max.y + eps and
            self.min.z - eps <= point.z <= self.max.z + eps
        )

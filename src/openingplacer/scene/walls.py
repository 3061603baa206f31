"""
Wall Solids
===========
Straight walls as oriented boxes: a baseline in plan, a thickness centred on
the baseline, and a vertical extent from the base elevation.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from openingplacer.model.elements import BarrierClass, ElementId
from openingplacer.model.geometry_primitives import Point, Vector


@dataclass(frozen=True)
class WallSolid:
    id: ElementId
    start: Point
    end: Point
    thickness: float
    height: float
    base_elevation: float
    level_id: Optional[ElementId]
    linked_id: Optional[ElementId] = None
    barrier_class: BarrierClass = BarrierClass.WALL

    def __post_init__(self) -> None:
        if self.thickness <= 0.0 or self.height <= 0.0:
            raise ValueError(f"Wall {self.id}: thickness and height must be positive.")
        if self.plan_length == 0.0:
            raise ValueError(f"Wall {self.id}: baseline has zero length in plan.")

    @property
    def plan_length(self) -> float:
        return Vector(self.end.x - self.start.x, self.end.y - self.start.y, 0.0).magnitude

    @property
    def key(self):
        return (self.id, self.linked_id)

    def local_axes(self) -> np.ndarray:
        """Rows are the wall's local u (along), v (across) and w (up) axes."""
        u = Vector(self.end.x - self.start.x, self.end.y - self.start.y, 0.0).normalize()
        v = Vector(-u.y, u.x, 0.0)
        w = Vector(0.0, 0.0, 1.0)
        return np.array([u.to_array(), v.to_array(), w.to_array()])

    def local_bounds(self) -> tuple[np.ndarray, np.ndarray]:
        half = 0.5 * self.thickness
        lo = np.array([0.0, -half, self.base_elevation])
        hi = np.array([self.plan_length, half, self.base_elevation + self.height])
        return lo, hi

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> WallSolid:
        return WallSolid(
            id=data["id"],
            start=Point.from_array(data["start"]),
            end=Point.from_array(data["end"]),
            thickness=float(data["thickness"]),
            height=float(data["height"]),
            base_elevation=float(data.get("base_elevation", 0.0)),
            level_id=data.get("level_id"),
            linked_id=data.get("linked_id"),
            barrier_class=BarrierClass(data.get("barrier_class", BarrierClass.WALL)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "start": [self.start.x, self.start.y, self.start.z],
            "end": [self.end.x, self.end.y, self.end.z],
            "thickness": self.thickness,
            "height": self.height,
            "base_elevation": self.base_elevation,
            "level_id": self.level_id,
            "linked_id": self.linked_id,
            "barrier_class": self.barrier_class.value,
        }

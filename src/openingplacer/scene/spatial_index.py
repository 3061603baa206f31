"""
Box Spatial Index
=================
Reference SpatialQuery backed by numpy. Wall boxes are packed into arrays once
at construction and every cast is a single vectorised slab test over all of
them.

Each wall crossed reports one hit per face the ray passes through (entry and
exit), mirroring how host ray intersectors return one reference per face.
A ray starting inside a wall only reports the exit face.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np

from openingplacer.errors import GeometryQueryError
from openingplacer.model.elements import BarrierClass, RayHit, SearchContext
from openingplacer.model.geometry_primitives import Point, Vector
from openingplacer.scene.walls import WallSolid

logger = logging.getLogger(__name__)


class BoxSpatialIndex:
    def __init__(self, walls: Sequence[WallSolid], eps: float = 1e-9):
        self.walls: List[WallSolid] = list(walls)
        self.eps = eps

        n = len(self.walls)
        self._origins = np.zeros((n, 3))
        self._axes = np.zeros((n, 3, 3))
        self._lo = np.zeros((n, 3))
        self._hi = np.zeros((n, 3))
        self._classes = np.array([str(w.barrier_class) for w in self.walls], dtype=object)

        for i, wall in enumerate(self.walls):
            self._origins[i] = [wall.start.x, wall.start.y, 0.0]
            self._axes[i] = wall.local_axes()
            self._lo[i], self._hi[i] = wall.local_bounds()

        logger.debug(f"Spatial index built over {n} wall(s).")

    def __len__(self) -> int:
        return len(self.walls)

    def intervals(self, origin: Point, direction: Vector) -> tuple[np.ndarray, np.ndarray]:
        """
        Entry/exit distances of the ray through every wall box.

        Returns:
            (t_near, t_far), each of shape (N,). A wall is missed when
            t_near > t_far.
        """
        d = direction.to_array()
        d = d / np.linalg.norm(d)

        # Ray expressed in each wall's local frame: (N, 3)
        local_o = np.einsum("nij,nj->ni", self._axes, origin.to_array() - self._origins)
        local_d = np.einsum("nij,j->ni", self._axes, d)

        parallel = np.abs(local_d) < self.eps
        safe_d = np.where(parallel, 1.0, local_d)
        t1 = (self._lo - local_o) / safe_d
        t2 = (self._hi - local_o) / safe_d
        t_min = np.minimum(t1, t2)
        t_max = np.maximum(t1, t2)

        # A slab parallel to the ray either contains it entirely or never
        inside = (local_o >= self._lo - self.eps) & (local_o <= self._hi + self.eps)
        t_min = np.where(parallel, np.where(inside, -np.inf, np.inf), t_min)
        t_max = np.where(parallel, np.where(inside, np.inf, -np.inf), t_max)

        return t_min.max(axis=1), t_max.min(axis=1)

    def cast(
        self,
        origin: Point,
        direction: Vector,
        barrier_class: BarrierClass,
        context: SearchContext,
        max_distance: Optional[float] = None,
    ) -> List[RayHit]:
        if not self.walls:
            return []

        d = direction.to_array()
        if not np.all(np.isfinite(d)) or not np.all(np.isfinite(origin.to_array())):
            raise GeometryQueryError(f"Non-finite ray: origin {origin}, direction {direction}.")
        if np.linalg.norm(d) <= self.eps:
            raise GeometryQueryError(f"Degenerate ray direction {direction}.")

        t_near, t_far = self.intervals(origin, direction)
        crossed = (t_far >= t_near) & (t_far >= 0.0) & (self._classes == str(barrier_class))

        unit = direction.normalize()
        hits: List[RayHit] = []
        for i in np.flatnonzero(crossed):
            wall = self.walls[i]
            candidates = []
            if t_near[i] >= 0.0:
                candidates.append(float(t_near[i]))
            if t_far[i] - max(t_near[i], 0.0) > self.eps or not candidates:
                candidates.append(float(t_far[i]))

            for t in candidates:
                if max_distance is not None and t > max_distance:
                    continue
                if context.section_box is not None and not context.section_box.contains(origin + unit * t):
                    continue
                hits.append(RayHit(proximity=t, barrier_id=wall.id, linked_id=wall.linked_id))

        hits.sort(key=lambda h: h.proximity)
        return hits

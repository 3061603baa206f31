"""
Ray Caster
==========
Thin adapter over a SpatialQuery. It validates the ray and the search context
before delegating, and normalises every backend failure into
GeometryQueryError so the orchestrator can isolate it to one element.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from openingplacer.engine.interfaces import SpatialQuery
from openingplacer.errors import GeometryQueryError
from openingplacer.model.elements import BarrierClass, LinearElement, RayHit, SearchContext
from openingplacer.model.geometry_primitives import Point, Vector

logger = logging.getLogger(__name__)


class RayCaster:
    def __init__(
        self,
        query: Optional[SpatialQuery],
        context: Optional[SearchContext],
        barrier_class: BarrierClass = BarrierClass.WALL,
        zero_eps: float = 1e-9,
    ):
        self.query = query
        self.context = context
        self.barrier_class = BarrierClass(barrier_class)
        self.zero_eps = zero_eps

    def validate_context(self) -> None:
        if self.query is None:
            raise GeometryQueryError("No spatial index available for ray casting.")
        if self.context is None:
            raise GeometryQueryError("No search context (3D view) given.")
        if self.context.is_template:
            raise GeometryQueryError(f"Search context '{self.context.name}' is a view template.")

    def cast(self, origin: Point, direction: Vector, max_distance: Optional[float] = None) -> List[RayHit]:
        """
        Cast a ray and return its hits against barriers of the configured class.

        The hits come back in backend order; callers filter and sort as needed.
        """
        self.validate_context()
        if direction.is_zero(self.zero_eps):
            raise GeometryQueryError(f"Degenerate ray direction {direction}.")
        if max_distance is not None and max_distance < 0.0:
            raise GeometryQueryError(f"Negative search distance {max_distance}.")

        try:
            raw_hits = self.query.cast(origin, direction, self.barrier_class, self.context, max_distance)
        except GeometryQueryError:
            raise
        except Exception as e:
            raise GeometryQueryError(f"Spatial query failed: {e}") from e

        hits = []
        for hit in raw_hits:
            if hit.proximity < 0.0:
                logger.debug(f"Dropping hit behind ray origin: {hit}")
                continue
            hits.append(hit)
        return hits

    def cast_along(self, element: LinearElement) -> List[RayHit]:
        """Cast from the element's start point along its direction, unbounded."""
        try:
            hits = self.cast(element.start, element.direction)
        except GeometryQueryError as e:
            if e.element_id is None:
                e.element_id = element.id
            raise
        logger.debug(f"{element.kind} {element.id}: {len(hits)} raw hit(s)")
        return hits

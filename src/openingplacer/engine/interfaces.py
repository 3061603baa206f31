"""
Collaborator Interfaces
=======================
The engine only talks to the outside world through these protocols. A host
adapter (or the in-memory `openingplacer.scene` model) provides them.

All coordinates are in the host's internal length unit; the engine never
converts units.
"""
from __future__ import annotations

from typing import Optional, Protocol, Sequence, runtime_checkable

from openingplacer.model.elements import (
    Barrier,
    BarrierClass,
    ElementId,
    ElementKind,
    LinearElement,
    OpeningSpec,
    RayHit,
    SearchContext,
)
from openingplacer.model.geometry_primitives import Point, Vector


@runtime_checkable
class ElementProvider(Protocol):
    """Source of linear elements, read once per run."""

    def linear_elements(self, kind: ElementKind) -> Sequence[LinearElement]:
        """Return every element of `kind` from the source model, unfiltered."""


@runtime_checkable
class SpatialQuery(Protocol):
    """Ray-versus-barrier search over a pre-built spatial index. Read-only."""

    def cast(
        self,
        origin: Point,
        direction: Vector,
        barrier_class: BarrierClass,
        context: SearchContext,
        max_distance: Optional[float] = None,
    ) -> Sequence[RayHit]:
        """
        Return the intersections of the ray with barriers of `barrier_class`.

        Order is unspecified. Must be safe to call from several threads.
        """


@runtime_checkable
class BarrierResolver(Protocol):
    def resolve(self, barrier_id: ElementId, linked_id: Optional[ElementId] = None) -> Barrier:
        """Look up a barrier and its level. Raises BarrierResolutionError."""


@runtime_checkable
class OpeningSink(Protocol):
    def emit(self, openings: Sequence[OpeningSpec]) -> None:
        """Materialize (or record) the computed openings."""

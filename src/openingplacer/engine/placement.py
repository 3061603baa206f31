"""
Placement Calculator
====================
Turns one canonical hit of one linear element into an OpeningSpec: insertion
point on the centerline, the barrier's level, and the opening size.

Sizing
------
Width and height are both the element diameter (plus twice the configured
clearance, 0 by default). For a round element this gives a square opening
the circle is inscribed in.
"""
from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from openingplacer.engine.interfaces import BarrierResolver
from openingplacer.errors import BarrierResolutionError
from openingplacer.model.elements import (
    CanonicalHit,
    FailureKind,
    LinearElement,
    OpeningSpec,
    PlacementFailure,
)
from openingplacer.model.geometry_primitives import Point

logger = logging.getLogger(__name__)


class PlacementCalculator:
    def __init__(self, resolver: BarrierResolver, clearance: float = 0.0):
        if clearance < 0.0:
            raise ValueError(f"Clearance must be non-negative, got {clearance}.")
        self.resolver = resolver
        self.clearance = clearance

    @staticmethod
    def insertion_point(element: LinearElement, hit: CanonicalHit) -> Point:
        return element.start + element.direction * hit.proximity

    def opening_size(self, element: LinearElement) -> float:
        return element.diameter + 2.0 * self.clearance

    def compute(self, element: LinearElement, hit: CanonicalHit) -> OpeningSpec:
        """
        Raises:
            BarrierResolutionError: The barrier is unknown or has no level.
        """
        try:
            barrier = self.resolver.resolve(hit.barrier_id, hit.linked_id)
        except BarrierResolutionError as e:
            if e.barrier_id is None:
                e.barrier_id = hit.barrier_id
                e.linked_id = hit.linked_id
            raise

        if barrier.level_id is None:
            raise BarrierResolutionError(
                f"Barrier {hit.barrier_id} has no reference level.",
                barrier_id=hit.barrier_id,
                linked_id=hit.linked_id,
            )

        size = self.opening_size(element)
        return OpeningSpec(
            position=self.insertion_point(element, hit),
            barrier_id=hit.barrier_id,
            level_id=barrier.level_id,
            width=size,
            height=size,
            element_id=element.id,
            element_kind=element.kind,
            linked_id=hit.linked_id,
        )

    def compute_all(
        self,
        element: LinearElement,
        hits: Sequence[CanonicalHit],
    ) -> Tuple[List[OpeningSpec], List[PlacementFailure]]:
        """Compute every hit of one element; an unresolvable barrier skips only its own opening."""
        specs: List[OpeningSpec] = []
        failures: List[PlacementFailure] = []
        for hit in hits:
            try:
                specs.append(self.compute(element, hit))
            except BarrierResolutionError as e:
                logger.warning(f"{element.kind} {element.id}: skipping opening in barrier {hit.barrier_id}: {e}")
                failures.append(PlacementFailure(
                    kind=FailureKind.BARRIER_RESOLUTION,
                    element_id=element.id,
                    message=str(e),
                    barrier_id=hit.barrier_id,
                    linked_id=hit.linked_id,
                ))
        return specs, failures

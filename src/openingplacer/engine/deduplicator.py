"""
Hit Deduplication
=================
A single ray usually reports several hits on one wall (one per face it
crosses). Those are one physical penetration, so hits are grouped by the
barrier identity (barrier_id, linked_id) and one representative is kept.

Proximity never takes part in the key: two hits on the same barrier collapse
no matter how far apart they are, and hits on different barriers never
collapse no matter how close.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from openingplacer.model.elements import CanonicalHit, ElementId, RayHit

HitKey = Tuple[ElementId, Optional[ElementId]]


def within_length(hits: Iterable[RayHit], length: float) -> List[RayHit]:
    """Keep hits lying on the element's own run (boundary inclusive)."""
    return [hit for hit in hits if hit.proximity <= length]


def deduplicate(hits: Iterable[RayHit]) -> List[CanonicalHit]:
    """
    Collapse hits sharing a barrier key into one canonical hit.

    The minimum-proximity hit of each group is kept (first seen on ties), and
    groups are returned in order of their first appearance, so the result is
    deterministic and deduplicating it again returns it unchanged.
    """
    chosen: Dict[HitKey, RayHit] = {}
    for hit in hits:
        current = chosen.get(hit.key)
        if current is None or hit.proximity < current.proximity:
            # dict keeps the slot of the first insertion on reassignment
            chosen[hit.key] = hit
    return list(chosen.values())


def canonical_hits(hits: Iterable[RayHit], length: float) -> List[CanonicalHit]:
    return deduplicate(within_length(hits, length))

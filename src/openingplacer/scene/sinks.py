from __future__ import annotations

import logging
from typing import List, Sequence

from openingplacer.model.elements import OpeningSpec

logger = logging.getLogger(__name__)


class ListOpeningSink:
    """Keeps emitted openings in memory, in emission order."""

    def __init__(self) -> None:
        self.openings: List[OpeningSpec] = []
        self.batches: int = 0

    def emit(self, openings: Sequence[OpeningSpec]) -> None:
        self.openings.extend(openings)
        self.batches += 1
        logger.debug(f"Sink received {len(openings)} opening(s).")

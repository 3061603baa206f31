"""
Engine Exceptions
=================
Per-element and per-hit errors are caught by the batch orchestrator and turned
into PlacementFailure records. PreconditionError is never caught inside the
engine: it aborts the whole run before any geometry work starts.
"""
from typing import Any, Optional


class OpeningPlacerError(Exception):
    """Base class for all errors raised by the opening placer."""


class GeometryQueryError(OpeningPlacerError):
    """A ray could not be cast: degenerate direction or unusable search context."""

    def __init__(self, message: str, element_id: Optional[Any] = None):
        super().__init__(message)
        self.element_id = element_id


class BarrierResolutionError(OpeningPlacerError):
    """A barrier hit by a ray cannot be resolved to its reference level."""

    def __init__(self, message: str, barrier_id: Optional[Any] = None, linked_id: Optional[Any] = None):
        super().__init__(message)
        self.barrier_id = barrier_id
        self.linked_id = linked_id


class PreconditionError(OpeningPlacerError):
    """A collaborator required by the whole run is missing."""

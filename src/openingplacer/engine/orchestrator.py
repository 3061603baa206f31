"""
Batch Orchestrator
==================
Runs ray cast -> deduplication -> placement for every linear element and
collects the opening specifications.

Why is this file needed?
------------------------
1. Isolation: A failing element (bad ray) or a failing hit (unknown barrier)
   is recorded as a PlacementFailure; the rest of the batch continues.
2. Preconditions: Missing collaborators (opening template, 3D view) abort the
   run before any element is processed, so nothing is applied partially.
3. Parallelism: Elements are independent. With max_workers > 1 they are
   processed on a thread pool and re-assembled in input order.

Classes:
    ElementResult: Openings and failures of one element.
    BatchResult: Openings and failures of a whole run.
    BatchOrchestrator: The per-element loop.
"""
from __future__ import annotations

import logging
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from openingplacer.engine.deduplicator import canonical_hits
from openingplacer.engine.interfaces import ElementProvider, OpeningSink
from openingplacer.engine.placement import PlacementCalculator
from openingplacer.engine.ray_caster import RayCaster
from openingplacer.errors import GeometryQueryError, PreconditionError
from openingplacer.model.elements import (
    ElementId,
    ElementKind,
    FailureKind,
    LinearElement,
    OpeningSpec,
    OpeningTemplate,
    PlacementFailure,
    SearchContext,
)

logger = logging.getLogger(__name__)


@dataclass
class ElementResult:
    element_id: ElementId
    openings: List[OpeningSpec] = field(default_factory=list)
    failures: List[PlacementFailure] = field(default_factory=list)


@dataclass
class BatchResult:
    openings: List[OpeningSpec] = field(default_factory=list)
    failures: List[PlacementFailure] = field(default_factory=list)
    element_count: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures

    def add(self, result: ElementResult) -> None:
        self.element_count += 1
        self.openings.extend(result.openings)
        self.failures.extend(result.failures)

    def by_element(self) -> Dict[ElementId, List[OpeningSpec]]:
        grouped: Dict[ElementId, List[OpeningSpec]] = {}
        for spec in self.openings:
            grouped.setdefault(spec.element_id, []).append(spec)
        return grouped

    def summary(self) -> Dict[str, int]:
        kinds = Counter(str(spec.element_kind) for spec in self.openings)
        failures = Counter(f.kind.value for f in self.failures)
        return {
            "elements": self.element_count,
            "openings": len(self.openings),
            "failures": len(self.failures),
            **{f"openings_{k.lower()}": v for k, v in sorted(kinds.items())},
            **{f"failures_{k}": v for k, v in sorted(failures.items())},
        }


def check_preconditions(template: Optional[OpeningTemplate], context: Optional[SearchContext]) -> None:
    """
    Raises:
        PreconditionError: The opening template is missing or not activated, or
            no usable 3D view is available.
    """
    if template is None:
        raise PreconditionError("Opening family type not found.")
    if not template.is_active:
        raise PreconditionError(
            f"Opening family type '{template.family_name}' is not active; activate it before placing openings."
        )
    if context is None:
        raise PreconditionError("3D view not found.")
    if context.is_template:
        raise PreconditionError(f"View '{context.name}' is a view template and cannot be searched.")


class BatchOrchestrator:
    def __init__(
        self,
        provider: ElementProvider,
        ray_caster: RayCaster,
        calculator: PlacementCalculator,
        kinds: Sequence[ElementKind] = (ElementKind.DUCT, ElementKind.PIPE),
        max_workers: int = 1,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}.")
        self.provider = provider
        self.ray_caster = ray_caster
        self.calculator = calculator
        self.kinds = [ElementKind(k) for k in kinds]
        self.max_workers = max_workers

    def collect_elements(self) -> List[LinearElement]:
        elements: List[LinearElement] = []
        for kind in self.kinds:
            found = list(self.provider.linear_elements(kind))
            logger.info(f"Found {len(found)} element(s) of kind {kind}.")
            elements.extend(found)
        return elements

    def process_element(self, element: LinearElement) -> ElementResult:
        result = ElementResult(element_id=element.id)
        try:
            hits = self.ray_caster.cast_along(element)
        except GeometryQueryError as e:
            logger.warning(f"{element.kind} {element.id}: ray cast failed: {e}")
            result.failures.append(PlacementFailure(
                kind=FailureKind.GEOMETRY_QUERY,
                element_id=element.id,
                message=str(e),
            ))
            return result

        canonical = canonical_hits(hits, element.length)
        logger.debug(f"{element.kind} {element.id}: {len(canonical)} barrier crossing(s) within length {element.length:g}")
        result.openings, result.failures = self.calculator.compute_all(element, canonical)
        return result

    def _process_all(self, elements: Sequence[LinearElement]) -> Iterable[ElementResult]:
        if self.max_workers == 1 or len(elements) < 2:
            return map(self.process_element, elements)
        # Executor.map yields in submission order, which keeps output deterministic
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="openingplacer") as pool:
            return list(pool.map(self.process_element, elements))

    def run(self, template: Optional[OpeningTemplate] = None, check: bool = True) -> BatchResult:
        """
        Process every element of the configured kinds.

        Args:
            template: Opening family type that will be instantiated.
            check: Validate the template and the ray caster's search context
                first. Disable only when the caller has already validated them.

        Raises:
            PreconditionError: Before any element is processed.
        """
        if check:
            check_preconditions(template, self.ray_caster.context)

        t0 = time.perf_counter()
        elements = self.collect_elements()
        logger.info(f"Processing {len(elements)} element(s) with {self.max_workers} worker(s)...")

        batch = BatchResult()
        for result in self._process_all(elements):
            batch.add(result)

        logger.info(
            f"Computed {len(batch.openings)} opening(s) for {batch.element_count} element(s), "
            f"{len(batch.failures)} failure(s) in {time.perf_counter() - t0:.3f} s."
        )
        return batch


def place_openings(
    orchestrator: BatchOrchestrator,
    sink: OpeningSink,
    template: Optional[OpeningTemplate],
) -> BatchResult:
    """Run the batch and hand the openings to the sink. Nothing is emitted if preconditions fail."""
    result = orchestrator.run(template=template)
    sink.emit(result.openings)
    return result

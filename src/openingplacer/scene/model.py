"""
Scene Model (In-Memory Host)
============================
A plain-data stand-in for the host documents: the architectural model
(levels, walls, opening family types, 3D views) and the MEP source model
(ducts, pipes).

Why is this file needed?
------------------------
1. It implements ElementProvider and BarrierResolver, so the engine can run
   outside a host application (CLI, tests).
2. It owns the JSON layout of a scene file.

Classes:
    Level: A named reference elevation.
    SceneModel: The container, with lookup helpers.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from openingplacer.errors import BarrierResolutionError
from openingplacer.model.elements import (
    Barrier,
    ElementId,
    ElementKind,
    LinearElement,
    OpeningTemplate,
    SearchContext,
)
from openingplacer.scene.spatial_index import BoxSpatialIndex
from openingplacer.scene.walls import WallSolid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Level:
    id: ElementId
    name: str = ""
    elevation: float = 0.0


@dataclass
class SceneModel:
    title: str = ""
    source_title: str = ""
    levels: List[Level] = field(default_factory=list)
    walls: List[WallSolid] = field(default_factory=list)
    ducts: List[LinearElement] = field(default_factory=list)
    pipes: List[LinearElement] = field(default_factory=list)
    templates: List[OpeningTemplate] = field(default_factory=list)
    contexts: List[SearchContext] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._reindex()

    def _reindex(self) -> None:
        self._levels: Dict[ElementId, Level] = {lvl.id: lvl for lvl in self.levels}
        self._walls: Dict[Tuple[ElementId, Optional[ElementId]], WallSolid] = {}
        for wall in self.walls:
            if wall.key in self._walls:
                raise ValueError(f"Duplicate wall id {wall.id} (link {wall.linked_id}).")
            self._walls[wall.key] = wall

    # --- ElementProvider ---

    def linear_elements(self, kind: ElementKind) -> Sequence[LinearElement]:
        kind = ElementKind(kind)
        if kind == ElementKind.DUCT:
            return list(self.ducts)
        if kind == ElementKind.PIPE:
            return list(self.pipes)
        return []

    # --- BarrierResolver ---

    def resolve(self, barrier_id: ElementId, linked_id: Optional[ElementId] = None) -> Barrier:
        wall = self._walls.get((barrier_id, linked_id))
        if wall is None:
            raise BarrierResolutionError(
                f"Barrier {barrier_id} not found" + (f" in link {linked_id}." if linked_id is not None else "."),
                barrier_id=barrier_id,
                linked_id=linked_id,
            )
        if wall.level_id is None or wall.level_id not in self._levels:
            raise BarrierResolutionError(
                f"Level {wall.level_id} of barrier {barrier_id} not found.",
                barrier_id=barrier_id,
                linked_id=linked_id,
            )
        return Barrier(id=wall.id, linked_id=wall.linked_id, level_id=wall.level_id)

    # --- Lookups ---

    def level(self, level_id: ElementId) -> Optional[Level]:
        return self._levels.get(level_id)

    def spatial_index(self) -> BoxSpatialIndex:
        return BoxSpatialIndex(self.walls)

    def find_template(self, family_name: str, category: Optional[str] = None) -> Optional[OpeningTemplate]:
        for template in self.templates:
            if template.family_name != family_name:
                continue
            if category is not None and template.category != category:
                continue
            return template
        return None

    def find_search_context(self) -> Optional[SearchContext]:
        """First 3D view that is not a view template."""
        return next((c for c in self.contexts if not c.is_template), None)

    def has_source_model(self, token: str) -> bool:
        return bool(self.source_title) and token in self.source_title

    # --- Serialization ---

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> SceneModel:
        source = data.get("source", {})
        return SceneModel(
            title=data.get("title", ""),
            source_title=source.get("title", ""),
            levels=[
                Level(id=d["id"], name=d.get("name", ""), elevation=float(d.get("elevation", 0.0)))
                for d in data.get("levels", [])
            ],
            walls=[WallSolid.from_dict(d) for d in data.get("walls", [])],
            ducts=[LinearElement.from_dict(d, kind=ElementKind.DUCT) for d in source.get("ducts", [])],
            pipes=[LinearElement.from_dict(d, kind=ElementKind.PIPE) for d in source.get("pipes", [])],
            templates=[OpeningTemplate.from_dict(d) for d in data.get("opening_templates", [])],
            contexts=[SearchContext.from_dict(d) for d in data.get("views", [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "levels": [{"id": l.id, "name": l.name, "elevation": l.elevation} for l in self.levels],
            "walls": [w.to_dict() for w in self.walls],
            "opening_templates": [t.to_dict() for t in self.templates],
            "views": [c.to_dict() for c in self.contexts],
            "source": {
                "title": self.source_title,
                "ducts": [e.to_dict() for e in self.ducts],
                "pipes": [e.to_dict() for e in self.pipes],
            },
        }

    @staticmethod
    def from_file(path: str) -> SceneModel:
        logger.info(f"Loading scene from: {path}")
        with open(path, "r", encoding="utf-8-sig") as fp:
            data = json.load(fp)
        if not isinstance(data, dict):
            raise ValueError(f"Scene file '{path}' must contain a JSON object.")
        scene = SceneModel.from_dict(data)
        logger.info(
            f"Scene '{scene.title}': {len(scene.walls)} wall(s), {len(scene.ducts)} duct(s), "
            f"{len(scene.pipes)} pipe(s)."
        )
        return scene

"""
Configuration & Path Management
===============================
This module serves as the central registry for file paths and engine settings.

Why is this file needed?
------------------------
1. Abstraction: It prevents hardcoded paths scattered throughout the code.
2. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find assets (settings, sample scenes) when the tool is frozen into an .exe.
3. Settings: Host-specific names (opening family, parameter names, source
   model suffix) live in a JSON file instead of in the engine.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    DEFAULT_SETTINGS_PATH (str): Absolute path to the default settings file.
    SAMPLE_SCENE_PATH (str): Absolute path to the bundled demo scene.
    EngineSettings: Validated settings container.
    load_settings: Reads EngineSettings from JSON.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from openingplacer.model.elements import BarrierClass, ElementKind

logger = logging.getLogger(__name__)


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        # PyInstaller temp folder
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # Development mode: config.py is in src/openingplacer/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# Global Constants
ASSETS_PATH: str = get_resource_path("assets")
DEFAULT_SETTINGS_PATH: str = os.path.join(ASSETS_PATH, "settings_default.json")
SAMPLE_SCENE_PATH: str = os.path.join(ASSETS_PATH, "sample_scene.json")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class EngineSettings:
    """
    Settings for one placement run.

    The defaults match the hosts the tool was written for: a generic model
    family "Отверстие" with "Ширина"/"Высота" size parameters, and an MEP
    model whose title carries the "ОВ" suffix.
    """
    opening_family_name: str = "Отверстие"
    opening_category: str = "GenericModel"
    width_parameter: str = "Ширина"
    height_parameter: str = "Высота"
    source_model_token: str = "ОВ"
    barrier_class: BarrierClass = BarrierClass.WALL
    element_kinds: List[ElementKind] = field(default_factory=lambda: [ElementKind.DUCT, ElementKind.PIPE])
    clearance: float = 0.0
    max_workers: int = 1
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.barrier_class = BarrierClass(self.barrier_class)
        self.element_kinds = [ElementKind(k) for k in self.element_kinds]
        self.clearance = float(self.clearance)
        self.max_workers = int(self.max_workers)
        self.log_level = str(self.log_level).upper()

        if not self.element_kinds:
            raise ValueError("At least one element kind must be configured.")
        if len(set(self.element_kinds)) != len(self.element_kinds):
            raise ValueError(f"Duplicate element kinds: {self.element_kinds}")
        if self.clearance < 0.0:
            raise ValueError(f"Clearance must be non-negative, got {self.clearance}.")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}.")
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level '{self.log_level}'.")
        for name in ("opening_family_name", "width_parameter", "height_parameter"):
            if not getattr(self, name):
                raise ValueError(f"Setting '{name}' must not be empty.")

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["barrier_class"] = self.barrier_class.value
        d["element_kinds"] = [k.value for k in self.element_kinds]
        return d

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> EngineSettings:
        known = {f.name for f in fields(EngineSettings)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown settings: {', '.join(unknown)}")
        return EngineSettings(**{k: v for k, v in data.items() if k in known})


def load_settings(path: Optional[str] = None) -> EngineSettings:
    """
    Load EngineSettings from a JSON file.

    Args:
        path: Settings file. If None, the bundled default file is used and a
              missing default file falls back to built-in defaults.

    Raises:
        FileNotFoundError: If an explicitly given path does not exist.
        ValueError: If the file content is not a JSON object or fails validation.
    """
    settings_path = path or DEFAULT_SETTINGS_PATH
    if not os.path.exists(settings_path):
        if path is not None:
            raise FileNotFoundError(f"Settings file not found: {settings_path}")
        logger.warning(f"Default settings not found at {settings_path}, using built-in defaults.")
        return EngineSettings()

    logger.debug(f"Loading settings from: {settings_path}")
    with open(settings_path, "r", encoding="utf-8-sig") as fp:
        data = json.load(fp)

    if not isinstance(data, dict):
        raise ValueError(f"Settings file '{settings_path}' must contain a JSON object.")
    return EngineSettings.from_dict(data)

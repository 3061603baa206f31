"""
Input/Output Manager (HDF5)
Handles saving and loading computed openings and failure reports to .h5 files.
"""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Dict, List, Optional, Sequence

import h5py
import numpy as np

from openingplacer.model.elements import ElementKind, FailureKind, OpeningSpec, PlacementFailure
from openingplacer.model.geometry_primitives import Point

# Get module logger
logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("opening-placer")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"

# Element ids may be int or str depending on the host; they are stored JSON-encoded
_STR_DTYPE = h5py.string_dtype(encoding="utf-8")


def _write_strings(group: h5py.Group, name: str, values: Sequence[str]) -> None:
    dset = group.create_dataset(name, shape=(len(values),), dtype=_STR_DTYPE)
    if values:
        dset[:] = list(values)


def _read_strings(group: h5py.Group, name: str) -> List[str]:
    return list(group[name].asstr()[:])


def _write_ids(group: h5py.Group, name: str, values: Sequence[Any]) -> None:
    for v in values:
        if v is not None and not isinstance(v, (int, str)):
            raise ValueError(f"Cannot store {name} {v!r}: ids must be int or str.")
    _write_strings(group, name, [json.dumps(v, ensure_ascii=False) for v in values])


def _read_ids(group: h5py.Group, name: str) -> List[Any]:
    return [json.loads(v) for v in _read_strings(group, name)]


class IOManager:

    @staticmethod
    def save_openings(
        openings: Sequence[OpeningSpec],
        filepath: str,
        failures: Sequence[PlacementFailure] = (),
        attrs: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Write openings and failures to an HDF5 file, replacing it if it exists.

        Args:
            openings: Computed opening specifications.
            filepath: Target .h5 path.
            failures: Failures of the same run, stored as JSON.
            attrs: Extra root attributes (e.g. settings used for the run).
        """
        logger.info(f"Saving {len(openings)} opening(s) to: {filepath}")
        try:
            with h5py.File(filepath, "w") as f:
                f.attrs["version"] = APP_VERSION
                f.attrs["created"] = datetime.now(timezone.utc).isoformat()
                for key, val in (attrs or {}).items():
                    f.attrs[key] = val if isinstance(val, (int, float, str)) else json.dumps(val, ensure_ascii=False)

                # --- 1. SAVE OPENINGS ---
                grp = f.create_group("openings")
                grp.attrs["count"] = len(openings)
                positions = np.array(
                    [[o.position.x, o.position.y, o.position.z] for o in openings], dtype=np.float64
                ).reshape(-1, 3)
                grp.create_dataset("position", data=positions)
                grp.create_dataset("width", data=np.array([o.width for o in openings], dtype=np.float64))
                grp.create_dataset("height", data=np.array([o.height for o in openings], dtype=np.float64))
                _write_ids(grp, "element_id", [o.element_id for o in openings])
                _write_ids(grp, "barrier_id", [o.barrier_id for o in openings])
                _write_ids(grp, "linked_id", [o.linked_id for o in openings])
                _write_ids(grp, "level_id", [o.level_id for o in openings])
                _write_strings(grp, "element_kind", [o.element_kind.value if o.element_kind else "" for o in openings])

                # --- 2. SAVE FAILURES ---
                grp_fail = f.create_group("failures")
                grp_fail.attrs["count"] = len(failures)
                failures_json = json.dumps([fl.to_dict() for fl in failures], ensure_ascii=False)
                # HDF5 attributes are limited to 64KB
                if len(failures_json.encode("utf-8")) > 60000:
                    logger.info(f"Failure report is large ({len(failures_json)} chars), using dataset")
                    grp_fail.create_dataset("report", data=np.void(failures_json.encode("utf-8")))
                else:
                    grp_fail.attrs["report_json"] = failures_json

            logger.info(f"Openings saved to: {filepath}")

        except Exception as e:
            logger.exception(f"Failed to save openings: {e}")
            raise

    @staticmethod
    def load_openings(filepath: str) -> List[OpeningSpec]:
        logger.info(f"Loading openings from: {filepath}")
        if not os.path.exists(filepath) or not h5py.is_hdf5(filepath):
            msg = f"File '{filepath}' is not a valid HDF5 file."
            logger.error(msg)
            raise ValueError(msg)

        with h5py.File(filepath, "r") as f:
            if "openings" not in f:
                logger.warning(f"No openings group in {filepath}.")
                return []
            grp = f["openings"]
            positions = grp["position"][:]
            widths = grp["width"][:]
            heights = grp["height"][:]
            element_ids = _read_ids(grp, "element_id")
            barrier_ids = _read_ids(grp, "barrier_id")
            linked_ids = _read_ids(grp, "linked_id")
            level_ids = _read_ids(grp, "level_id")
            kinds = _read_strings(grp, "element_kind")

        openings = [
            OpeningSpec(
                position=Point.from_array(positions[i]),
                barrier_id=barrier_ids[i],
                level_id=level_ids[i],
                width=float(widths[i]),
                height=float(heights[i]),
                element_id=element_ids[i],
                element_kind=ElementKind(kinds[i]) if kinds[i] else None,
                linked_id=linked_ids[i],
            )
            for i in range(len(positions))
        ]
        logger.debug(f"Loaded {len(openings)} opening(s).")
        return openings

    @staticmethod
    def load_failures(filepath: str) -> List[PlacementFailure]:
        if not os.path.exists(filepath) or not h5py.is_hdf5(filepath):
            raise ValueError(f"File '{filepath}' is not a valid HDF5 file.")

        with h5py.File(filepath, "r") as f:
            if "failures" not in f:
                return []
            grp = f["failures"]
            if "report" in grp:
                report = grp["report"][()].tobytes().decode("utf-8")
            else:
                report = grp.attrs.get("report_json", "[]")

        return [
            PlacementFailure(
                kind=FailureKind(d["kind"]),
                element_id=d["element_id"],
                message=d["message"],
                barrier_id=d.get("barrier_id"),
                linked_id=d.get("linked_id"),
            )
            for d in json.loads(report)
        ]


class HDF5OpeningSink:
    """
    OpeningSink writing to one HDF5 file.

    The file is rewritten on every emit/report so it always holds everything
    received so far.
    """

    def __init__(self, filepath: str, attrs: Optional[Dict[str, Any]] = None):
        self.filepath = filepath
        self.attrs = attrs or {}
        self.openings: List[OpeningSpec] = []
        self.failures: List[PlacementFailure] = []

    def emit(self, openings: Sequence[OpeningSpec]) -> None:
        self.openings.extend(openings)
        self._write()

    def report_failures(self, failures: Sequence[PlacementFailure]) -> None:
        self.failures.extend(failures)
        self._write()

    def _write(self) -> None:
        IOManager.save_openings(self.openings, self.filepath, failures=self.failures, attrs=self.attrs)

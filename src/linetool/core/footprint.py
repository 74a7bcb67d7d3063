"""Placeable object footprints and a footprint library with JSON persistence.

A footprint is the only thing the line tool needs to know about the object
being placed: its extent along the path (``length``) and across it
(``width``).  Footprints can be typed in, taken from the built-in library,
or measured from a mesh file via trimesh.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Protocol

import trimesh
from shapely.affinity import rotate, translate
from shapely.geometry import Polygon, box

logger = logging.getLogger(__name__)

# Formats trimesh can load natively
SUPPORTED_EXTENSIONS = {
    ".stl", ".obj", ".ply", ".off", ".glb", ".gltf", ".3mf",
}


class TreeState(Enum):
    """Growth stage applied to placed tree objects."""
    TEEN = "teen"
    ADULT = "adult"
    ELDERLY = "elderly"
    DEAD = "dead"
    STUMP = "stump"


class GrowthStateProvider(Protocol):
    """Optional cooperating tool that decides the next tree growth stage."""

    def next_tree_state(self) -> TreeState: ...


@dataclass
class ObjectFootprint:
    """Bounding extents of a placeable object, in world units.

    ``length`` runs along the object's local X axis, which is the axis laid
    along the path at rotation 0.
    """
    name: str
    length: float = 0.0
    width: float = 0.0
    is_tree: bool = False

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> ObjectFootprint:
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


def footprint_polygon(
    footprint: ObjectFootprint,
    position,
    rotation: float,
    min_size: float = 0.1,
) -> Polygon:
    """Ground outline of *footprint* placed at *position* with *rotation*.

    Coordinates are (x, z).  Rotation follows the placement convention: an
    object at rotation R has its length axis along heading -R.
    """
    half_l = max(footprint.length, min_size) / 2.0
    half_w = max(footprint.width, min_size) / 2.0
    outline = rotate(box(-half_l, -half_w, half_l, half_w), -rotation, origin=(0, 0))
    return translate(outline, xoff=float(position[0]), yoff=float(position[2]))


def footprints_overlap(
    footprint: ObjectFootprint,
    points,
) -> bool:
    """True if any two consecutive placed outlines intersect."""
    outlines = [footprint_polygon(footprint, p.position, p.rotation) for p in points]
    return any(
        a.intersection(b).area > 1e-9
        for a, b in zip(outlines, outlines[1:])
    )


def footprint_from_mesh(path: Path, name: Optional[str] = None) -> ObjectFootprint:
    """Measure the XZ bounding extents of the mesh stored at *path*.

    Raises FileNotFoundError or ValueError on failure.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Mesh file not found: {path}")
    if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise ValueError(f"Unsupported mesh format: {path.suffix}")

    mesh = trimesh.load(str(path), force="mesh")
    if not isinstance(mesh, trimesh.Trimesh) or mesh.is_empty:
        raise ValueError(f"Could not load a single mesh from {path}")

    # Y-up assets: X is the length axis, Z the width axis
    ext = mesh.extents
    footprint = ObjectFootprint(
        name=name or path.stem,
        length=round(float(ext[0]), 4),
        width=round(float(ext[2]), 4),
    )
    logger.debug("measured footprint %s from %s", footprint, path.name)
    return footprint


class FootprintLibrary:
    """Named footprints backed by a JSON file."""

    def __init__(self, path: Optional[Path] = None):
        if path is None:
            path = Path.home() / ".linetool" / "footprints.json"
        self._path = path
        self._footprints: dict[str, ObjectFootprint] = {}
        if self._path is not None and self._path.exists():
            self.load()

    def add(self, footprint: ObjectFootprint) -> None:
        self._footprints[footprint.name] = footprint

    def remove(self, name: str) -> None:
        self._footprints.pop(name, None)

    def get(self, name: str) -> Optional[ObjectFootprint]:
        return self._footprints.get(name)

    def list_footprints(self) -> list[ObjectFootprint]:
        return sorted(self._footprints.values(), key=lambda f: f.name.lower())

    def save(self) -> None:
        if self._path is None:
            raise RuntimeError("Footprint library has no backing file")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = [f.to_dict() for f in self.list_footprints()]
        self._path.write_text(json.dumps(data, indent=2))

    def load(self) -> None:
        data = json.loads(self._path.read_text())
        self._footprints = {}
        for d in data:
            fp = ObjectFootprint.from_dict(d)
            self._footprints[fp.name] = fp

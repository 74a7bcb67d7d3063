"""Tool preferences (persisted to disk)."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from ..core.footprint import ObjectFootprint
from ..core.path.base import LineMode
from ..core.spacing import RotationMode, SpacingMode, SpacingPolicy
from .defaults import DEFAULT_SPACING


@dataclass
class ToolSettings:
    """User preferences, serialized to ~/.linetool/settings.json."""

    line_mode: str = LineMode.STRAIGHT.value
    spacing: float = DEFAULT_SPACING
    spacing_mode: str = SpacingMode.MANUAL.value
    rotation: float = 0.0
    rotation_mode: str = RotationMode.RELATIVE.value
    random_spacing: float = 0.0
    random_offset: float = 0.0
    footprint_name: str = ""
    last_open_dir: str = ""

    @staticmethod
    def _path() -> Path:
        return Path.home() / ".linetool" / "settings.json"

    def to_policy(self, footprint: Optional[ObjectFootprint] = None) -> SpacingPolicy:
        """Build a SpacingPolicy; raises ValueError on out-of-range values."""
        policy = SpacingPolicy(
            spacing=self.spacing,
            mode=SpacingMode(self.spacing_mode),
            random_spacing=self.random_spacing,
            random_offset=self.random_offset,
            rotation=self.rotation,
            rotation_mode=RotationMode(self.rotation_mode),
        )
        if footprint is not None:
            policy.footprint = footprint
        return policy

    @classmethod
    def from_policy(cls, policy: SpacingPolicy, line_mode: LineMode) -> ToolSettings:
        return cls(
            line_mode=line_mode.value,
            spacing=policy.spacing,
            spacing_mode=policy.mode.value,
            rotation=policy.rotation,
            rotation_mode=policy.rotation_mode.value,
            random_spacing=policy.random_spacing,
            random_offset=policy.random_offset,
            footprint_name=policy.footprint.name,
        )

    def save(self, path: Optional[Path] = None) -> None:
        p = path or self._path()
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(asdict(self), indent=2))

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "ToolSettings":
        p = path or cls._path()
        if p.exists():
            data = json.loads(p.read_text())
            return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
        return cls()

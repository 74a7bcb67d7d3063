"""Interaction controller: turns per-tick input into path edits and output.

The ToolSession is the top-level entry point for the CLI and GUI.  It owns
the active path, the spacing policy and the fixed-preview / drag state, and
runs the whole pipeline once per :meth:`ToolSession.update` call.

Interaction states
------------------
IDLE             start point not yet placed (a cursor preview follows the pointer)
AWAITING_COMMIT  all points but the terminal one placed; next click commits
FIXED_PREVIEW    terminal position frozen; clicks on control points start a drag
DRAGGING         one control point follows the pointer until release or re-click
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol

import numpy as np

from ..config.defaults import DRAG_PICK_RADIUS, MIN_SPACING
from .events import TickInput
from .footprint import GrowthStateProvider, ObjectFootprint, TreeState
from .geometry import FlatTerrain, HeightSampler, normalize_degrees, snap_to_ground, vec3
from .path import modes
from .path.base import (
    ControlMarker,
    DragMode,
    GuideLine,
    LineMode,
    PathResult,
    PathState,
    PointData,
    TooltipInfo,
)
from .path.utils import random_rotation
from .spacing import RotationMode, SpacingMode, SpacingPolicy

logger = logging.getLogger(__name__)


class InteractionState(Enum):
    IDLE = "idle"
    AWAITING_COMMIT = "awaiting_commit"
    FIXED_PREVIEW = "fixed_preview"
    DRAGGING = "dragging"


@dataclass
class PlacementBatch:
    """Points committed by one click, handed to the placement sink."""
    points: list[PointData]
    prefab: str
    tree_state: Optional[TreeState] = None


@dataclass
class FrameOutput:
    """Everything a front end needs to draw one tick."""
    points: list[PointData] = field(default_factory=list)
    guides: list[GuideLine] = field(default_factory=list)
    tooltips: list[TooltipInfo] = field(default_factory=list)
    markers: list[ControlMarker] = field(default_factory=list)
    cursor: Optional[PointData] = None
    placed: Optional[PlacementBatch] = None


class PlacementSink(Protocol):
    def place(self, batch: PlacementBatch) -> None: ...


class RenderSink(Protocol):
    def draw(self, frame: FrameOutput) -> None: ...


class ToolSession:
    """One activation of the line tool."""

    def __init__(
        self,
        policy: Optional[SpacingPolicy] = None,
        mode: LineMode = LineMode.STRAIGHT,
        height_sampler: Optional[HeightSampler] = None,
        placement_sink: Optional[PlacementSink] = None,
        render_sink: Optional[RenderSink] = None,
        growth_provider: Optional[GrowthStateProvider] = None,
        pick_radius: float = DRAG_PICK_RADIUS,
    ):
        self._policy = policy or SpacingPolicy()
        self._path = PathState(kind=mode)
        self._sampler: HeightSampler = height_sampler or FlatTerrain()
        self._placement_sink = placement_sink
        self._render_sink = render_sink
        self._growth_provider = growth_provider
        self._pick_radius = pick_radius

        self._active = False
        self._dirty = True
        self._fixed_preview = False
        self._fixed_pos: Optional[np.ndarray] = None
        self._previous_pos: Optional[np.ndarray] = None
        self._drag_mode = DragMode.NONE
        self._result = PathResult()
        self._tooltips: list[TooltipInfo] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def activate(self) -> None:
        logger.info("line tool activated (%s)", self._path.kind.value)
        self._active = True
        self._clear_interaction()

    def deactivate(self) -> None:
        logger.info("line tool deactivated")
        self._active = False
        self._clear_interaction()
        self._tooltips = []

    @property
    def is_active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Discard every in-progress control point."""
        logger.debug("cancelled %s path", self._path.kind.value)
        self._clear_interaction()

    def _clear_interaction(self) -> None:
        modes.reset(self._path)
        self._path.last_endpoint = None
        self._fixed_preview = False
        self._fixed_pos = None
        self._previous_pos = None
        self._drag_mode = DragMode.NONE
        self._result = PathResult()
        self._dirty = True

    # ------------------------------------------------------------------
    # Settings (each setter marks the pipeline dirty)
    # ------------------------------------------------------------------

    def _update_policy(self, **changes) -> None:
        # replace() re-runs SpacingPolicy validation
        self._policy = dataclasses.replace(self._policy, **changes)
        self._dirty = True

    @property
    def policy(self) -> SpacingPolicy:
        return self._policy

    @property
    def spacing(self) -> float:
        return self._policy.spacing

    @spacing.setter
    def spacing(self, value: float) -> None:
        self._update_policy(spacing=float(value))

    @property
    def effective_spacing(self) -> float:
        return self._policy.effective_spacing

    @property
    def display_spacing(self) -> float:
        """Spacing as shown to the user, one decimal place."""
        return round(self._policy.effective_spacing, 1)

    def nudge_spacing(self, delta: float) -> None:
        self.spacing = max(self._policy.spacing + delta, MIN_SPACING)

    @property
    def spacing_mode(self) -> SpacingMode:
        return self._policy.mode

    @spacing_mode.setter
    def spacing_mode(self, value: SpacingMode) -> None:
        self._update_policy(mode=value)

    @property
    def rotation(self) -> float:
        return self._policy.rotation

    @rotation.setter
    def rotation(self, value: float) -> None:
        self._update_policy(rotation=normalize_degrees(float(value)))

    @property
    def rotation_mode(self) -> RotationMode:
        return self._policy.rotation_mode

    @rotation_mode.setter
    def rotation_mode(self, value: RotationMode) -> None:
        self._update_policy(rotation_mode=value)

    @property
    def random_rotation(self) -> bool:
        return self._policy.rotation_mode is RotationMode.RANDOM

    @random_rotation.setter
    def random_rotation(self, value: bool) -> None:
        if value:
            self.rotation_mode = RotationMode.RANDOM
        elif self.random_rotation:
            self.rotation_mode = RotationMode.RELATIVE

    @property
    def random_spacing(self) -> float:
        return self._policy.random_spacing

    @random_spacing.setter
    def random_spacing(self, value: float) -> None:
        self._update_policy(random_spacing=float(value))

    @property
    def random_offset(self) -> float:
        return self._policy.random_offset

    @random_offset.setter
    def random_offset(self, value: float) -> None:
        self._update_policy(random_offset=float(value))

    @property
    def footprint(self) -> ObjectFootprint:
        return self._policy.footprint

    @footprint.setter
    def footprint(self, value: ObjectFootprint) -> None:
        self._update_policy(footprint=value)

    @property
    def mode(self) -> LineMode:
        return self._path.kind

    @mode.setter
    def mode(self, value: LineMode) -> None:
        if value is self._path.kind:
            return
        logger.debug("switching path mode %s -> %s", self._path.kind.value, value.value)
        self._path = modes.switch_mode(self._path, value)
        self._fixed_preview = False
        self._drag_mode = DragMode.NONE
        self._dirty = True

    @property
    def tree_state(self) -> TreeState:
        """Growth stage for the next placed tree."""
        if self._growth_provider is None:
            return TreeState.ADULT
        return self._growth_provider.next_tree_state()

    def refresh_tree_control(self) -> None:
        self._dirty = True

    # ------------------------------------------------------------------
    # State inspection
    # ------------------------------------------------------------------

    @property
    def path(self) -> PathState:
        return self._path

    @property
    def drag_mode(self) -> DragMode:
        return self._drag_mode

    @property
    def fixed_preview(self) -> bool:
        return self._fixed_preview

    @property
    def tooltips(self) -> list[TooltipInfo]:
        return self._tooltips

    @property
    def interaction_state(self) -> InteractionState:
        if self._drag_mode is not DragMode.NONE:
            return InteractionState.DRAGGING
        if self._fixed_preview:
            return InteractionState.FIXED_PREVIEW
        if self._path.has_start and self._path.has_all_points:
            return InteractionState.AWAITING_COMMIT
        return InteractionState.IDLE

    # ------------------------------------------------------------------
    # Per-tick pipeline
    # ------------------------------------------------------------------

    def update(self, tick: TickInput) -> FrameOutput:
        """Process one tick of input and return what to draw."""
        self._tooltips = []
        if not self._active:
            return FrameOutput()

        # Edges are only seen for one tick, so these must not wait for a hit
        if tick.cancel_pressed:
            self.cancel()
            return self._emit(FrameOutput())
        if self._drag_mode is not DragMode.NONE and (
                tick.apply_released or tick.fixed_preview_released):
            self._drag_mode = DragMode.NONE

        position = self._fixed_pos if self._fixed_preview else self._previous_pos
        if tick.hit_position is not None:
            hit = snap_to_ground(vec3(tick.hit_position), self._sampler)
            position = self._fixed_pos if self._fixed_preview else hit
            consumed = False

            if self._drag_mode is not DragMode.NONE:
                if tick.apply_pressed or tick.fixed_preview_pressed:
                    # Re-click drops the point where it is
                    self._drag_mode = DragMode.NONE
                    consumed = True
                else:
                    self._drag_to(hit)
                    if self._drag_mode.role is self._path.terminal_role:
                        position = hit

            if not consumed:
                if (tick.fixed_preview_pressed and not self._fixed_preview
                        and self._path.has_start and self._path.has_all_points):
                    self._fixed_preview = True
                    self._fixed_pos = position.copy()
                    logger.debug("fixed preview at %s", self._fixed_pos)
                elif tick.apply_pressed or tick.continue_pressed or tick.fixed_preview_pressed:
                    if self._fixed_preview:
                        drag = modes.check_drag_hit(
                            self._path, hit, terminal=self._fixed_pos,
                            radius=self._pick_radius)
                        if drag is not DragMode.NONE:
                            self._drag_mode = drag
                            consumed = True
                        else:
                            self._fixed_preview = False

                    if not consumed:
                        committed = self._click(position, tick.continue_pressed)
                        if committed is not None:
                            return self._emit(FrameOutput(placed=committed))

            if not self._path.has_start:
                self._previous_pos = position.copy()
                cursor = PointData(position=position, rotation=self._cursor_rotation(position))
                return self._emit(FrameOutput(cursor=cursor))

        if position is None or not self._path.has_start:
            return self._emit(FrameOutput())

        if (self._dirty or self._previous_pos is None
                or position[0] != self._previous_pos[0]
                or position[2] != self._previous_pos[2]):
            self._previous_pos = position.copy()
            self._dirty = False
            self._result = modes.calculate_points(
                self._path, position, self._policy, self._sampler)

        overlay = modes.draw_overlay(self._path, position, self._result)
        markers = []
        if self._fixed_preview:
            markers = modes.draw_point_overlays(self._path, position, self._pick_radius)
        self._tooltips = overlay.tooltips

        return self._emit(FrameOutput(
            points=list(self._result.points),
            guides=overlay.guides,
            tooltips=overlay.tooltips,
            markers=markers,
        ))

    def _emit(self, frame: FrameOutput) -> FrameOutput:
        if self._render_sink is not None:
            self._render_sink.draw(frame)
        return frame

    def _drag_to(self, hit: np.ndarray) -> None:
        if self._drag_mode.role is self._path.terminal_role:
            self._fixed_pos = hit.copy()
        else:
            modes.handle_drag(self._path, self._drag_mode, hit)
        self._dirty = True

    def _click(self, position: np.ndarray, continuation: bool) -> Optional[PlacementBatch]:
        """Feed a click to the path; returns the batch if it committed."""
        if not modes.handle_click(self._path, position):
            self._dirty = True
            return None

        result = modes.calculate_points(self._path, position, self._policy, self._sampler)
        if result.is_empty:
            # Degenerate path: swallow the commit, nothing to place
            self._path.points.pop(self._path.terminal_role, None)
            self._path.committed = False
            return None

        footprint = self._policy.footprint
        batch = PlacementBatch(
            points=result.points,
            prefab=footprint.name,
            tree_state=self.tree_state if footprint.is_tree else None,
        )
        if self._placement_sink is not None:
            self._placement_sink.place(batch)
        logger.info(
            "placed %d x %s along %s path (spacing %.1f)",
            len(batch.points), batch.prefab, self._path.kind.value, result.spacing)

        modes.items_placed(self._path, position)
        modes.reset(self._path, continuation=continuation)
        self._result = PathResult()
        self._dirty = True
        return batch

    def _cursor_rotation(self, position: np.ndarray) -> float:
        if self._policy.rotation_mode is RotationMode.RANDOM:
            return random_rotation(position)
        return normalize_degrees(self._policy.rotation)

"""Tests for session.py: the per-tick interaction controller."""

import numpy as np
import pytest

from linetool.config.defaults import MIN_SPACING
from linetool.core.events import TickInput
from linetool.core.footprint import ObjectFootprint, TreeState
from linetool.core.geometry import FlatTerrain, vec3
from linetool.core.path.base import ControlRole, DragMode, LineMode
from linetool.core.session import FrameOutput, InteractionState, ToolSession
from linetool.core.spacing import RotationMode, SpacingMode, SpacingPolicy


class RecordingSink:
    def __init__(self):
        self.batches = []
        self.frames = []

    def place(self, batch):
        self.batches.append(batch)

    def draw(self, frame):
        self.frames.append(frame)


class FixedGrowth:
    def __init__(self, state):
        self.state = state

    def next_tree_state(self):
        return self.state


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def session(sink) -> ToolSession:
    s = ToolSession(
        policy=SpacingPolicy(spacing=20.0),
        placement_sink=sink,
        render_sink=sink,
    )
    s.activate()
    return s


def tick(session, x, z, **flags) -> FrameOutput:
    return session.update(TickInput(hit_position=vec3((x, z)), **flags))


def xs(points):
    return [pt.position[0] for pt in points]


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_inactive_session_ignores_input(self, sink):
        s = ToolSession(placement_sink=sink)
        frame = s.update(TickInput(hit_position=vec3((0, 0)), apply_pressed=True))
        assert frame == FrameOutput()
        assert not s.path.has_start

    def test_deactivate_clears_path(self, session):
        tick(session, 0, 0, apply_pressed=True)
        session.deactivate()
        assert not session.is_active
        assert not session.path.has_start
        assert session.tooltips == []

    def test_cursor_preview_before_start(self):
        s = ToolSession(height_sampler=FlatTerrain(2.5))
        s.activate()
        frame = tick(s, 5, 7)
        assert frame.cursor is not None
        np.testing.assert_allclose(frame.cursor.position, [5.0, 2.5, 7.0])
        assert frame.points == []
        assert s.interaction_state is InteractionState.IDLE

    def test_no_hit_and_no_start(self, session):
        assert session.update(TickInput()) == FrameOutput()


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------


class TestCommit:
    def test_straight_placement(self, session, sink):
        tick(session, 0, 0, apply_pressed=True)
        assert session.interaction_state is InteractionState.AWAITING_COMMIT
        preview = tick(session, 100, 0)
        assert xs(preview.points) == pytest.approx([0, 20, 40, 60, 80])
        assert preview.tooltips

        frame = tick(session, 100, 0, apply_pressed=True)
        assert len(sink.batches) == 1
        batch = sink.batches[0]
        assert frame.placed is batch
        assert xs(batch.points) == pytest.approx([0, 20, 40, 60, 80])
        assert all(pt.rotation == pytest.approx(0.0) for pt in batch.points)
        assert batch.prefab == "(none)"
        assert batch.tree_state is None
        assert not session.path.has_start

    def test_circle_placement(self, session, sink):
        session.mode = LineMode.CIRCLE
        tick(session, 0, 0, apply_pressed=True)
        tick(session, 50, 0, apply_pressed=True)
        assert len(sink.batches[0].points) == 16

    def test_curve_needs_three_clicks(self, session, sink):
        session.mode = LineMode.SIMPLE_CURVE
        tick(session, 0, 0, apply_pressed=True)
        tick(session, 50, 50, apply_pressed=True)
        assert sink.batches == []
        tick(session, 100, 0, apply_pressed=True)
        assert len(sink.batches) == 1

    def test_zero_length_commit_places_nothing(self, session, sink):
        tick(session, 0, 0, apply_pressed=True)
        tick(session, 0, 0, apply_pressed=True)
        assert sink.batches == []
        assert session.path.has_start
        assert ControlRole.END not in session.path.points
        # A real commit still works afterwards
        tick(session, 40, 0, apply_pressed=True)
        assert len(sink.batches) == 1

    def test_continuation_keeps_end_as_start(self, session, sink):
        tick(session, 0, 0, apply_pressed=True)
        tick(session, 100, 0, continue_pressed=True)
        assert len(sink.batches) == 1
        assert session.path.has_start
        np.testing.assert_allclose(session.path.get(ControlRole.START), [100.0, 0.0, 0.0])

    def test_circle_continuation_keeps_centre(self, session, sink):
        session.mode = LineMode.CIRCLE
        tick(session, 3, 4, apply_pressed=True)
        tick(session, 50, 0, continue_pressed=True)
        np.testing.assert_allclose(session.path.get(ControlRole.CENTER), [3.0, 0.0, 4.0])
        tick(session, 13, 4, apply_pressed=True)
        assert len(sink.batches) == 2

    def test_cancel_discards_path(self, session, sink):
        tick(session, 0, 0, apply_pressed=True)
        frame = tick(session, 50, 0, cancel_pressed=True)
        assert frame.points == []
        assert not session.path.has_start
        tick(session, 60, 0, apply_pressed=True)
        assert sink.batches == []

    def test_cancel_off_terrain(self, session, sink):
        tick(session, 0, 0, apply_pressed=True)
        frame = session.update(TickInput(cancel_pressed=True))
        assert frame.points == []
        assert not session.path.has_start
        tick(session, 60, 0, apply_pressed=True)
        assert sink.batches == []

    def test_curve_continuation_drops_elbow(self, session, sink):
        session.mode = LineMode.SIMPLE_CURVE
        tick(session, 0, 0, apply_pressed=True)
        tick(session, 50, 50, apply_pressed=True)
        tick(session, 100, 0, continue_pressed=True)
        assert len(sink.batches) == 1
        assert set(session.path.points) == {ControlRole.START}
        np.testing.assert_allclose(session.path.get(ControlRole.START), [100.0, 0.0, 0.0])

    def test_render_sink_gets_every_frame(self, session, sink):
        tick(session, 0, 0)
        tick(session, 0, 0, apply_pressed=True)
        tick(session, 30, 0)
        assert len(sink.frames) == 3


class TestTreeState:
    def test_tree_defaults_to_adult(self, session, sink):
        session.footprint = ObjectFootprint(name="Oak", length=6.0, width=6.0, is_tree=True)
        tick(session, 0, 0, apply_pressed=True)
        tick(session, 30, 0, apply_pressed=True)
        assert sink.batches[0].tree_state is TreeState.ADULT
        assert sink.batches[0].prefab == "Oak"

    def test_growth_provider(self, sink):
        s = ToolSession(
            placement_sink=sink,
            growth_provider=FixedGrowth(TreeState.ELDERLY),
        )
        s.activate()
        s.footprint = ObjectFootprint(name="Oak", length=6.0, width=6.0, is_tree=True)
        tick(s, 0, 0, apply_pressed=True)
        tick(s, 30, 0, apply_pressed=True)
        assert sink.batches[0].tree_state is TreeState.ELDERLY

    def test_non_tree_has_no_state(self, session, sink):
        session.footprint = ObjectFootprint(name="Lamp", length=0.6, width=0.6)
        tick(session, 0, 0, apply_pressed=True)
        tick(session, 30, 0, apply_pressed=True)
        assert sink.batches[0].tree_state is None


# ---------------------------------------------------------------------------
# Fixed preview and dragging
# ---------------------------------------------------------------------------


class TestFixedPreview:
    def _fix_at_60(self, session):
        tick(session, 0, 0, apply_pressed=True)
        tick(session, 50, 0)
        tick(session, 60, 0, fixed_preview_pressed=True)

    def test_enter_fixed_preview(self, session):
        self._fix_at_60(session)
        assert session.fixed_preview
        assert session.interaction_state is InteractionState.FIXED_PREVIEW

        frame = tick(session, 200, 0)
        assert xs(frame.points) == pytest.approx([0, 20, 40])
        assert [m.drag_mode for m in frame.markers] == [DragMode.START, DragMode.END]
        np.testing.assert_allclose(frame.markers[-1].position, [60.0, 0.0, 0.0])

    def test_modifier_click_before_start_places_start(self, session):
        tick(session, 5, 5, fixed_preview_pressed=True)
        assert session.path.has_start
        assert not session.fixed_preview

    def test_drag_end_point(self, session, sink):
        self._fix_at_60(session)
        tick(session, 61, 0, apply_pressed=True)
        assert session.drag_mode is DragMode.END
        assert session.interaction_state is InteractionState.DRAGGING
        assert sink.batches == []

        frame = tick(session, 85, 0)
        assert xs(frame.points) == pytest.approx([0, 20, 40, 60, 80])

        tick(session, 85, 0, apply_released=True)
        assert session.drag_mode is DragMode.NONE
        assert session.interaction_state is InteractionState.FIXED_PREVIEW

        # Click away from every control point: commits at the frozen end
        tick(session, 300, 0, apply_pressed=True)
        assert len(sink.batches) == 1
        assert xs(sink.batches[0].points) == pytest.approx([0, 20, 40, 60, 80])
        assert not session.fixed_preview

    def test_drag_start_point(self, session):
        self._fix_at_60(session)
        tick(session, 1, 1, fixed_preview_pressed=True)
        assert session.drag_mode is DragMode.START
        tick(session, -20, 0)
        tick(session, -20, 0, fixed_preview_released=True)
        np.testing.assert_allclose(session.path.get(ControlRole.START), [-20.0, 0.0, 0.0])
        frame = tick(session, 500, 0)
        assert xs(frame.points) == pytest.approx([-20, 0, 20, 40])

    def test_release_off_terrain_ends_drag(self, session):
        self._fix_at_60(session)
        tick(session, 1, 1, fixed_preview_pressed=True)
        tick(session, -20, 0)
        session.update(TickInput(fixed_preview_released=True))
        assert session.drag_mode is DragMode.NONE
        assert session.interaction_state is InteractionState.FIXED_PREVIEW

        # Pointer comes back with no button held: the start stays put
        tick(session, 300, 0)
        np.testing.assert_allclose(session.path.get(ControlRole.START), [-20.0, 0.0, 0.0])

    def test_reclick_ends_drag(self, session, sink):
        self._fix_at_60(session)
        tick(session, 61, 0, apply_pressed=True)
        tick(session, 70, 0)
        tick(session, 70, 0, apply_pressed=True)
        assert session.drag_mode is DragMode.NONE
        assert sink.batches == []

    def test_cancel_leaves_fixed_preview(self, session):
        self._fix_at_60(session)
        tick(session, 60, 0, cancel_pressed=True)
        assert not session.fixed_preview
        assert session.interaction_state is InteractionState.IDLE


# ---------------------------------------------------------------------------
# Settings accessors
# ---------------------------------------------------------------------------


class TestSettings:
    def test_spacing_change_recomputes(self, session):
        tick(session, 0, 0, apply_pressed=True)
        assert len(tick(session, 100, 0).points) == 5
        session.spacing = 25.0
        assert len(tick(session, 100, 0).points) == 4

    def test_invalid_values_raise(self, session):
        with pytest.raises(ValueError):
            session.spacing = 0.0
        with pytest.raises(ValueError):
            session.random_spacing = -1.0
        with pytest.raises(ValueError):
            session.random_offset = -1.0
        assert session.spacing == pytest.approx(20.0)

    def test_rotation_normalized(self, session):
        session.rotation = -90.0
        assert session.rotation == pytest.approx(270.0)

    def test_random_rotation_toggle(self, session):
        session.random_rotation = True
        assert session.rotation_mode is RotationMode.RANDOM
        session.random_rotation = False
        assert session.rotation_mode is RotationMode.RELATIVE

    def test_nudge_spacing(self, session):
        session.nudge_spacing(1.0)
        assert session.spacing == pytest.approx(21.0)
        session.nudge_spacing(-100.0)
        assert session.spacing == pytest.approx(MIN_SPACING)

    def test_display_spacing_rounded(self, session):
        session.spacing = 12.345
        assert session.display_spacing == 12.3
        assert session.effective_spacing == pytest.approx(12.345)

    def test_fence_mode_display(self, session):
        session.footprint = ObjectFootprint(name="Fence", length=8.0, width=0.4)
        session.spacing = 3.0
        session.spacing_mode = SpacingMode.FENCE
        assert session.display_spacing == 8.0

    def test_mode_switch_keeps_start(self, session):
        tick(session, 10, 0, apply_pressed=True)
        session.mode = LineMode.CIRCLE
        assert session.mode is LineMode.CIRCLE
        np.testing.assert_allclose(session.path.get(ControlRole.CENTER), [10.0, 0.0, 0.0])

    def test_mode_switch_after_commit_starts_at_last_end(self, session, sink):
        tick(session, 0, 0, apply_pressed=True)
        tick(session, 40, 0, apply_pressed=True)
        assert len(sink.batches) == 1
        assert not session.path.has_start
        session.mode = LineMode.CIRCLE
        np.testing.assert_allclose(session.path.get(ControlRole.CENTER), [40.0, 0.0, 0.0])

    def test_cancel_forgets_last_end(self, session):
        tick(session, 0, 0, apply_pressed=True)
        tick(session, 40, 0, apply_pressed=True)
        tick(session, 40, 0, cancel_pressed=True)
        session.mode = LineMode.CIRCLE
        assert not session.path.has_start

"""Top-down 2D canvas: turns mouse input into ticks and draws each frame."""

from __future__ import annotations

import numpy as np

from PyQt6.QtCore import QPointF, Qt, QTimer, pyqtSignal
from PyQt6.QtGui import QColor, QPainter, QPen, QPolygonF
from PyQt6.QtWidgets import QWidget

from ..core.events import InputEvent, InputQueue
from ..core.footprint import ObjectFootprint, footprint_polygon
from ..core.path.base import GuideStyle
from ..core.session import FrameOutput, PlacementBatch, ToolSession

TICK_MS = 16


class Viewport(QWidget):
    """Ground-plane view looking down the Y axis.

    Screen right is +X and screen up is +Z.  The widget is both the
    session's RenderSink and its PlacementSink: committed batches are kept
    and redrawn as footprint outlines every paint.

    Controls
    --------
    Left click          place control point / commit
    Ctrl + left click   fix preview, then drag control points
    Shift + left click  commit and continue from the end point
    Right click / Esc   cancel the current path
    PgUp / PgDn         nudge spacing
    Wheel / middle drag zoom / pan
    """

    spacing_nudged = pyqtSignal(float)
    placed = pyqtSignal(object)   # PlacementBatch

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(400, 300)

        self._session: ToolSession | None = None
        self._queue = InputQueue()
        self._hit: np.ndarray | None = None
        self._fixed_button_down = False

        self._scale = 4.0              # pixels per world unit
        self._pan = QPointF(0.0, 0.0)  # world XZ at the widget centre
        self._pan_anchor: QPointF | None = None

        self._frame = FrameOutput()
        self._placed: list[tuple[ObjectFootprint, PlacementBatch]] = []

        self._timer = QTimer(self)
        self._timer.timeout.connect(self._tick)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def attach(self, session: ToolSession) -> None:
        self._session = session
        session.activate()
        self._timer.start(TICK_MS)

    def detach(self) -> None:
        self._timer.stop()
        if self._session is not None:
            self._session.deactivate()
        self._session = None

    def clear(self) -> None:
        self._placed.clear()
        self.update()

    @property
    def placed_count(self) -> int:
        return sum(len(b.points) for _, b in self._placed)

    # RenderSink
    def draw(self, frame: FrameOutput) -> None:
        self._frame = frame
        self.update()

    # PlacementSink
    def place(self, batch: PlacementBatch) -> None:
        footprint = self._session.footprint if self._session else ObjectFootprint(batch.prefab)
        self._placed.append((footprint, batch))
        self.placed.emit(batch)

    # ------------------------------------------------------------------
    # Coordinate mapping
    # ------------------------------------------------------------------

    def _to_screen(self, position) -> QPointF:
        cx, cy = self.width() / 2.0, self.height() / 2.0
        return QPointF(
            cx + (float(position[0]) - self._pan.x()) * self._scale,
            cy - (float(position[2]) - self._pan.y()) * self._scale,
        )

    def _to_world(self, point: QPointF) -> np.ndarray:
        cx, cy = self.width() / 2.0, self.height() / 2.0
        x = (point.x() - cx) / self._scale + self._pan.x()
        z = (cy - point.y()) / self._scale + self._pan.y()
        return np.array([x, 0.0, z])

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def _tick(self) -> None:
        if self._session is None:
            return
        self._session.update(self._queue.drain(self._hit))

    def mouseMoveEvent(self, event) -> None:
        if self._pan_anchor is not None:
            delta = event.position() - self._pan_anchor
            self._pan = QPointF(
                self._pan.x() - delta.x() / self._scale,
                self._pan.y() + delta.y() / self._scale,
            )
            self._pan_anchor = event.position()
            self.update()
        self._hit = self._to_world(event.position())

    def mousePressEvent(self, event) -> None:
        self._hit = self._to_world(event.position())
        button = event.button()
        mods = event.modifiers()
        if button == Qt.MouseButton.LeftButton:
            if mods & Qt.KeyboardModifier.ControlModifier:
                self._fixed_button_down = True
                self._queue.push(InputEvent.FIXED_PREVIEW_DOWN)
            elif mods & Qt.KeyboardModifier.ShiftModifier:
                self._queue.push(InputEvent.CONTINUE_DOWN)
            else:
                self._queue.push(InputEvent.APPLY_DOWN)
        elif button == Qt.MouseButton.RightButton:
            self._queue.push(InputEvent.CANCEL)
        elif button == Qt.MouseButton.MiddleButton:
            self._pan_anchor = event.position()

    def mouseReleaseEvent(self, event) -> None:
        button = event.button()
        if button == Qt.MouseButton.LeftButton:
            if self._fixed_button_down:
                self._fixed_button_down = False
                self._queue.push(InputEvent.FIXED_PREVIEW_UP)
            else:
                self._queue.push(InputEvent.APPLY_UP)
        elif button == Qt.MouseButton.MiddleButton:
            self._pan_anchor = None

    def leaveEvent(self, event) -> None:
        self._hit = None
        super().leaveEvent(event)

    def wheelEvent(self, event) -> None:
        factor = 1.15 if event.angleDelta().y() > 0 else 1 / 1.15
        self._scale = min(max(self._scale * factor, 0.1), 200.0)
        self.update()

    def keyPressEvent(self, event) -> None:
        key = event.key()
        if key == Qt.Key.Key_Escape:
            self._queue.push(InputEvent.CANCEL)
        elif key == Qt.Key.Key_PageUp:
            self.spacing_nudged.emit(1.0)
        elif key == Qt.Key.Key_PageDown:
            self.spacing_nudged.emit(-1.0)
        else:
            super().keyPressEvent(event)

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), QColor("#f4f1e8"))
        self._paint_grid(painter)

        # Committed objects
        painter.setPen(QPen(QColor("#3b6e3b"), 1.2))
        painter.setBrush(QColor(90, 150, 90, 90))
        for footprint, batch in self._placed:
            for pt in batch.points:
                self._paint_outline(painter, footprint, pt.position, pt.rotation)

        frame = self._frame
        for guide in frame.guides:
            if guide.style is GuideStyle.CONSTRUCTION:
                pen = QPen(QColor("#888888"), 1.0, Qt.PenStyle.DashLine)
            else:
                pen = QPen(QColor("#2a6fdb"), 2.0)
            painter.setPen(pen)
            painter.drawLine(self._to_screen(guide.start), self._to_screen(guide.end))

        # Preview objects
        footprint = self._session.footprint if self._session else ObjectFootprint("(none)")
        painter.setPen(QPen(QColor("#2a6fdb"), 1.0))
        painter.setBrush(QColor(42, 111, 219, 60))
        preview = list(frame.points)
        if frame.cursor is not None:
            preview.append(frame.cursor)
        for pt in preview:
            self._paint_outline(painter, footprint, pt.position, pt.rotation)
            painter.drawEllipse(self._to_screen(pt.position), 2.5, 2.5)

        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.setPen(QPen(QColor("#d9822b"), 1.5))
        for marker in frame.markers:
            r = marker.radius * self._scale
            painter.drawEllipse(self._to_screen(marker.position), r, r)

        painter.setPen(QColor("#222222"))
        for tip in frame.tooltips:
            painter.drawText(self._to_screen(tip.position) + QPointF(6, -6), tip.text)

        painter.end()

    def _paint_outline(self, painter: QPainter, footprint, position, rotation) -> None:
        outline = footprint_polygon(footprint, position, rotation)
        poly = QPolygonF([
            self._to_screen((x, 0.0, z)) for x, z in outline.exterior.coords
        ])
        painter.drawPolygon(poly)

    def _paint_grid(self, painter: QPainter) -> None:
        step = 10.0
        while step * self._scale < 20:
            step *= 10
        painter.setPen(QPen(QColor("#e0dccf"), 1.0))
        lo = self._to_world(QPointF(0, self.height()))
        hi = self._to_world(QPointF(self.width(), 0))
        for x in np.arange(np.floor(lo[0] / step) * step, hi[0], step):
            painter.drawLine(self._to_screen((x, 0, lo[2])), self._to_screen((x, 0, hi[2])))
        for z in np.arange(np.floor(lo[2] / step) * step, hi[2], step):
            painter.drawLine(self._to_screen((lo[0], 0, z)), self._to_screen((hi[0], 0, z)))

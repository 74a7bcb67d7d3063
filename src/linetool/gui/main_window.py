"""Main application window with docked panel layout."""

from __future__ import annotations

import logging
from pathlib import Path

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import (
    QDockWidget,
    QMainWindow,
    QMessageBox,
    QStatusBar,
)

from ..config.settings import ToolSettings
from ..core.footprint import ObjectFootprint
from ..core.path.base import LineMode
from ..core.session import PlacementBatch, ToolSession

from .panels.footprint_panel import FootprintPanel
from .panels.settings_panel import SettingsPanel
from .viewport import Viewport
from .workers import FootprintWorker

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Top-level application window.

    Layout
    ------
    Left dock:   Object → Path settings panels (stacked)
    Center:      top-down canvas
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Line Tool")
        self.resize(1280, 800)

        self._settings = ToolSettings.load()
        self._worker: FootprintWorker | None = None

        self._setup_ui()
        self._session = ToolSession(
            policy=self._initial_policy(),
            mode=LineMode(self._settings.line_mode),
            placement_sink=self._viewport,
            render_sink=self._viewport,
        )
        self._settings_panel.apply_settings(self._settings)
        if self._settings.footprint_name:
            self._footprint_panel.select(self._settings.footprint_name)
        self._footprint_panel.last_dir = self._settings.last_open_dir
        self._connect_signals()

        self._viewport.attach(self._session)
        self._viewport.setFocus()

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------

    def _setup_ui(self) -> None:
        self._viewport = Viewport(self)
        self.setCentralWidget(self._viewport)

        self._footprint_panel = FootprintPanel()
        self._settings_panel = SettingsPanel()

        for panel, title in [
            (self._footprint_panel, "Object"),
            (self._settings_panel, "Path"),
        ]:
            dock = QDockWidget(title, self)
            dock.setWidget(panel)
            dock.setFeatures(
                QDockWidget.DockWidgetFeature.DockWidgetMovable |
                QDockWidget.DockWidgetFeature.DockWidgetFloatable,
            )
            self.addDockWidget(Qt.DockWidgetArea.LeftDockWidgetArea, dock)

        clear_action = QAction("Clear placed objects", self)
        clear_action.triggered.connect(self._viewport.clear)
        self.menuBar().addMenu("&Edit").addAction(clear_action)

        self._status = QStatusBar()
        self.setStatusBar(self._status)
        self._status.showMessage("Click to place the start point")

    def _initial_policy(self):
        footprint = self._footprint_panel.footprint_library().get(self._settings.footprint_name)
        try:
            return self._settings.to_policy(footprint)
        except ValueError as exc:
            logger.warning("ignoring invalid saved settings: %s", exc)
            self._settings = ToolSettings()
            return self._settings.to_policy(footprint)

    def _connect_signals(self) -> None:
        self._settings_panel.mode_changed.connect(self._on_mode_changed)
        self._settings_panel.policy_changed.connect(self._on_policy_changed)
        self._footprint_panel.footprint_changed.connect(self._on_footprint_changed)
        self._footprint_panel.load_requested.connect(self._start_footprint_worker)
        self._viewport.spacing_nudged.connect(self._on_spacing_nudged)
        self._viewport.placed.connect(self._on_placed)

    # ------------------------------------------------------------------
    # Session updates
    # ------------------------------------------------------------------

    def _on_mode_changed(self, mode: LineMode) -> None:
        self._session.mode = mode

    def _on_policy_changed(self, name: str, value) -> None:
        try:
            setattr(self._session, name, value)
        except ValueError as exc:
            self._status.showMessage(f"Error: {exc}")

    def _on_footprint_changed(self, footprint: ObjectFootprint) -> None:
        self._session.footprint = footprint
        self._session.refresh_tree_control()
        self._footprint_panel.show_tree_state(
            self._session.tree_state if footprint.is_tree else None)

    def _on_spacing_nudged(self, delta: float) -> None:
        self._session.nudge_spacing(delta)
        self._settings_panel.set_spacing(self._session.spacing)
        self._status.showMessage(f"Spacing {self._session.display_spacing:.1f}")

    def _on_placed(self, batch: PlacementBatch) -> None:
        suffix = f" ({batch.tree_state.value})" if batch.tree_state else ""
        self._status.showMessage(
            f"Placed {len(batch.points)} x {batch.prefab}{suffix}  "
            f"[{self._viewport.placed_count:,} total]"
        )

    # ------------------------------------------------------------------
    # Async footprint measuring
    # ------------------------------------------------------------------

    def _start_footprint_worker(self, path: Path) -> None:
        self._footprint_panel.set_loading(True)
        self._status.showMessage(f"Measuring {path.name}…")

        self._worker = FootprintWorker(path, parent=self)
        self._worker.finished.connect(self._on_footprint_measured)
        self._worker.error.connect(self._on_worker_error)
        self._worker.progress.connect(self._status.showMessage)
        self._worker.start()

    def _on_footprint_measured(self, footprint: ObjectFootprint) -> None:
        self._footprint_panel.set_loading(False)
        self._footprint_panel.add_footprint(footprint)
        self._status.showMessage(
            f"{footprint.name}: {footprint.length:.2f} x {footprint.width:.2f}"
        )

    def _on_worker_error(self, message: str) -> None:
        self._footprint_panel.set_loading(False)
        self._status.showMessage(f"Error: {message}")
        QMessageBox.critical(self, "Mesh Error", message)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def closeEvent(self, event) -> None:
        self._viewport.detach()
        settings = ToolSettings.from_policy(self._session.policy, self._session.mode)
        settings.last_open_dir = self._footprint_panel.last_dir
        try:
            settings.save()
        except OSError as exc:
            logger.warning("could not save settings: %s", exc)
        super().closeEvent(event)

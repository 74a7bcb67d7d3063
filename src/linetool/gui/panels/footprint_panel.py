"""Object selection panel: library footprints plus mesh-measured ones."""

from __future__ import annotations

from pathlib import Path

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QComboBox,
    QFileDialog,
    QFormLayout,
    QLabel,
    QPushButton,
    QWidget,
)

from ...config.defaults import build_default_footprint_library
from ...core.footprint import FootprintLibrary, ObjectFootprint, TreeState


class FootprintPanel(QWidget):
    """Picks the object to place and shows its extents.

    ``load_requested`` carries the chosen mesh Path; the measuring happens
    off the main thread in MainWindow via FootprintWorker.
    """

    footprint_changed = pyqtSignal(object)  # ObjectFootprint
    load_requested = pyqtSignal(object)     # pathlib.Path

    def __init__(self, parent=None):
        super().__init__(parent)
        self._lib = build_default_footprint_library()

        layout = QFormLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)

        self._combo = QComboBox()
        self._combo.addItem("(none)", userData=ObjectFootprint(name="(none)"))
        for fp in self._lib.list_footprints():
            self._combo.addItem(fp.name, userData=fp)
        self._combo.currentIndexChanged.connect(self._on_select)
        layout.addRow("Object:", self._combo)

        self._load_btn = QPushButton("Measure Mesh...")
        self._load_btn.clicked.connect(self._on_load)
        layout.addRow(self._load_btn)

        self._length_lbl = QLabel("-")
        self._width_lbl = QLabel("-")
        self._tree_lbl = QLabel("-")
        layout.addRow("Length:", self._length_lbl)
        layout.addRow("Width:", self._width_lbl)
        layout.addRow("Tree:", self._tree_lbl)

        self._last_dir = ""

    def footprint_library(self) -> FootprintLibrary:
        return self._lib

    def current_footprint(self) -> ObjectFootprint:
        return self._combo.currentData()

    def select(self, name: str) -> None:
        idx = self._combo.findText(name)
        if idx >= 0:
            self._combo.setCurrentIndex(idx)

    def set_loading(self, loading: bool) -> None:
        self._load_btn.setEnabled(not loading)
        self._load_btn.setText("Measuring…" if loading else "Measure Mesh...")

    def add_footprint(self, footprint: ObjectFootprint) -> None:
        """Add a measured footprint to the library and select it."""
        self._lib.add(footprint)
        idx = self._combo.findText(footprint.name)
        if idx < 0:
            self._combo.addItem(footprint.name, userData=footprint)
            idx = self._combo.count() - 1
        else:
            self._combo.setItemData(idx, footprint)
        self._combo.setCurrentIndex(idx)
        self._on_select(idx)

    def show_tree_state(self, state: TreeState | None) -> None:
        self._tree_lbl.setText(state.value if state is not None else "-")

    @property
    def last_dir(self) -> str:
        return self._last_dir

    @last_dir.setter
    def last_dir(self, value: str) -> None:
        self._last_dir = value

    def _on_select(self, index: int) -> None:
        fp = self._combo.itemData(index)
        if fp is None:
            return
        self._length_lbl.setText(f"{fp.length:.2f}")
        self._width_lbl.setText(f"{fp.width:.2f}")
        self.footprint_changed.emit(fp)

    def _on_load(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self,
            "Measure Object Mesh",
            self._last_dir,
            "3D Models (*.stl *.STL *.obj *.OBJ *.ply *.PLY "
            "*.glb *.GLB *.gltf *.GLTF *.3mf *.3MF);;All Files (*)",
        )
        if path:
            self._last_dir = str(Path(path).parent)
            self.load_requested.emit(Path(path))

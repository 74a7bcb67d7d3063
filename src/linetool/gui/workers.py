"""QThread workers for background computation."""

from __future__ import annotations

from pathlib import Path

from PyQt6.QtCore import QThread, pyqtSignal

from ..core.footprint import footprint_from_mesh


class FootprintWorker(QThread):
    """Measures a mesh file's footprint in a background thread.

    Loading large meshes through trimesh can take seconds, so the canvas
    keeps ticking while this runs.
    """

    finished = pyqtSignal(object)   # ObjectFootprint
    error = pyqtSignal(str)
    progress = pyqtSignal(str)

    def __init__(self, path: Path, parent=None):
        super().__init__(parent)
        self._path = path

    def run(self) -> None:
        try:
            self.progress.emit(f"Measuring {self._path.name}…")
            footprint = footprint_from_mesh(self._path)
            self.finished.emit(footprint)
        except Exception as exc:
            self.error.emit(str(exc))

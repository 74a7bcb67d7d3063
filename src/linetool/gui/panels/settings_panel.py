"""Path shape, spacing and rotation controls."""

from __future__ import annotations

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDoubleSpinBox,
    QFormLayout,
    QGroupBox,
    QVBoxLayout,
    QWidget,
)

from ...config.defaults import MIN_SPACING
from ...config.settings import ToolSettings
from ...core.path.base import LineMode
from ...core.spacing import RotationMode, SpacingMode


class SettingsPanel(QWidget):
    """Edits the line mode and spacing policy.

    Emits ``mode_changed`` and ``policy_changed``; MainWindow pushes the
    new values into the ToolSession.
    """

    mode_changed = pyqtSignal(object)      # LineMode
    policy_changed = pyqtSignal(str, object)   # attribute name, new value

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)

        form_widget = QWidget()
        form = QFormLayout(form_widget)
        form.setContentsMargins(8, 4, 8, 4)

        self._mode_combo = QComboBox()
        self._mode_combo.addItem("Straight line", userData=LineMode.STRAIGHT)
        self._mode_combo.addItem("Simple curve", userData=LineMode.SIMPLE_CURVE)
        self._mode_combo.addItem("Circle", userData=LineMode.CIRCLE)
        self._mode_combo.currentIndexChanged.connect(
            lambda _: self.mode_changed.emit(self._mode_combo.currentData()))
        form.addRow("Shape:", self._mode_combo)

        # Spacing
        spacing_group = QGroupBox("Spacing")
        spacing_form = QFormLayout(spacing_group)
        self._spacing_mode = QComboBox()
        self._spacing_mode.addItem("Manual", userData=SpacingMode.MANUAL)
        self._spacing_mode.addItem("Fence (length)", userData=SpacingMode.FENCE)
        self._spacing_mode.addItem("Wall (width)", userData=SpacingMode.WALL)
        self._spacing_mode.addItem("Full length", userData=SpacingMode.FULL_LENGTH)
        self._spacing_mode.currentIndexChanged.connect(self._on_spacing_mode)
        self._spacing = QDoubleSpinBox()
        self._spacing.setRange(MIN_SPACING, 1000.0)
        self._spacing.setDecimals(1)
        self._spacing.setSingleStep(1.0)
        self._spacing.valueChanged.connect(
            lambda v: self.policy_changed.emit("spacing", v))
        self._random_spacing = QDoubleSpinBox()
        self._random_spacing.setRange(0.0, 1000.0)
        self._random_spacing.setDecimals(1)
        self._random_spacing.valueChanged.connect(
            lambda v: self.policy_changed.emit("random_spacing", v))
        self._random_offset = QDoubleSpinBox()
        self._random_offset.setRange(0.0, 1000.0)
        self._random_offset.setDecimals(1)
        self._random_offset.valueChanged.connect(
            lambda v: self.policy_changed.emit("random_offset", v))
        spacing_form.addRow("Mode:", self._spacing_mode)
        spacing_form.addRow("Spacing:", self._spacing)
        spacing_form.addRow("Random spacing:", self._random_spacing)
        spacing_form.addRow("Random offset:", self._random_offset)
        form.addRow(spacing_group)

        # Rotation
        rotation_group = QGroupBox("Rotation")
        rotation_form = QFormLayout(rotation_group)
        self._rotation = QDoubleSpinBox()
        self._rotation.setRange(-360.0, 360.0)
        self._rotation.setWrapping(True)
        self._rotation.setSingleStep(15.0)
        self._rotation.valueChanged.connect(
            lambda v: self.policy_changed.emit("rotation", v))
        self._relative = QCheckBox("Relative to path")
        self._relative.toggled.connect(self._on_rotation_mode)
        self._random_rotation = QCheckBox("Random")
        self._random_rotation.toggled.connect(self._on_rotation_mode)
        rotation_form.addRow("Angle:", self._rotation)
        rotation_form.addRow(self._relative)
        rotation_form.addRow(self._random_rotation)
        form.addRow(rotation_group)

        layout.addWidget(form_widget)
        layout.addStretch()

    def apply_settings(self, settings: ToolSettings) -> None:
        """Populate every control from persisted settings."""
        for combo, value in [
            (self._mode_combo, LineMode(settings.line_mode)),
            (self._spacing_mode, SpacingMode(settings.spacing_mode)),
        ]:
            idx = combo.findData(value)
            if idx >= 0:
                combo.setCurrentIndex(idx)
        self._spacing.setValue(settings.spacing)
        self._random_spacing.setValue(settings.random_spacing)
        self._random_offset.setValue(settings.random_offset)
        self._rotation.setValue(settings.rotation)
        rotation_mode = RotationMode(settings.rotation_mode)
        self._random_rotation.setChecked(rotation_mode is RotationMode.RANDOM)
        self._relative.setChecked(rotation_mode is RotationMode.RELATIVE)

    def set_spacing(self, value: float) -> None:
        """Reflect a spacing change made elsewhere (keyboard nudge)."""
        self._spacing.blockSignals(True)
        self._spacing.setValue(value)
        self._spacing.blockSignals(False)

    def _on_spacing_mode(self, _index: int) -> None:
        mode = self._spacing_mode.currentData()
        self._spacing.setEnabled(mode.spacing_is_editable)
        self.policy_changed.emit("spacing_mode", mode)

    def _on_rotation_mode(self, _checked: bool) -> None:
        if self._random_rotation.isChecked():
            mode = RotationMode.RANDOM
        elif self._relative.isChecked():
            mode = RotationMode.RELATIVE
        else:
            mode = RotationMode.ABSOLUTE
        self._relative.setEnabled(mode is not RotationMode.RANDOM)
        self._rotation.setEnabled(mode is not RotationMode.RANDOM)
        self.policy_changed.emit("rotation_mode", mode)

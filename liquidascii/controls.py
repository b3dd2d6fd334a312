"""
Control panel — all user-adjustable parameters for the fluid.

Organised into groups:
  - Appearance (colour scheme, glyph palette, font size)
  - Physics (gravity, viscosity, separation, ambient swirl)
  - Pointer (repulsion radius / force)
  - Particles (count, stir, heat)
  - Actions (pause, reset, save)
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import QColor
from PyQt5.QtWidgets import (
    QCheckBox,
    QColorDialog,
    QComboBox,
    QFrame,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QScrollArea,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from .canvas import LiquidCanvas
from .engine import MAX_PARTICLES, FluidEngine
from .palettes import (
    GLYPH_PALETTES,
    SCHEMES,
    get_palette,
    get_scheme,
    list_palettes,
    list_schemes,
    recolor,
)
from .renderer import MAX_FONT_SIZE, MIN_FONT_SIZE

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Labelled slider helper
# ---------------------------------------------------------------------------

class LSlider(QWidget):
    """Horizontal slider with label and readout.

    ``scale`` divides the integer slider position for the readout, so a
    viscosity slider can run 800–1000 and show 0.800–1.000.
    """

    valueChanged = pyqtSignal(int)

    def __init__(self, label, lo, hi, val, scale=1, parent=None):
        super().__init__(parent)
        lay = QHBoxLayout(self)
        lay.setContentsMargins(0, 1, 0, 1)

        lbl = QLabel(label)
        lbl.setFixedWidth(110)
        lay.addWidget(lbl)

        self._slider = QSlider(Qt.Horizontal)
        self._slider.setRange(lo, hi)
        self._slider.setValue(val)
        lay.addWidget(self._slider, stretch=1)

        self._scale = scale
        self._ro = QLabel(self._fmt(val))
        self._ro.setFixedWidth(48)
        self._ro.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
        lay.addWidget(self._ro)

        self._slider.valueChanged.connect(self._changed)

    def _fmt(self, v):
        if self._scale == 1:
            return str(v)
        digits = len(str(self._scale)) - 1
        return f"{v / self._scale:.{digits}f}"

    def _changed(self, v):
        self._ro.setText(self._fmt(v))
        self.valueChanged.emit(v)

    def value(self):
        return self._slider.value()

    def setValue(self, v):
        self._slider.setValue(v)


# ---------------------------------------------------------------------------
# Control panel
# ---------------------------------------------------------------------------

class ControlPanel(QWidget):
    """Side panel with all fluid controls."""

    save_requested = pyqtSignal()

    def __init__(
        self,
        canvas: LiquidCanvas,
        engine: FluidEngine,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.canvas = canvas
        self.engine = engine
        params = engine.params
        self.setFixedWidth(320)

        # ── Scroll wrapper ────────────────────────────────────────────────
        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.NoFrame)
        outer.addWidget(scroll)

        inner = QWidget()
        scroll.setWidget(inner)
        layout = QVBoxLayout(inner)
        layout.setSpacing(8)

        # ══════════════════════════════════════════════════════════════════
        # APPEARANCE
        # ══════════════════════════════════════════════════════════════════
        look_group = QGroupBox("Appearance")
        lg = QVBoxLayout(look_group)

        self._scheme_combo = QComboBox()
        for key in list_schemes():
            self._scheme_combo.addItem(SCHEMES[key].name, key)
        idx = self._scheme_combo.findText(canvas.scheme.name)
        if idx >= 0:
            self._scheme_combo.setCurrentIndex(idx)
        self._scheme_combo.currentIndexChanged.connect(self._on_scheme_changed)
        lg.addWidget(self._scheme_combo)

        colour_row = QHBoxLayout()
        text_btn = QPushButton("Text…")
        text_btn.clicked.connect(lambda: self._pick_color("text"))
        colour_row.addWidget(text_btn)
        bg_btn = QPushButton("Background…")
        bg_btn.clicked.connect(lambda: self._pick_color("background"))
        colour_row.addWidget(bg_btn)
        lg.addLayout(colour_row)

        lg.addWidget(QLabel("Glyphs (light → dense):"))
        self._palette_combo = QComboBox()
        for key in list_palettes():
            self._palette_combo.addItem(f"{key}  {GLYPH_PALETTES[key]}", key)
        current = "".join(canvas.renderer.characters)
        for i, key in enumerate(list_palettes()):
            if GLYPH_PALETTES[key] == current:
                self._palette_combo.setCurrentIndex(i)
        self._palette_combo.currentIndexChanged.connect(self._on_palette_changed)
        lg.addWidget(self._palette_combo)

        self._chars_edit = QLineEdit("".join(canvas.renderer.characters))
        self._chars_edit.textChanged.connect(self._on_chars_edited)
        lg.addWidget(self._chars_edit)

        self._font_slider = LSlider("Font Size", MIN_FONT_SIZE, MAX_FONT_SIZE,
                                    canvas.renderer.font_size)
        self._font_slider.valueChanged.connect(self.canvas.set_font_size)
        lg.addWidget(self._font_slider)

        layout.addWidget(look_group)

        # ══════════════════════════════════════════════════════════════════
        # PHYSICS
        # ══════════════════════════════════════════════════════════════════
        phys_group = QGroupBox("Physics")
        pg = QVBoxLayout(phys_group)

        self._gravity_slider = LSlider("Gravity", -100, 100, int(params.gravity_y * 100), 100)
        self._gravity_slider.valueChanged.connect(
            lambda v: setattr(self.engine.params, "gravity_y", v / 100)
        )
        pg.addWidget(self._gravity_slider)

        self._gravity_x_slider = LSlider("Gravity X", -100, 100, int(params.gravity_x * 100), 100)
        self._gravity_x_slider.valueChanged.connect(
            lambda v: setattr(self.engine.params, "gravity_x", v / 100)
        )
        pg.addWidget(self._gravity_x_slider)

        self._viscosity_slider = LSlider("Viscosity", 800, 1000, int(params.viscosity * 1000), 1000)
        self._viscosity_slider.valueChanged.connect(
            lambda v: setattr(self.engine.params, "viscosity", v / 1000)
        )
        pg.addWidget(self._viscosity_slider)

        self._stiffness_slider = LSlider("Stiffness", 0, 100, int(params.separation_stiffness * 100), 100)
        self._stiffness_slider.valueChanged.connect(
            lambda v: setattr(self.engine.params, "separation_stiffness", v / 100)
        )
        pg.addWidget(self._stiffness_slider)

        self._ambient_check = QCheckBox("Ambient swirl")
        self._ambient_check.setChecked(params.ambient_motion)
        self._ambient_check.toggled.connect(
            lambda on: setattr(self.engine.params, "ambient_motion", on)
        )
        pg.addWidget(self._ambient_check)

        self._ambient_slider = LSlider("Swirl", 0, 100, int(params.ambient_strength * 1000), 1000)
        self._ambient_slider.valueChanged.connect(
            lambda v: setattr(self.engine.params, "ambient_strength", v / 1000)
        )
        pg.addWidget(self._ambient_slider)

        layout.addWidget(phys_group)

        # ══════════════════════════════════════════════════════════════════
        # POINTER
        # ══════════════════════════════════════════════════════════════════
        ptr_group = QGroupBox("Pointer")
        rg = QVBoxLayout(ptr_group)

        self._radius_slider = LSlider("Radius", 10, 300, int(params.repulsion_radius))
        self._radius_slider.valueChanged.connect(
            lambda v: setattr(self.engine.params, "repulsion_radius", float(v))
        )
        rg.addWidget(self._radius_slider)

        self._repulsion_slider = LSlider("Repulsion", 0, 30, int(params.repulsion_force * 10), 10)
        self._repulsion_slider.valueChanged.connect(
            lambda v: setattr(self.engine.params, "repulsion_force", v / 10)
        )
        rg.addWidget(self._repulsion_slider)

        layout.addWidget(ptr_group)

        # ══════════════════════════════════════════════════════════════════
        # PARTICLES
        # ══════════════════════════════════════════════════════════════════
        part_group = QGroupBox("Particles")
        bg = QVBoxLayout(part_group)

        self._count_slider = LSlider("Count", 0, MAX_PARTICLES, engine.particle_count)
        self._count_slider.valueChanged.connect(self._on_count)
        bg.addWidget(self._count_slider)

        mix_row = QHBoxLayout()
        stir_btn = QPushButton("Stir")
        stir_btn.clicked.connect(lambda: self.engine.stir(0.8))
        mix_row.addWidget(stir_btn)
        heat_btn = QPushButton("Heat")
        heat_btn.clicked.connect(lambda: self.engine.heat_burst(0.3))
        mix_row.addWidget(heat_btn)
        cool_btn = QPushButton("Cool")
        cool_btn.clicked.connect(lambda: self.engine.heat_burst(-0.4))
        mix_row.addWidget(cool_btn)
        bg.addLayout(mix_row)

        layout.addWidget(part_group)

        # ══════════════════════════════════════════════════════════════════
        # ACTIONS
        # ══════════════════════════════════════════════════════════════════
        act_row = QHBoxLayout()
        self._pause_btn = QPushButton("⏸  Pause")
        self._pause_btn.setCheckable(True)
        self._pause_btn.toggled.connect(self._on_pause)
        act_row.addWidget(self._pause_btn)
        reset_btn = QPushButton("Reset")
        reset_btn.clicked.connect(self._on_reset)
        act_row.addWidget(reset_btn)
        save_btn = QPushButton("Save…")
        save_btn.clicked.connect(self.save_requested.emit)
        act_row.addWidget(save_btn)
        layout.addLayout(act_row)

        self._status = QLabel("")
        self._status.setWordWrap(True)
        layout.addWidget(self._status)

        layout.addStretch()

        # ── wire signals ──────────────────────────────────────────────────
        canvas.fps_changed.connect(self._on_fps)

    # ── appearance slots ──────────────────────────────────────────────────

    def _on_scheme_changed(self, idx: int) -> None:
        key = self._scheme_combo.currentData()
        try:
            self.canvas.set_scheme(get_scheme(key))
        except KeyError as e:
            logger.error("Scheme error: %s", e)

    def _pick_color(self, role: str) -> None:
        scheme = self.canvas.scheme
        current = scheme.text if role == "text" else scheme.background
        color = QColorDialog.getColor(QColor(*current), self, f"Pick {role} colour")
        if not color.isValid():
            return
        custom = recolor(scheme, role, (color.red(), color.green(), color.blue()))
        self.canvas.set_scheme(custom)
        logger.info("Custom scheme: text %s on %s", custom.text_hex, custom.background_hex)

    def _on_palette_changed(self, idx: int) -> None:
        key = self._palette_combo.currentData()
        try:
            chars = get_palette(key)
        except KeyError as e:
            logger.error("Palette error: %s", e)
            return
        # updating the line edit applies the palette through _on_chars_edited
        self._chars_edit.setText(chars)

    def _on_chars_edited(self, text: str) -> None:
        self.canvas.set_characters(text)

    # ── particle slots ────────────────────────────────────────────────────

    def _on_count(self, count: int) -> None:
        self.engine.set_particle_count(count)

    # ── action slots ──────────────────────────────────────────────────────

    def _on_pause(self, checked: bool) -> None:
        self.canvas.paused = checked
        self._pause_btn.setText("▶  Play" if checked else "⏸  Pause")

    def _on_reset(self) -> None:
        self.engine.reset(self._count_slider.value())

    def _on_fps(self, fps: float) -> None:
        lo, hi = self.engine.temperature_range()
        self._status.setText(
            f"{self.engine.particle_count} particles  •  {fps:.0f} fps  •  "
            f"temp {lo:.2f}–{hi:.2f} (mean {self.engine.mean_temperature:.2f})"
        )

    def toggle_pause(self) -> None:
        self._pause_btn.setChecked(not self._pause_btn.isChecked())

    def reset(self) -> None:
        self._on_reset()

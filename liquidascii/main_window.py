"""
Main window — canvas on the left, control panel on the right, menus on top.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from PyQt5.QtGui import QKeySequence
from PyQt5.QtWidgets import (
    QAction,
    QFileDialog,
    QHBoxLayout,
    QMainWindow,
    QMessageBox,
    QWidget,
)

from . import __version__
from .canvas import LiquidCanvas
from .controls import ControlPanel
from .engine import FluidEngine
from .palettes import ColorScheme
from .renderer import DensityRasterizer

logger = logging.getLogger(__name__)

# (label, shortcut or None, slot)
MenuEntry = Tuple[str, Optional[object], Callable]

IMAGE_FILTERS = "PNG (*.png);;JPEG (*.jpg);;All (*)"


class MainWindow(QMainWindow):
    """Top-level window for Liquid ASCII."""

    def __init__(
        self,
        engine: FluidEngine,
        renderer: DensityRasterizer,
        scheme: ColorScheme,
    ) -> None:
        super().__init__()
        self.engine = engine
        self.canvas = LiquidCanvas(engine, renderer, scheme)
        self.controls = ControlPanel(self.canvas, engine)

        self.setWindowTitle(f"Liquid ASCII  v{__version__}")
        self.setMinimumSize(640, 480)
        self.setCentralWidget(self._make_body())

        self._populate_menus()
        self.controls.save_requested.connect(self.save_frame)
        self.statusBar().showMessage(
            f"{engine.particle_count} particles on {engine.width:.0f}×{engine.height:.0f}"
        )

    def _make_body(self) -> QWidget:
        body = QWidget()
        row = QHBoxLayout(body)
        row.setContentsMargins(0, 0, 8, 0)
        row.setSpacing(8)
        row.addWidget(self.canvas, stretch=1)
        row.addWidget(self.controls)
        return body

    # ── menus ─────────────────────────────────────────────────────────────

    def _populate_menus(self) -> None:
        engine = self.engine
        table: List[Tuple[str, Sequence[Optional[MenuEntry]]]] = [
            ("&File", [
                ("&Save Image…", QKeySequence.Save, self.save_frame),
                None,
                ("&Quit", QKeySequence.Quit, self.close),
            ]),
            ("&Edit", [
                ("&Pause / Resume", "Space", self.controls.toggle_pause),
                ("&Reset Fluid", "Ctrl+R", self.controls.reset),
            ]),
            ("&Mix", [
                ("&Stir", "S", lambda: engine.stir(0.3)),
                ("S&hake", "H", lambda: engine.stir(0.8)),
                ("Heat &Burst", "B", lambda: engine.heat_burst(0.3)),
                ("&Chill", "C", lambda: engine.heat_burst(-0.4)),
            ]),
            ("&Help", [
                ("&About", None, self._show_about),
            ]),
        ]
        bar = self.menuBar()
        for title, entries in table:
            menu = bar.addMenu(title)
            for entry in entries:
                if entry is None:
                    menu.addSeparator()
                    continue
                label, shortcut, slot = entry
                action = QAction(label, self)
                if shortcut is not None:
                    action.setShortcut(QKeySequence(shortcut))
                action.triggered.connect(slot)
                menu.addAction(action)
            if title == "&Edit":
                menu.addAction(self._panel_toggle())

    def _panel_toggle(self) -> QAction:
        action = QAction("Show &Controls", self)
        action.setCheckable(True)
        action.setChecked(True)
        action.setShortcut(QKeySequence("Ctrl+H"))
        action.toggled.connect(self.controls.setVisible)
        return action

    # ── actions ───────────────────────────────────────────────────────────

    def save_frame(self) -> None:
        """Ask for a path and write the current canvas to it."""
        image = self.canvas.get_image()
        if image is None:
            QMessageBox.warning(self, "Save Error", "Nothing has been drawn yet.")
            return
        suggested = f"liquid-ascii-{self.engine.ticks:06d}.png"
        path, _ = QFileDialog.getSaveFileName(self, "Save Frame", suggested, IMAGE_FILTERS)
        if not path:
            return
        if not image.save(path):
            logger.error("Could not write frame to %s", path)
            QMessageBox.critical(self, "Save Error", f"Could not write:\n{path}")
            return
        logger.info("Frame %d written to %s", self.engine.ticks, path)
        self.statusBar().showMessage(f"Saved tick {self.engine.ticks} to {path}", 5000)

    def _show_about(self) -> None:
        p = self.engine.params
        QMessageBox.about(
            self,
            "About Liquid ASCII",
            f"<h3>Liquid ASCII v{__version__}</h3>"
            "<p>Hot particles rise from the floor, cool under the lid and "
            "sink again. Each character cell shows how much fluid sits "
            "beneath it.</p>"
            f"<p>Gravity {p.gravity_y:.2f}, viscosity {p.viscosity:.3f}, "
            f"separation {p.separation_spacing:.0f}px.</p>"
            "<p>Move the pointer over the fluid to push it around.</p>",
        )

"""
Liquid ASCII canvas widget — the QTimer-driven frame loop.

Every tick steps the engine once, rasterizes the particles and repaints.
The widget fills its layout slot; its size is the simulation domain.
Moving the mouse over it pushes and stirs the fluid.
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Sequence

from PyQt5.QtCore import QRectF, QTimer, Qt, pyqtSignal
from PyQt5.QtGui import QColor, QFont, QImage, QPainter
from PyQt5.QtWidgets import QSizePolicy, QWidget

from .engine import FluidEngine, PointerTracker
from .palettes import ColorScheme, with_opacity
from .renderer import DensityRasterizer, GlyphFrame

logger = logging.getLogger(__name__)

class LiquidCanvas(QWidget):
    """Animated ASCII fluid display.

    Signals:
        fps_changed(float):  current rendering FPS
    """

    fps_changed = pyqtSignal(float)

    def __init__(
        self,
        engine: FluidEngine,
        renderer: DensityRasterizer,
        scheme: ColorScheme,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.engine = engine
        self.renderer = renderer
        self.scheme = scheme
        self._frame: Optional[GlyphFrame] = None
        self._paused = False

        # Timing
        self._last_time = time.perf_counter()
        self._frame_count = 0
        self._fps_accum = 0.0

        # Pointer state (None = no pointer over the canvas)
        self._tracker = PointerTracker(decay=0.1)

        self._fonts()
        self.setMouseTracking(True)
        self.setMinimumSize(200, 200)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)

        # Animation timer (~60 fps)
        self._timer = QTimer(self)
        self._timer.setInterval(16)
        self._timer.timeout.connect(self._tick)
        self._timer.start()

    def _fonts(self) -> None:
        size = self.renderer.font_size
        self._normal_font = QFont("Courier New", 1)
        self._normal_font.setStyleHint(QFont.Monospace)
        self._normal_font.setPixelSize(size)
        self._bold_font = QFont(self._normal_font)
        self._bold_font.setBold(True)

    # ── properties ────────────────────────────────────────────────────────

    @property
    def paused(self) -> bool:
        return self._paused

    @paused.setter
    def paused(self, val: bool) -> None:
        self._paused = val
        if not val:
            self._last_time = time.perf_counter()

    def set_scheme(self, scheme: ColorScheme) -> None:
        self.scheme = scheme
        self.update()

    def set_font_size(self, size: int) -> None:
        self.renderer.set_font_size(size)
        self._fonts()
        # the old frame is laid out on the previous grid
        self._frame = self.renderer.render(self.engine.particles)
        self.update()

    def set_characters(self, chars: Sequence[str]) -> bool:
        return self.renderer.set_characters(chars)

    # ── animation loop ────────────────────────────────────────────────────

    def _tick(self) -> None:
        now = time.perf_counter()
        dt = now - self._last_time
        self._last_time = now

        if not self._paused:
            self.engine.step(pointer=self._tracker.pointer)
            self._tracker.decay()

        self._frame = self.renderer.render(self.engine.particles)
        self.update()

        # FPS tracking
        self._frame_count += 1
        self._fps_accum += dt
        if self._fps_accum >= 1.0:
            fps = self._frame_count / self._fps_accum
            self.fps_changed.emit(fps)
            self._frame_count = 0
            self._fps_accum = 0.0

    # ── painting ──────────────────────────────────────────────────────────

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.TextAntialiasing)
        painter.fillRect(self.rect(), QColor(*self.scheme.background))

        frame = self._frame
        if frame is not None:
            fs = self.renderer.font_size
            text = self.scheme.text

            painter.setFont(self._normal_font)
            for cell in frame.normal:
                painter.setPen(QColor(*with_opacity(text, cell.opacity)))
                painter.drawText(QRectF(cell.col * fs, cell.row * fs, fs, fs),
                                 Qt.AlignHCenter | Qt.AlignTop, cell.char)

            painter.setFont(self._bold_font)
            for cell in frame.bold:
                painter.setPen(QColor(*with_opacity(text, cell.opacity)))
                painter.drawText(QRectF(cell.col * fs, cell.row * fs, fs, fs),
                                 Qt.AlignHCenter | Qt.AlignTop, cell.char)

        if self._paused:
            painter.setPen(QColor(*with_opacity(self.scheme.text, 0.8)))
            painter.drawText(self.rect(), Qt.AlignCenter, "⏸ PAUSED")

        painter.end()

    def resizeEvent(self, event):
        w = max(1, self.width())
        h = max(1, self.height())
        self.engine.resize(w, h)
        self.renderer.resize(w, h)
        super().resizeEvent(event)

    # ── mouse interaction (push and stir) ─────────────────────────────────

    def mouseMoveEvent(self, event):
        self._tracker.move(float(event.x()), float(event.y()))

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            self._tracker.press(float(event.x()), float(event.y()))

    def leaveEvent(self, event):
        self._tracker.leave()
        super().leaveEvent(event)

    # ── save ──────────────────────────────────────────────────────────────

    def get_image(self) -> Optional[QImage]:
        if self._frame is None:
            return None
        return self.grab().toImage()

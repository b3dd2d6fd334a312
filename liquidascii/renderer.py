"""
Density rasterizer — numpy-vectorised metaball splatting onto a glyph grid.

Each particle deposits ``(1 - d²/R²)²`` into every character cell within
``R`` cells of its position.  Cell density then picks a glyph from an
ordered palette and an opacity, split into a normal band and a bold
band that is drawn second.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

if TYPE_CHECKING:
    from .engine import Particle

logger = logging.getLogger(__name__)

DEFAULT_CHARACTERS = ".+xXoO"
MIN_FONT_SIZE = 4
MAX_FONT_SIZE = 64


@dataclass(frozen=True)
class GlyphCell:
    """One visible character cell."""
    row: int
    col: int
    char: str
    opacity: float
    bold: bool = False


@dataclass
class GlyphFrame:
    """Output of one render: visible cells split into two draw passes.

    Both lists are in row-major order.  Draw ``normal`` first, then
    ``bold``.
    """
    cols: int
    rows: int
    normal: List[GlyphCell] = field(default_factory=list)
    bold: List[GlyphCell] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.normal) + len(self.bold)

    def cells(self) -> Iterator[GlyphCell]:
        """All cells in draw order."""
        yield from self.normal
        yield from self.bold

    def grid(self) -> List[List[Optional[Tuple[str, float]]]]:
        """Row-major ``rows × cols`` grid of ``(char, opacity)`` or None."""
        out: List[List[Optional[Tuple[str, float]]]] = [
            [None] * self.cols for _ in range(self.rows)
        ]
        for cell in self.cells():
            out[cell.row][cell.col] = (cell.char, cell.opacity)
        return out

    def to_text(self, blank: str = " ") -> str:
        lines = []
        for row in self.grid():
            lines.append("".join(blank if c is None else c[0] for c in row))
        return "\n".join(lines)


class DensityRasterizer:
    """Turns particle positions into a :class:`GlyphFrame`.

    Parameters:
        width, height: Viewport size in pixels.
        font_size:     Character cell edge in pixels.
        characters:    Glyphs ordered from lightest to densest.
    """

    influence_radius = 2.5
    min_density = 0.2
    bold_threshold = 2.0

    def __init__(
        self,
        width: float,
        height: float,
        font_size: int = 20,
        characters: Sequence[str] = DEFAULT_CHARACTERS,
    ) -> None:
        if font_size <= 0:
            raise ValueError(f"Font size must be positive, got {font_size}")
        self.font_size = font_size
        self.characters: Tuple[str, ...] = tuple(DEFAULT_CHARACTERS)
        self.set_characters(characters)
        self.width = 0.0
        self.height = 0.0
        self.cols = 0
        self.rows = 0
        self._density = np.zeros((0, 0), dtype=np.float64)
        self.resize(width, height)

    # ── configuration ─────────────────────────────────────────────────────

    def resize(self, width: float, height: float) -> None:
        """Recompute the grid for a new viewport size."""
        if not (width > 0 and height > 0):
            raise ValueError(f"Viewport must be positive, got {width}x{height}")
        self.width = float(width)
        self.height = float(height)
        self._update_grid()

    def set_font_size(self, size: int) -> None:
        if size <= 0:
            raise ValueError(f"Font size must be positive, got {size}")
        self.font_size = size
        self._update_grid()

    def set_characters(self, characters: Optional[Sequence[str]]) -> bool:
        """Replace the glyph palette.  Empty input is ignored."""
        if not characters:
            logger.warning("Ignoring empty glyph palette")
            return False
        self.characters = tuple(characters)
        return True

    def _update_grid(self) -> None:
        self.cols = math.ceil(self.width / self.font_size)
        self.rows = math.ceil(self.height / self.font_size)
        if self._density.shape != (self.rows, self.cols):
            self._density = np.zeros((self.rows, self.cols), dtype=np.float64)
            logger.debug("Density grid reallocated: %dx%d cells", self.cols, self.rows)

    @property
    def density(self) -> np.ndarray:
        """Read-only view of the last accumulated density field."""
        view = self._density.view()
        view.flags.writeable = False
        return view

    # ── rendering ─────────────────────────────────────────────────────────

    def splat(self, positions: np.ndarray) -> np.ndarray:
        """Zero the density buffer and accumulate every particle into it."""
        grid = self._density
        grid.fill(0.0)
        if len(positions) == 0:
            return grid

        fs = float(self.font_size)
        radius = self.influence_radius
        radius_sq = radius * radius
        rows, cols = grid.shape

        col = positions[:, 0] / fs
        row = positions[:, 1] / fs
        start_c = np.floor(col - radius).astype(np.intp)
        start_r = np.floor(row - radius).astype(np.intp)
        span = int(math.ceil(2 * radius)) + 2

        for j in range(span):
            r = start_r + j
            dy = r - row
            r_ok = (r >= 0) & (r < rows)
            for i in range(span):
                c = start_c + i
                dx = c - col
                dist_sq = dx * dx + dy * dy
                ok = r_ok & (c >= 0) & (c < cols) & (dist_sq < radius_sq)
                if not ok.any():
                    continue
                w = 1.0 - dist_sq[ok] / radius_sq
                np.add.at(grid, (r[ok], c[ok]), w * w)
        return grid

    def render(self, particles: Union[Sequence["Particle"], np.ndarray]) -> GlyphFrame:
        """Render one frame from particles (or an ``(N, 2)`` position array)."""
        self.splat(_as_positions(particles))
        return self.classify()

    def classify(self) -> GlyphFrame:
        """Pick glyphs and opacities from the current density buffer."""
        frame = GlyphFrame(self.cols, self.rows)
        density = self._density
        lo = self.min_density
        hi = self.bold_threshold

        rr, cc = np.nonzero(density > lo)
        if rr.size == 0:
            return frame
        values = density[rr, cc]

        last = len(self.characters) - 1
        idx = np.minimum(np.floor((values - lo) * 2).astype(np.intp), last)
        is_bold = values > hi
        opacity = np.where(
            is_bold,
            np.minimum(0.7 + (values - hi) * 0.15, 1.0),
            np.minimum(0.4 + (values - lo) * 0.3, 1.0),
        )

        chars = self.characters
        for r, c, k, a, b in zip(rr.tolist(), cc.tolist(), idx.tolist(),
                                 opacity.tolist(), is_bold.tolist()):
            cell = GlyphCell(r, c, chars[k], a, b)
            if b:
                frame.bold.append(cell)
            else:
                frame.normal.append(cell)
        return frame


def _as_positions(particles: Union[Sequence["Particle"], np.ndarray]) -> np.ndarray:
    if isinstance(particles, np.ndarray):
        return np.asarray(particles, dtype=np.float64).reshape(-1, 2)
    pos = np.empty((len(particles), 2), dtype=np.float64)
    for i, b in enumerate(particles):
        pos[i, 0] = b.x
        pos[i, 1] = b.y
    return pos

"""
Uniform-grid spatial hash for neighbour queries.

The index is rebuilt every tick.  Buckets live in a flat list that is
cleared and refilled in place, so a steady-state frame allocates nothing
beyond the list growth of the buckets themselves.
"""

from __future__ import annotations

import logging
import math
from typing import Generic, Iterable, Iterator, List, Protocol, Tuple, TypeVar

logger = logging.getLogger(__name__)


class HasPosition(Protocol):
    x: float
    y: float


T = TypeVar("T", bound=HasPosition)


class SpatialIndex(Generic[T]):
    """Buckets items by ``(floor(x / cell_size), floor(y / cell_size))``.

    Parameters:
        cell_size: Edge length of a bucket in world units (clamped to ≥ 1).
    """

    def __init__(self, cell_size: float = 20.0) -> None:
        self.cell_size = max(1.0, float(cell_size))
        self.cols = 0
        self.rows = 0
        self._buckets: List[List[T]] = []
        self._count = 0

    def __len__(self) -> int:
        return self._count

    # ── building ──────────────────────────────────────────────────────────

    def rebuild(self, items: Iterable[T], width: float, height: float) -> None:
        """Clear all buckets and re-insert *items* for a ``width × height`` domain."""
        cell = self.cell_size
        cols = max(1, math.ceil(width / cell))
        rows = max(1, math.ceil(height / cell))
        self._resize(cols, rows)

        buckets = self._buckets
        for b in buckets:
            b.clear()

        max_x = width - 1
        max_y = height - 1
        count = 0
        for item in items:
            cx = int(max(0.0, min(max_x, item.x)) // cell)
            cy = int(max(0.0, min(max_y, item.y)) // cell)
            if cx >= cols:
                cx = cols - 1
            if cy >= rows:
                cy = rows - 1
            buckets[cy * cols + cx].append(item)
            count += 1
        self._count = count

    def _resize(self, cols: int, rows: int) -> None:
        if cols == self.cols and rows == self.rows:
            return
        needed = cols * rows
        if needed > len(self._buckets):
            self._buckets.extend([] for _ in range(needed - len(self._buckets)))
        else:
            del self._buckets[needed:]
        logger.debug("Spatial grid resized to %dx%d buckets", cols, rows)
        self.cols = cols
        self.rows = rows

    # ── queries ───────────────────────────────────────────────────────────

    def cell_of(self, x: float, y: float) -> Tuple[int, int]:
        """Bucket coordinates of a point, clamped to the grid."""
        cx = math.floor(x / self.cell_size)
        cy = math.floor(y / self.cell_size)
        cx = min(max(cx, 0), self.cols - 1)
        cy = min(max(cy, 0), self.rows - 1)
        return cx, cy

    def bucket(self, col: int, row: int) -> List[T]:
        return self._buckets[row * self.cols + col]

    def neighbors(self, x: float, y: float) -> Iterator[T]:
        """Yield every item in the 3×3 block of buckets around ``(x, y)``."""
        if not self.cols or not self.rows:
            return
        cx, cy = self.cell_of(x, y)
        cols = self.cols
        buckets = self._buckets
        for r in range(max(0, cy - 1), min(self.rows - 1, cy + 1) + 1):
            for c in range(max(0, cx - 1), min(cols - 1, cx + 1) + 1):
                yield from buckets[r * cols + c]

import logging
import math

import numpy as np

from sandtable.physics.vector2 import Vector2

logger = logging.getLogger(__name__)

MAX_SLOPE = 1.0              # height difference tolerated between 4-neighbors
REDISTRIBUTION_RATE = 0.5    # fraction of the difference moved per transfer
RELAX_MARGIN = 4.0           # window grows by radius * RELAX_MARGIN, must be > 1
DEFAULT_MAX_SWEEPS = 100_000


class RelaxationError(RuntimeError):
    """Raised when relax() hits its sweep cap before the window settles."""

    def __init__(self, sweeps: int, window: tuple[int, int, int, int]):
        self.sweeps = sweeps
        self.window = window
        x0, x1, y0, y1 = window
        super().__init__(
            f"Sand did not settle after {sweeps} sweeps in window x=[{x0},{x1}] y=[{y0},{y1}]"
        )


class SandGrid:
    """
    Single-layer sand height field.

    Coordinate system:
      - x: column, 0..width-1
      - y: row, 0..height-1
      - cells[y, x]: sand depth (>= 0)

    The grid never changes size. push() and relax() mutate it in place.
    """

    def __init__(self, width: int, height: int, initial_depth: float):
        width = int(width)
        height = int(height)
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be positive")
        if initial_depth < 0:
            raise ValueError("initial_depth must be non-negative")

        self.width = width
        self.height = height
        self.cells = np.full((height, width), float(initial_depth), dtype=np.float64)

    def inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> float:
        if not self.inside(x, y):
            raise IndexError(f"cell ({x}, {y}) outside {self.width}x{self.height} grid")
        return float(self.cells[y, x])

    def set(self, x: int, y: int, value: float) -> None:
        if not self.inside(x, y):
            raise IndexError(f"cell ({x}, {y}) outside {self.width}x{self.height} grid")
        self.cells[y, x] = float(value)

    def snapshot(self) -> np.ndarray:
        """Read-only copy of the heights, shape (height, width)."""
        out = self.cells.copy()
        out.flags.writeable = False
        return out

    def push(self, center: Vector2, radius: float) -> int:
        """
        Push sand out from under a ball at `center`.

        For every cell (i,j) within the integer radius r of the integer center (bx,by):
          offset  = (i-bx, j-by)
          deposit = (i,j) + offset   (twice the offset from the center)
          B       = max(0, 1 - cos(max(0, 1 - dist/r)))   ball surface height
          if A = h(i,j) >= B: move A-B from (i,j) to deposit, leaving B behind.

        The ball never adds sand. Cells whose deposit lies off the grid are skipped.
        Returns the number of cells changed.
        """
        bx = int(center.x)
        by = int(center.y)
        r = int(radius)
        if r <= 0:
            return 0

        cells = self.cells
        changed = 0
        for i in range(bx - r, bx + r + 1):
            if i < 0 or i >= self.width:
                continue
            dx = i - bx
            for j in range(by - r, by + r + 1):
                if j < 0 or j >= self.height:
                    continue
                dy = j - by
                if not self.inside(i + dx, j + dy):
                    continue

                distance = math.sqrt(dx * dx + dy * dy)
                if distance > r:
                    continue

                b = max(0.0, 1.0 - math.cos(max(0.0, 1.0 - distance / r)))
                a = cells[j, i]
                if a >= b:
                    # deposit first: the center cell is its own deposit and must end at B
                    cells[j + dy, i + dx] += a - b
                    cells[j, i] = b
                    changed += 1

        return changed

    def relax_window(self, start: Vector2, end: Vector2, radius: float) -> tuple[int, int, int, int]:
        """
        Box around the ball's path from `start` to `end`, grown by radius*RELAX_MARGIN
        and clamped to the grid. Returns (x0, x1, y0, y1), bounds inclusive.
        """
        margin = int(radius * RELAX_MARGIN)

        x0, x1 = sorted((int(start.x), int(end.x)))
        y0, y1 = sorted((int(start.y), int(end.y)))

        x0 = max(0, x0 - margin)
        y0 = max(0, y0 - margin)
        x1 = min(self.width - 1, x1 + margin)
        y1 = min(self.height - 1, y1 + margin)
        return x0, x1, y0, y1

    def relax(self, start: Vector2, end: Vector2, radius: float, max_sweeps: int | None = DEFAULT_MAX_SWEEPS) -> int:
        """
        Let sand slump until no cell in the window stands more than MAX_SLOPE above
        a 4-neighbor.

        Each sweep scans rows top to bottom, columns left to right, stopping short of
        the window's last row and column. A cell with lower neighbors (checked left,
        right, up, down) gives each of them diff * REDISTRIBUTION_RATE / n, reading
        current values, so cells later in a sweep see the earlier transfers.

        Returns the number of sweeps. Raises RelaxationError if the window is still
        moving after max_sweeps sweeps (None means no cap).
        """
        window = self.relax_window(start, end, radius)
        sweeps = 0

        while True:
            sweeps += 1

            # a sweep that starts with no steep pair moves nothing
            if not self._has_steep_cells(window):
                return sweeps
            self._sweep(window)

            if max_sweeps is not None and sweeps >= max_sweeps:
                logger.warning("Relaxation stopped after %d sweeps without settling", sweeps)
                raise RelaxationError(sweeps, window)

    def _has_steep_cells(self, window: tuple[int, int, int, int]) -> bool:
        """True if any cell a sweep would visit stands more than MAX_SLOPE above a 4-neighbor."""
        x0, x1, y0, y1 = window
        if x1 - x0 < 2 or y1 - y0 < 2:
            return False

        # swept cells plus one ring of neighbors; off-grid neighbors become +inf
        top = 1 if y0 > 0 else 0
        left = 1 if x0 > 0 else 0
        ring = self.cells[y0 - top:y1, x0 - left:x1]
        ring = np.pad(ring, ((1 - top, 0), (1 - left, 0)), constant_values=np.inf)

        limit = ring[1:-1, 1:-1] - MAX_SLOPE
        steep = (
            (ring[1:-1, :-2] < limit)
            | (ring[1:-1, 2:] < limit)
            | (ring[:-2, 1:-1] < limit)
            | (ring[2:, 1:-1] < limit)
        )
        return bool(steep.any())

    def _sweep(self, window: tuple[int, int, int, int]) -> bool:
        """One in-place scan-order pass over the window. Returns True if any sand moved."""
        x0, x1, y0, y1 = window
        cells = self.cells
        w, h = self.width, self.height
        moved = False

        for y in range(y0, y1 - 1):
            for x in range(x0, x1 - 1):
                limit = cells[y, x] - MAX_SLOPE

                lower = []
                if x > 0 and cells[y, x - 1] < limit:
                    lower.append((y, x - 1))
                if x + 1 < w and cells[y, x + 1] < limit:
                    lower.append((y, x + 1))
                if y > 0 and cells[y - 1, x] < limit:
                    lower.append((y - 1, x))
                if y + 1 < h and cells[y + 1, x] < limit:
                    lower.append((y + 1, x))

                if not lower:
                    continue

                moved = True
                share = REDISTRIBUTION_RATE / len(lower)
                for n in lower:
                    transfer = (cells[y, x] - cells[n]) * share
                    cells[n] += transfer
                    cells[y, x] -= transfer

        return moved

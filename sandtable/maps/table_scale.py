import math
from dataclasses import dataclass

DEFAULT_MARGIN = 20  # grid cells kept clear between rho=1 and the table edge


@dataclass(frozen=True)
class TableScale:
    """
    Maps THR polar coordinates (theta, rho) to grid coordinates (x, y).

    Convention:
      - theta in radians, 0 points up (toward y=0), increasing clockwise
      - rho in [0, 1], 1 = max_radius from the center
      - x increases to the right, y increases downward

    Table center is (width // 2, height // 2).
    """
    width: int
    height: int
    margin: int = DEFAULT_MARGIN

    @property
    def cx(self) -> int:
        return self.width // 2

    @property
    def cy(self) -> int:
        return self.height // 2

    @property
    def max_radius(self) -> int:
        return self.width // 2 - self.margin

    def to_grid(self, theta: float, rho: float) -> tuple[float, float]:
        r = rho * self.max_radius
        x = self.cx + math.sin(theta) * r
        y = self.cy - math.cos(theta) * r
        return float(x), float(y)

    def to_grid_all(self, waypoints) -> list[tuple[float, float]]:
        return [self.to_grid(theta, rho) for (theta, rho) in waypoints]

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Vector2:
    """
    2D point / direction in grid units.

    Convention:
      - x increases to the right (grid column)
      - y increases downward (grid row)
    """
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def scale(self, k: float) -> Vector2:
        return Vector2(self.x * k, self.y * k)

    def length_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    def normalized(self) -> Vector2:
        length = math.sqrt(self.length_squared())
        if length == 0.0:
            raise ValueError("Cannot normalize a zero-length vector")
        return Vector2(self.x / length, self.y / length)

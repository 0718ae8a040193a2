import logging
from typing import Callable, Iterable

import numpy as np

from sandtable.physics.ball import Ball
from sandtable.physics.vector2 import Vector2
from sandtable.terrain.sand_grid import DEFAULT_MAX_SWEEPS, SandGrid

logger = logging.getLogger(__name__)

DEFAULT_DT = 0.2
DEFAULT_MAX_STEPS_PER_TARGET = 1_000_000


class SandSimulation:
    """
    Loose sand on a table, displaced by a ball.

    One advance(dt):
      1) ball steps toward its target
      2) ball pushes sand out from under itself
      3) sand relaxes in the box spanned by the segment start and the ball

    The ball starts at the center of the table.
    """

    def __init__(
        self,
        width: int,
        height: int,
        ball_radius: float,
        initial_depth: float,
        max_sweeps: int | None = DEFAULT_MAX_SWEEPS,
    ):
        self.grid = SandGrid(width, height, initial_depth)
        self.ball = Ball(ball_radius)
        self.ball.set_position(Vector2(width / 2.0, height / 2.0))
        self.last_target_start = self.ball.position
        self.max_sweeps = max_sweeps

    def set_target(self, x: float, y: float) -> None:
        self.last_target_start = self.ball.position
        self.ball.set_target(x, y)

    def is_at_target(self) -> bool:
        return self.ball.at_target

    def advance(self, dt: float) -> None:
        # runs even when already at target; callers check is_at_target() first
        self.ball.advance(dt)
        self.grid.push(self.ball.position, self.ball.radius)
        self.grid.relax(self.last_target_start, self.ball.position, self.ball.radius, max_sweeps=self.max_sweeps)

    def run_to_target(self, x: float, y: float, dt: float = DEFAULT_DT,
                      max_steps: int = DEFAULT_MAX_STEPS_PER_TARGET) -> int:
        """Set a target and advance until the ball gets there. Returns steps taken."""
        if dt <= 0:
            raise ValueError("dt must be positive")

        self.set_target(x, y)
        steps = 0
        while not self.is_at_target():
            if steps >= max_steps:
                raise RuntimeError(f"Ball did not reach ({x:.2f}, {y:.2f}) within {max_steps} steps")
            self.advance(dt)
            steps += 1
        return steps

    def run_waypoints(
        self,
        points: Iterable[tuple[float, float]],
        dt: float = DEFAULT_DT,
        progress: Callable[[int, int, int], None] | None = None,
    ) -> int:
        """
        Drive the ball through grid-space points in order.
        progress(index, total, steps) is called after each point.
        Returns the total number of steps.
        """
        points = list(points)
        total = len(points)
        total_steps = 0
        for idx, (x, y) in enumerate(points, start=1):
            steps = self.run_to_target(x, y, dt=dt)
            total_steps += steps
            logger.debug(
                "Target %d/%d (%.2f, %.2f) reached in %d steps", idx, total, x, y, steps,
                extra={"waypoint": idx},
            )
            if progress is not None:
                progress(idx, total, steps)
        return total_steps

    def heights(self) -> np.ndarray:
        return self.grid.snapshot()

import math
from typing import Callable

from sandtable.physics.sand_simulation import SandSimulation

SPIRAL_DT = 0.5
ANGLE_STEP_DEG = 5.0
SHRINK_PER_TURN = 10.0  # grid cells


def run_spiral(
    sim: SandSimulation,
    steps: int,
    margin: int = 20,
    dt: float = SPIRAL_DT,
    progress: Callable[[int, int], None] | None = None,
) -> int:
    """
    Demo pattern: a spiral winding inward from the table edge.

    Runs exactly `steps` advances. Whenever the ball arrives, the next target is
    placed ANGLE_STEP_DEG further around, with the radius shrinking by
    SHRINK_PER_TURN each full turn. The first target is a third of the way in
    from the top-left corner.

    Returns the number of targets reached.
    """
    w = sim.grid.width
    h = sim.grid.height
    outer = (w - 2 * margin) / 2.0

    sim.set_target(w / 3.0, h / 3.0)
    d = outer
    a = 0.0
    reached = 0

    for i in range(steps):
        sim.advance(dt)
        if sim.is_at_target():
            reached += 1
            r = math.radians(a)
            sim.set_target(w / 2.0 + math.cos(r) * d, h / 2.0 + math.sin(r) * d)
            d = outer - (a / 360.0) * SHRINK_PER_TURN
            a += ANGLE_STEP_DEG
        if progress is not None:
            progress(i + 1, steps)

    return reached

from .vector2 import Vector2

ARRIVAL_EPSILON_SQ = 0.1  # squared grid units
DEFAULT_SPEED = 1.0       # grid units per time unit


class Ball:
    """
    Ball moving across the sand table at a constant speed.

    State:
      position, target = (x,y) in grid units
      at_target       = True once the ball has reached target

    Stepping:
      if |target - p|^2 < speed*dt:  p = target
      else:                          p += unit(target - p) * speed*dt

    Notes:
      - The step rule compares a SQUARED distance against a LINEAR step
        length. The last step therefore snaps from up to sqrt(speed*dt) away.
      - The ball knows nothing about the sand.
    """

    def __init__(self, radius: float, speed: float = DEFAULT_SPEED, position: Vector2 | None = None):
        self.radius = float(radius)
        self.speed = float(speed)

        if self.radius < 0:
            raise ValueError("radius must be non-negative")
        if self.speed <= 0:
            raise ValueError("speed must be positive")

        self.position = position if position is not None else Vector2(0.0, 0.0)
        self.target = self.position
        self.at_target = False

    def set_position(self, p: Vector2) -> None:
        self.position = p

    def set_target(self, x: float, y: float) -> None:
        self.target = Vector2(float(x), float(y))
        self.at_target = (self.target - self.position).length_squared() < ARRIVAL_EPSILON_SQ

    def advance(self, dt: float) -> None:
        step = self.speed * dt
        direction = self.target - self.position
        len_sq = direction.length_squared()

        # zero-length direction has no heading; treat as arrived
        if len_sq == 0.0 or len_sq < step:
            self.position = self.target
            self.at_target = True
        else:
            self.position = self.position + direction.normalized().scale(step)
            self.at_target = False

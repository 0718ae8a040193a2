"""
sandtable: a ball rolling through loose sand, rendered as a grayscale height map.
"""
from .physics.ball import Ball
from .physics.sand_simulation import SandSimulation
from .physics.vector2 import Vector2
from .terrain.sand_grid import RelaxationError, SandGrid

__version__ = "0.1.0"

__all__ = [
    "Ball",
    "RelaxationError",
    "SandGrid",
    "SandSimulation",
    "Vector2",
]

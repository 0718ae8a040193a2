"""
THR waypoint files.

One command per line: "theta rho", theta in radians, rho in 0..1.
Blank lines and lines starting with '#' are ignored.
"""
import logging
import math

logger = logging.getLogger(__name__)


class ThrFormatError(ValueError):
    """A THR line could not be parsed."""

    def __init__(self, path: str, line_no: int, line: str, reason: str):
        self.path = path
        self.line_no = line_no
        self.line = line
        super().__init__(f"{path}:{line_no}: {reason}: {line!r}")


def parse_line(line: str) -> tuple[float, float] | None:
    """Return (theta, rho), or None for blank/comment lines. Raises ValueError."""
    line = line.strip()
    if not line or line.startswith("#"):
        return None

    parts = line.split()
    if len(parts) < 2:
        raise ValueError("expected 'theta rho'")
    theta, rho = float(parts[0]), float(parts[1])
    if not (math.isfinite(theta) and math.isfinite(rho)):
        raise ValueError("non-finite value")
    return theta, rho


def read_thr(path: str) -> list[tuple[float, float]]:
    """
    Read every waypoint in a THR file.

    The whole file is parsed before returning so a bad line fails the run
    before any sand moves.
    """
    waypoints = []
    with open(path, "r") as f:
        for line_no, line in enumerate(f, start=1):
            try:
                wp = parse_line(line)
            except ValueError as e:
                raise ThrFormatError(path, line_no, line.rstrip("\n"), str(e)) from e
            if wp is not None:
                waypoints.append(wp)

    logger.info("Read %d waypoints from %s", len(waypoints), path)
    return waypoints


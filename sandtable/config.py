import json
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict

from sandtable.maps.table_scale import DEFAULT_MARGIN
from sandtable.physics.sand_simulation import DEFAULT_DT
from sandtable.terrain.sand_grid import DEFAULT_MAX_SWEEPS

INT_SETTINGS = ("width", "height", "margin", "max_sweeps")
FLOAT_SETTINGS = ("ball_radius", "initial_depth", "dt")
NULLABLE_SETTINGS = ("max_sweeps",)


class SettingsError(ValueError):
    """Invalid simulation settings."""


@dataclass(frozen=True)
class SimulationSettings:
    width: int = 300
    height: int = 300
    ball_radius: float = 5.0
    initial_depth: float = 2.0
    dt: float = DEFAULT_DT
    margin: int = DEFAULT_MARGIN      # cells between rho=1 and the table edge
    max_sweeps: int | None = DEFAULT_MAX_SWEEPS

    def validate(self) -> "SimulationSettings":
        if self.width <= 0 or self.height <= 0:
            raise SettingsError("width and height must be positive")
        if self.ball_radius < 0:
            raise SettingsError("ball_radius must be non-negative")
        if self.initial_depth < 0:
            raise SettingsError("initial_depth must be non-negative")
        if self.dt <= 0:
            raise SettingsError("dt must be positive")
        if self.margin < 0 or self.margin >= self.width // 2:
            raise SettingsError("margin must be in [0, width // 2)")
        if self.max_sweeps is not None and self.max_sweeps <= 0:
            raise SettingsError("max_sweeps must be positive (or null for no cap)")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def with_overrides(self, **overrides) -> "SimulationSettings":
        """Copy with every non-None override applied."""
        given = {k: v for k, v in overrides.items() if v is not None}
        _check_keys(given)
        return replace(self, **given)


def _check_keys(d: Dict[str, Any]) -> None:
    known = {f.name for f in fields(SimulationSettings)}
    unknown = sorted(set(d) - known)
    if unknown:
        raise SettingsError(f"Unknown settings: {', '.join(unknown)}")


def _coerce(key: str, value: Any) -> Any:
    """
    Check one JSON value against the type of its setting.

    JSON booleans are rejected even though bool is an int subclass.
    Integral floats (e.g. 120.0) are accepted for int settings.
    """
    if value is None and key in NULLABLE_SETTINGS:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SettingsError(f"{key} must be a number, got {value!r}")
    if key in INT_SETTINGS:
        if isinstance(value, float) and not value.is_integer():
            raise SettingsError(f"{key} must be an integer, got {value!r}")
        return int(value)
    return float(value)


def load_settings(path: str, base: SimulationSettings | None = None) -> SimulationSettings:
    """Read a JSON object of setting overrides on top of `base` (defaults if None)."""
    with open(path, "r") as f:
        try:
            cfg = json.load(f)
        except json.JSONDecodeError as e:
            raise SettingsError(f"{path}: invalid JSON: {e}") from e

    if not isinstance(cfg, dict):
        raise SettingsError(f"{path}: expected a JSON object")

    _check_keys(cfg)
    try:
        cfg = {key: _coerce(key, value) for key, value in cfg.items()}
    except SettingsError as e:
        raise SettingsError(f"{path}: {e}") from e

    settings = replace(base or SimulationSettings(), **cfg)
    return settings.validate()

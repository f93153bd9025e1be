"""
Simulation Telemetry
====================

The normalized simulation state that feeds both sample collection and
autonomous control.

Features (all normalized to roughly [0, 1] by the simulation):
    position_y   - Bird height (0 = top of screen)
    velocity     - Vertical velocity, 0.5 = at rest
    distance     - Horizontal distance to the next pipe (1 = no pipe ahead)
    gap_center_y - Height of the next gap's center (0.5 = no pipe ahead)
"""

import math
from dataclasses import dataclass
from typing import Any, List, Mapping


class InvalidTelemetryError(ValueError):
    """Raised when telemetry is missing or cannot be turned into features."""


# Accepted spellings for each field when coercing from a mapping
_FIELD_ALIASES = {
    'position_y': ('position_y', 'positionY', 'birdY'),
    'velocity': ('velocity', 'birdVelocity'),
    'distance': ('distance', 'pipeDistance'),
    'gap_center_y': ('gap_center_y', 'gapCenterY', 'pipeGapY'),
}


@dataclass(frozen=True)
class Telemetry:
    """One tick of normalized simulation state."""
    position_y: float
    velocity: float
    distance: float
    gap_center_y: float

    FEATURE_NAMES = ('position_y', 'velocity', 'distance', 'gap_center_y')

    def to_features(self) -> List[float]:
        """Return the 4-feature input vector in network order."""
        return [self.position_y, self.velocity, self.distance, self.gap_center_y]

    def to_dict(self) -> dict:
        return {
            'positionY': self.position_y,
            'velocity': self.velocity,
            'distance': self.distance,
            'gapCenterY': self.gap_center_y,
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'Telemetry':
        """
        Build telemetry from a mapping using camelCase or snake_case keys.

        Raises:
            InvalidTelemetryError: If a field is missing or not a finite number
        """
        values = {}
        for field_name, aliases in _FIELD_ALIASES.items():
            key = next((alias for alias in aliases if alias in data), None)
            if key is None:
                raise InvalidTelemetryError(f"Telemetry is missing '{field_name}'")
            values[field_name] = _as_finite_float(field_name, data[key])
        return cls(**values)

    @classmethod
    def coerce(cls, telemetry: Any) -> 'Telemetry':
        """
        Accept a Telemetry instance or a mapping and return a validated Telemetry.

        Raises:
            InvalidTelemetryError: If telemetry is None or malformed
        """
        if telemetry is None:
            raise InvalidTelemetryError("Telemetry is required but was None")
        if isinstance(telemetry, Telemetry):
            for name in cls.FEATURE_NAMES:
                _as_finite_float(name, getattr(telemetry, name))
            return telemetry
        if isinstance(telemetry, Mapping):
            return cls.from_mapping(telemetry)
        raise InvalidTelemetryError(
            f"Unsupported telemetry type: {type(telemetry).__name__}"
        )


def _as_finite_float(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidTelemetryError(f"Telemetry field '{name}' must be a number, got bool")
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise InvalidTelemetryError(
            f"Telemetry field '{name}' must be a number, got {value!r}"
        ) from None
    if not math.isfinite(result):
        raise InvalidTelemetryError(f"Telemetry field '{name}' must be finite, got {result}")
    return result

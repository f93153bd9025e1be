"""
Tests for simulation telemetry.

These tests verify:
    - Feature vector order
    - Coercion from camelCase and snake_case mappings
    - Rejection of missing and non-numeric fields
"""

import math
import sys
import os

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.ai.telemetry import InvalidTelemetryError, Telemetry


class TestTelemetry:
    """Test the telemetry record."""

    def test_feature_order(self):
        t = Telemetry(position_y=0.1, velocity=0.2, distance=0.3, gap_center_y=0.4)
        assert t.to_features() == [0.1, 0.2, 0.3, 0.4]

    def test_to_dict_uses_camel_case(self):
        t = Telemetry(0.1, 0.2, 0.3, 0.4)
        assert t.to_dict() == {'positionY': 0.1, 'velocity': 0.2, 'distance': 0.3, 'gapCenterY': 0.4}


class TestCoerce:
    """Test coercion of incoming telemetry."""

    def test_camel_case_mapping(self):
        t = Telemetry.coerce({'positionY': 0.6, 'velocity': 0.5, 'distance': 0.3, 'gapCenterY': 0.5})
        assert t == Telemetry(0.6, 0.5, 0.3, 0.5)

    def test_snake_case_mapping(self):
        t = Telemetry.coerce({'position_y': 0.6, 'velocity': 0.5, 'distance': 0.3, 'gap_center_y': 0.5})
        assert t.position_y == 0.6

    def test_round_trip_through_dict(self):
        t = Telemetry(0.25, 0.5, 0.75, 0.4)
        assert Telemetry.coerce(t.to_dict()) == t

    def test_instance_passes_through(self):
        t = Telemetry(0.1, 0.2, 0.3, 0.4)
        assert Telemetry.coerce(t) is t

    def test_none_rejected(self):
        with pytest.raises(InvalidTelemetryError):
            Telemetry.coerce(None)

    def test_missing_field_rejected(self):
        with pytest.raises(InvalidTelemetryError, match='gap_center_y'):
            Telemetry.coerce({'positionY': 0.6, 'velocity': 0.5, 'distance': 0.3})

    @pytest.mark.parametrize('bad', ['high', None, True, math.nan, math.inf])
    def test_non_numeric_field_rejected(self, bad):
        with pytest.raises(InvalidTelemetryError):
            Telemetry.coerce({'positionY': bad, 'velocity': 0.5, 'distance': 0.3, 'gapCenterY': 0.5})

    def test_non_finite_instance_rejected(self):
        with pytest.raises(InvalidTelemetryError):
            Telemetry.coerce(Telemetry(math.nan, 0.5, 0.5, 0.5))

    def test_unsupported_type_rejected(self):
        with pytest.raises(InvalidTelemetryError):
            Telemetry.coerce([0.1, 0.2, 0.3, 0.4])

    def test_invalid_telemetry_is_value_error(self):
        assert issubclass(InvalidTelemetryError, ValueError)

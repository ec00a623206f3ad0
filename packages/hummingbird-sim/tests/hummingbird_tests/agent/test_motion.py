"""Tests for turning actions into forces and rotations."""

import numpy as np
import pytest
from hummingbird.agent.motion import MotionModel
from hummingbird.geometry import vector3


@pytest.fixture
def model():
    """Create a motion model with default tuning."""
    return MotionModel()


def _action(move=(0.0, 0.0, 0.0), pitch=0.0, yaw=0.0):
    return np.array([*move, pitch, yaw])


class TestForce:
    """Test the movement force."""

    def test_force_scales_move_action(self, model):
        """Test the force is the move action times the move force."""
        result = model.apply_action(
            _action(move=(1.0, -0.5, 0.25)),
            vector3(0.0, 0.0, 0.0),
            0.0,
            0.0,
            0.02,
        )
        np.testing.assert_allclose(result.force, [2.0, -1.0, 0.5])

    def test_custom_move_force(self):
        """Test a configured move force."""
        result = MotionModel(move_force=5.0).apply_action(
            _action(move=(0.0, 0.0, 1.0)),
            vector3(0.0, 0.0, 0.0),
            0.0,
            0.0,
            0.02,
        )
        np.testing.assert_allclose(result.force, [0.0, 0.0, 5.0])

    def test_wrong_action_size(self, model):
        """Test an action with the wrong length is rejected."""
        with pytest.raises(ValueError, match="5 components"):
            model.apply_action(np.zeros(4), vector3(0.0, 0.0, 0.0), 0.0, 0.0, 0.02)


class TestSmoothing:
    """Test the smoothed turn rates."""

    def test_rates_move_towards_action(self, model):
        """Test rates change by at most 2 per second."""
        result = model.apply_action(_action(pitch=1.0, yaw=-1.0), vector3(0.0, 0.0, 0.0), 0.0, 0.0, 0.02)

        assert result.smoothed_pitch_change == pytest.approx(0.04)
        assert result.smoothed_yaw_change == pytest.approx(-0.04)

    def test_rates_reach_target(self, model):
        """Test rates settle on the requested value."""
        pitch_rate = 0.0
        for _ in range(30):
            result = model.apply_action(
                _action(pitch=0.5),
                vector3(0.0, 0.0, 0.0),
                pitch_rate,
                0.0,
                0.02,
            )
            pitch_rate = result.smoothed_pitch_change

        assert pitch_rate == pytest.approx(0.5)

    def test_rotation_uses_smoothed_rate(self, model):
        """Test the rotation change is rate times dt times turn speed."""
        result = model.apply_action(_action(yaw=1.0), vector3(0.0, 10.0, 0.0), 0.0, 1.0, 0.02)

        assert result.smoothed_yaw_change == 1.0
        assert result.rotation[1] == pytest.approx(12.0)


class TestPitchClamp:
    """Test pitch wrapping and clamping."""

    def test_reported_angle_above_180_is_wrapped(self, model):
        """Test a slight nose-up pitch reported as 350 stays at -10."""
        result = model.apply_action(_action(), vector3(350.0, 0.0, 0.0), 0.0, 0.0, 0.02)
        assert result.rotation[0] == pytest.approx(-10.0)

    def test_pitch_clamped_nose_down(self, model):
        """Test pitch is limited to the maximum angle."""
        result = model.apply_action(_action(pitch=1.0), vector3(79.5, 0.0, 0.0), 1.0, 0.0, 0.02)
        assert result.rotation[0] == 80.0

    def test_pitch_clamped_nose_up(self, model):
        """Test a steep nose-up pitch is limited to the negative maximum."""
        result = model.apply_action(_action(), vector3(270.0, 0.0, 0.0), 0.0, 0.0, 0.02)
        assert result.rotation[0] == -80.0

    def test_wrap_after_adding_change(self, model):
        """Test the wrap applies to the pitch after the change is added."""
        # 170 + 1.0 * 0.15 * 100 = 185 -> -175 -> clamped to -80
        result = model.apply_action(_action(pitch=1.0), vector3(170.0, 0.0, 0.0), 1.0, 0.0, 0.15)
        assert result.rotation[0] == -80.0

    def test_pitch_always_within_limits(self, model, rng):
        """Test any reported pitch and action leave pitch within the limits."""
        for _ in range(100):
            current = vector3(rng.uniform(0.0, 360.0), rng.uniform(0.0, 360.0), 0.0)
            action = rng.uniform(-1.0, 1.0, size=5)
            result = model.apply_action(action, current, rng.uniform(-1, 1), rng.uniform(-1, 1), 0.02)
            assert -80.0 <= result.rotation[0] <= 80.0


class TestYawAndRoll:
    """Test yaw and roll handling."""

    def test_yaw_not_clamped(self, model):
        """Test yaw accumulates past 360."""
        result = model.apply_action(_action(yaw=1.0), vector3(0.0, 355.0, 0.0), 0.0, 1.0, 0.1)
        assert result.rotation[1] == pytest.approx(365.0)

    def test_roll_is_zero(self, model):
        """Test roll is always reset."""
        result = model.apply_action(_action(yaw=1.0), vector3(0.0, 0.0, 45.0), 0.0, 0.0, 0.02)
        assert result.rotation[2] == 0.0


class TestFrozen:
    """Test the frozen state."""

    def test_frozen_ignores_action(self, model):
        """Test a frozen model produces no force or rotation change."""
        current = vector3(10.0, 20.0, 0.0)

        result = model.apply_action(
            _action(move=(1.0, 1.0, 1.0), pitch=1.0, yaw=1.0),
            current,
            0.3,
            -0.2,
            0.02,
            frozen=True,
        )

        np.testing.assert_array_equal(result.force, np.zeros(3))
        np.testing.assert_array_equal(result.rotation, current)
        assert result.smoothed_pitch_change == 0.3
        assert result.smoothed_yaw_change == -0.2

    def test_frozen_ignores_malformed_action(self, model):
        """Test a frozen model does not validate the action it ignores."""
        current = vector3(10.0, 20.0, 0.0)

        result = model.apply_action(np.zeros(2), current, 0.0, 0.0, 0.02, frozen=True)

        np.testing.assert_array_equal(result.force, np.zeros(3))
        np.testing.assert_array_equal(result.rotation, current)

"""Mapping from the 5-value action vector to force and rotation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from hummingbird.dtypes import ACTION_SIZE
from hummingbird.errors import ERROR_INVALID_ACTION_SIZE
from hummingbird.geometry import move_towards, vector3
from hummingbird.logging_config import logger

if TYPE_CHECKING:
    from hummingbird.dtypes import EulerAngles, Vector3

# Defaults
DEFAULT_MOVE_FORCE = 2.0
DEFAULT_PITCH_SPEED = 100.0
DEFAULT_YAW_SPEED = 100.0
DEFAULT_MAX_PITCH_ANGLE = 80.0

# Maximum change of the smoothed pitch/yaw rates, per second
SMOOTHING_RATE = 2.0


@dataclass
class MotionResult:
    """
    Effect of one action on the agent.

    Attributes
    ----------
    force : Vector3
        Force to apply to the body.
    rotation : EulerAngles
        New ``[pitch, yaw, roll]`` in degrees.
    smoothed_pitch_change : float
        Updated smoothed pitch rate.
    smoothed_yaw_change : float
        Updated smoothed yaw rate.
    """

    force: Vector3
    rotation: EulerAngles
    smoothed_pitch_change: float
    smoothed_yaw_change: float


class MotionModel:
    """
    Turns actions into a move force and a smoothed pitch/yaw rotation.

    Action layout:

    - ``[0]`` move x (+1 right, -1 left)
    - ``[1]`` move y (+1 up, -1 down)
    - ``[2]`` move z (+1 forward, -1 backward)
    - ``[3]`` pitch rate (+1 pitch down, -1 pitch up)
    - ``[4]`` yaw rate (+1 turn right, -1 turn left)

    Parameters
    ----------
    move_force : float, optional
        Force per unit of move action.
    pitch_speed : float, optional
        Degrees per second of pitch at a full smoothed pitch rate.
    yaw_speed : float, optional
        Degrees per second of yaw at a full smoothed yaw rate.
    max_pitch_angle : float, optional
        Pitch is clamped to ``[-max_pitch_angle, max_pitch_angle]``.
    """

    def __init__(
        self,
        move_force: float = DEFAULT_MOVE_FORCE,
        pitch_speed: float = DEFAULT_PITCH_SPEED,
        yaw_speed: float = DEFAULT_YAW_SPEED,
        max_pitch_angle: float = DEFAULT_MAX_PITCH_ANGLE,
    ) -> None:
        self.move_force = move_force
        self.pitch_speed = pitch_speed
        self.yaw_speed = yaw_speed
        self.max_pitch_angle = max_pitch_angle

    def apply_action(  # noqa: PLR0913
        self,
        action: np.ndarray,
        current_rotation: EulerAngles,
        smoothed_pitch_change: float,
        smoothed_yaw_change: float,
        dt: float,
        *,
        frozen: bool = False,
    ) -> MotionResult:
        """
        Compute the force and rotation produced by an action.

        Parameters
        ----------
        action : np.ndarray
            The 5-value action.
        current_rotation : EulerAngles
            Current ``[pitch, yaw, roll]`` in degrees as reported by the body.
        smoothed_pitch_change : float
            Current smoothed pitch rate.
        smoothed_yaw_change : float
            Current smoothed yaw rate.
        dt : float
            Fixed step duration in seconds.
        frozen : bool, optional
            Ignore the action and keep the current state, by default False.

        Returns
        -------
        MotionResult
            Force, new rotation and new smoothed rates.

        Raises
        ------
        ValueError
            If the action does not have 5 values and the model is not frozen.
        """
        current_rotation = np.asarray(current_rotation, dtype=np.float64)
        if frozen:
            return MotionResult(
                force=np.zeros(3),
                rotation=current_rotation.copy(),
                smoothed_pitch_change=smoothed_pitch_change,
                smoothed_yaw_change=smoothed_yaw_change,
            )

        action = np.asarray(action, dtype=np.float64).ravel()
        if action.shape[0] != ACTION_SIZE:
            error_message = ERROR_INVALID_ACTION_SIZE.format(
                expected=ACTION_SIZE,
                actual=action.shape[0],
            )
            logger.error(error_message)
            raise ValueError(error_message)

        force = action[:3] * self.move_force

        pitch_change = move_towards(smoothed_pitch_change, action[3], SMOOTHING_RATE * dt)
        yaw_change = move_towards(smoothed_yaw_change, action[4], SMOOTHING_RATE * dt)

        # Clamp pitch to avoid flipping upside down
        pitch = current_rotation[0] + pitch_change * dt * self.pitch_speed
        if pitch > 180.0:  # noqa: PLR2004
            pitch -= 360.0
        pitch = float(np.clip(pitch, -self.max_pitch_angle, self.max_pitch_angle))

        yaw = current_rotation[1] + yaw_change * dt * self.yaw_speed

        return MotionResult(
            force=force,
            rotation=vector3(pitch, yaw, 0.0),
            smoothed_pitch_change=float(pitch_change),
            smoothed_yaw_change=float(yaw_change),
        )

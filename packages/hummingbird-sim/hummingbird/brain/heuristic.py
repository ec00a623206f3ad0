"""Scripted brain that flies straight at the nearest flower."""

import numpy as np

from hummingbird.dtypes import ACTION_SIZE
from hummingbird.env.flower_area import AREA_DIAMETER
from hummingbird.geometry import FORWARD, rotate_vector

# Defaults
DEFAULT_SLOWDOWN_DISTANCE = 0.5
DEFAULT_MIN_THROTTLE = 0.2
DEFAULT_TURN_SATURATION_DEGREES = 30.0


def _wrap_degrees(angle: float) -> float:
    return (angle + 180.0) % 360.0 - 180.0


class HeuristicBrain:
    """
    Steer toward the nearest flower using only the observation vector.

    The move action points along the observed beak-to-nectar direction and is
    throttled down close to the flower. Pitch and yaw rates turn the bird to
    face the nectar, saturating at ``turn_saturation`` degrees of error.

    Parameters
    ----------
    area_diameter : float, optional
        Diameter used to turn the observed normalized distance back into meters.
    slowdown_distance : float, optional
        Distance below which the move action is scaled down.
    min_throttle : float, optional
        Smallest move action magnitude while a flower is observed.
    turn_saturation : float, optional
        Angular error, in degrees, that produces a full turn rate.
    """

    def __init__(
        self,
        area_diameter: float = AREA_DIAMETER,
        slowdown_distance: float = DEFAULT_SLOWDOWN_DISTANCE,
        min_throttle: float = DEFAULT_MIN_THROTTLE,
        turn_saturation: float = DEFAULT_TURN_SATURATION_DEGREES,
    ) -> None:
        self.area_diameter = area_diameter
        self.slowdown_distance = slowdown_distance
        self.min_throttle = min_throttle
        self.turn_saturation = turn_saturation

    def reset(self) -> None:
        """Nothing to reset; the brain is stateless."""

    def run_brain(self, observation: np.ndarray) -> np.ndarray:
        """
        Compute an action from an observation.

        Parameters
        ----------
        observation : np.ndarray
            The 10-value observation.

        Returns
        -------
        np.ndarray
            The 5-value action; all zeros (hover) when nothing is observed.
        """
        observation = np.asarray(observation, dtype=np.float64)
        action = np.zeros(ACTION_SIZE)
        if not observation.any():
            return action

        rotation = observation[0:4]
        to_flower = observation[4:7]
        distance = observation[9] * self.area_diameter

        throttle = float(
            np.clip(distance / self.slowdown_distance, self.min_throttle, 1.0),
        )
        action[0:3] = to_flower * throttle

        forward = rotate_vector(rotation, FORWARD)
        current_yaw = np.degrees(np.arctan2(forward[0], forward[2]))
        target_yaw = np.degrees(np.arctan2(to_flower[0], to_flower[2]))
        # Positive pitch tilts the nose down
        current_pitch = -np.degrees(np.arcsin(np.clip(forward[1], -1.0, 1.0)))
        target_pitch = -np.degrees(np.arcsin(np.clip(to_flower[1], -1.0, 1.0)))

        action[3] = np.clip((target_pitch - current_pitch) / self.turn_saturation, -1.0, 1.0)
        action[4] = np.clip(
            _wrap_degrees(target_yaw - current_yaw) / self.turn_saturation,
            -1.0,
            1.0,
        )
        return action

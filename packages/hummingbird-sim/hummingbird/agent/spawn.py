"""Safe spawn placement for the start of an episode."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from hummingbird.errors import ERROR_NO_FLOWERS_TO_SPAWN_NEAR, ERROR_NO_SAFE_SPAWN, SpawnError
from hummingbird.geometry import (
    FORWARD,
    UP,
    euler_to_quaternion,
    look_rotation,
    rotate_vector,
    vector3,
)
from hummingbird.logging_config import logger

if TYPE_CHECKING:
    from hummingbird.dtypes import Quaternion, Vector3
    from hummingbird.env.flower_area import FlowerArea

# Defaults
DEFAULT_MAX_SPAWN_ATTEMPTS = 100
DEFAULT_SPAWN_CLEARANCE_RADIUS = 0.05
DEFAULT_NEAR_FLOWER_DISTANCE = (0.1, 0.2)
DEFAULT_FREE_ROAM_HEIGHT = (1.2, 2.5)
DEFAULT_FREE_ROAM_RADIUS = (2.0, 7.0)
DEFAULT_FREE_ROAM_PITCH = (-60.0, 60.0)
DEFAULT_FREE_ROAM_YAW = (-180.0, 180.0)
DEFAULT_NEAR_FLOWER_PROBABILITY = 0.5

OverlapQuery = Callable[["Vector3", float], int]


class SpawnMode(Enum):
    """Where to place the agent at the start of an episode."""

    NEAR_FLOWER = "near_flower"
    FREE_ROAM = "free_roam"


@dataclass
class Pose:
    """
    Position and rotation of the agent.

    Attributes
    ----------
    position : Vector3
        World position.
    rotation : Quaternion
        World rotation ``[x, y, z, w]``.
    """

    position: Vector3
    rotation: Quaternion


class SpawnPlanner:
    """
    Rejection-samples collision-free spawn poses.

    Parameters
    ----------
    rng : np.random.Generator
        Random source for mode choice and candidate poses.
    clearance_radius : float, optional
        Radius of the sphere that must be free of colliders.
    near_flower_distance : tuple[float, float], optional
        Range of distances in front of a flower for ``NEAR_FLOWER`` spawns.
    free_roam_height : tuple[float, float], optional
        Height range for ``FREE_ROAM`` spawns.
    free_roam_radius : tuple[float, float], optional
        Horizontal distance range from the area origin for ``FREE_ROAM`` spawns.
    near_flower_probability : float, optional
        Chance of a ``NEAR_FLOWER`` spawn in training mode.
    """

    def __init__(  # noqa: PLR0913
        self,
        rng: np.random.Generator,
        clearance_radius: float = DEFAULT_SPAWN_CLEARANCE_RADIUS,
        near_flower_distance: tuple[float, float] = DEFAULT_NEAR_FLOWER_DISTANCE,
        free_roam_height: tuple[float, float] = DEFAULT_FREE_ROAM_HEIGHT,
        free_roam_radius: tuple[float, float] = DEFAULT_FREE_ROAM_RADIUS,
        near_flower_probability: float = DEFAULT_NEAR_FLOWER_PROBABILITY,
    ) -> None:
        self.rng = rng
        self.clearance_radius = clearance_radius
        self.near_flower_distance = near_flower_distance
        self.free_roam_height = free_roam_height
        self.free_roam_radius = free_roam_radius
        self.near_flower_probability = near_flower_probability

    def choose_mode(self, *, training_mode: bool) -> SpawnMode:
        """Pick the spawn mode for an episode.

        Outside training the agent always starts in front of a flower.
        """
        if not training_mode:
            return SpawnMode.NEAR_FLOWER
        if self.rng.random() < self.near_flower_probability:
            return SpawnMode.NEAR_FLOWER
        return SpawnMode.FREE_ROAM

    def find_safe_pose(
        self,
        mode: SpawnMode,
        flower_area: FlowerArea,
        overlap_sphere: OverlapQuery,
        max_attempts: int = DEFAULT_MAX_SPAWN_ATTEMPTS,
    ) -> Pose:
        """
        Find a pose that does not collide with anything.

        Parameters
        ----------
        mode : SpawnMode
            Spawn in front of a random flower or anywhere in the area.
        flower_area : FlowerArea
            The area to spawn in.
        overlap_sphere : OverlapQuery
            Counts colliders within a radius of a point.
        max_attempts : int, optional
            Maximum number of candidates to test, by default 100.

        Returns
        -------
        Pose
            The first collision-free candidate.

        Raises
        ------
        SpawnError
            If no candidate is free within ``max_attempts`` or there is no
            flower to spawn near.
        """
        if mode == SpawnMode.NEAR_FLOWER and not flower_area.flowers:
            logger.error(ERROR_NO_FLOWERS_TO_SPAWN_NEAR)
            raise SpawnError(ERROR_NO_FLOWERS_TO_SPAWN_NEAR)

        attempts_remaining = max_attempts
        while attempts_remaining > 0:
            attempts_remaining -= 1

            if mode == SpawnMode.NEAR_FLOWER:
                candidate = self._near_flower_candidate(flower_area)
            else:
                candidate = self._free_roam_candidate(flower_area)

            if overlap_sphere(candidate.position, self.clearance_radius) == 0:
                logger.debug(
                    f"Spawn found after {max_attempts - attempts_remaining} attempts "
                    f"({mode.value}) at {candidate.position.tolist()}",
                )
                return candidate

        error_message = ERROR_NO_SAFE_SPAWN.format(attempts=max_attempts)
        logger.error(error_message)
        raise SpawnError(error_message, attempts=max_attempts)

    def _near_flower_candidate(self, flower_area: FlowerArea) -> Pose:
        flower = flower_area.flowers[self.rng.integers(len(flower_area.flowers))]

        # Position a bit in front of the flower, beak pointed at its nectar
        distance = self.rng.uniform(*self.near_flower_distance)
        position = flower.position + flower.up_vector * distance
        rotation = look_rotation(flower.center_position - position, UP)
        return Pose(position=position, rotation=rotation)

    def _free_roam_candidate(self, flower_area: FlowerArea) -> Pose:
        height = self.rng.uniform(*self.free_roam_height)
        radius = self.rng.uniform(*self.free_roam_radius)
        direction = euler_to_quaternion(vector3(0.0, self.rng.uniform(-180.0, 180.0), 0.0))
        position = flower_area.position + UP * height + rotate_vector(direction, FORWARD) * radius

        pitch = self.rng.uniform(*DEFAULT_FREE_ROAM_PITCH)
        yaw = self.rng.uniform(*DEFAULT_FREE_ROAM_YAW)
        rotation = euler_to_quaternion(vector3(pitch, yaw, 0.0))
        return Pose(position=position, rotation=rotation)

"""The flower area: registry of every flower and flower plant in one environment."""

from __future__ import annotations

from collections.abc import Hashable
from typing import TYPE_CHECKING

import numpy as np

from hummingbird.env.scene import FLOWER_PLANT_TAG
from hummingbird.errors import (
    ERROR_AREA_ALREADY_DISCOVERED,
    ERROR_DUPLICATE_NECTAR_COLLIDER,
    ERROR_UNKNOWN_NECTAR_COLLIDER,
    InvariantViolationError,
    UnknownNectarColliderError,
)
from hummingbird.geometry import euler_to_quaternion, vector3
from hummingbird.logging_config import logger

if TYPE_CHECKING:
    from hummingbird.env.flower import Flower, FlowerPlant
    from hummingbird.env.scene import SceneNode

# Diameter of the area where the agent and flowers can be.
# Used to normalize the observed distance from the agent to a flower.
AREA_DIAMETER = 20.0

# Plant jitter applied on every reset, in degrees
PLANT_TILT_RANGE = 5.0
PLANT_YAW_RANGE = 180.0


class FlowerArea:
    """
    Manages a collection of flower plants and their flowers.

    Membership is fixed once ``discover`` has run; resets only change plant
    orientation and flower nectar.

    Attributes
    ----------
    position : np.ndarray
        World position of the area origin.
    diameter : float
        Diameter of the area, used to normalize observed distances.
    flowers : list[Flower]
        All flowers in discovery order.
    flower_plants : list[FlowerPlant]
        All flower plants in discovery order.
    """

    def __init__(
        self,
        position: np.ndarray | None = None,
        diameter: float = AREA_DIAMETER,
    ) -> None:
        self.position = vector3(0.0, 0.0, 0.0) if position is None else np.asarray(position)
        self.diameter = diameter
        self.flowers: list[Flower] = []
        self.flower_plants: list[FlowerPlant] = []
        self._nectar_flower_dict: dict[Hashable, Flower] = {}
        self._discovered = False

    @classmethod
    def from_scene(
        cls,
        scene_root: SceneNode,
        position: np.ndarray | None = None,
        diameter: float = AREA_DIAMETER,
    ) -> FlowerArea:
        """Create an area and discover its flowers from a scene."""
        area = cls(position=position, diameter=diameter)
        area.discover(scene_root)
        return area

    def __len__(self) -> int:
        return len(self.flowers)

    def discover(self, scene_root: SceneNode) -> None:
        """
        Find all flowers and flower plants below a scene node.

        Parameters
        ----------
        scene_root : SceneNode
            Root of the scene to search. The root itself is not inspected.

        Raises
        ------
        InvariantViolationError
            If the area was already discovered or two flowers share a collider.
        """
        if self._discovered:
            logger.error(ERROR_AREA_ALREADY_DISCOVERED)
            raise InvariantViolationError(ERROR_AREA_ALREADY_DISCOVERED)

        self._find_child_flowers(scene_root)
        self._discovered = True
        logger.info(
            f"Discovered {len(self.flowers)} flowers on {len(self.flower_plants)} plants.",
        )

    def _find_child_flowers(self, parent: SceneNode) -> None:
        for child in parent.children:
            if child.tag == FLOWER_PLANT_TAG:
                if child.plant is not None:
                    self.flower_plants.append(child.plant)
                # Look for flowers within this flower plant
                self._find_child_flowers(child)
            elif child.flower is not None:
                self._register_flower(child.flower)
            else:
                self._find_child_flowers(child)

    def _register_flower(self, flower: Flower) -> None:
        handle = flower.nectar_collider
        if handle in self._nectar_flower_dict:
            error_message = ERROR_DUPLICATE_NECTAR_COLLIDER.format(handle=handle)
            logger.error(error_message)
            raise InvariantViolationError(error_message)
        self.flowers.append(flower)
        self._nectar_flower_dict[handle] = flower

    def get_flower_from_nectar(self, nectar_collider: Hashable) -> Flower:
        """
        Get the flower that a nectar collider belongs to.

        Parameters
        ----------
        nectar_collider : Hashable
            The nectar collider handle.

        Returns
        -------
        Flower
            The matching flower.

        Raises
        ------
        UnknownNectarColliderError
            If no flower owns the collider.
        """
        try:
            return self._nectar_flower_dict[nectar_collider]
        except KeyError:
            error_message = ERROR_UNKNOWN_NECTAR_COLLIDER.format(handle=nectar_collider)
            logger.error(error_message)
            raise UnknownNectarColliderError(error_message) from None

    def reset_flowers(self, rng: np.random.Generator) -> None:
        """
        Reset all flowers and randomly re-orient every flower plant.

        Each plant gets a full random turn about the vertical axis and a small
        random tilt about the other two.

        Parameters
        ----------
        rng : np.random.Generator
            Random source for the plant orientations.
        """
        for flower_plant in self.flower_plants:
            x_rot = rng.uniform(-PLANT_TILT_RANGE, PLANT_TILT_RANGE)
            y_rot = rng.uniform(-PLANT_YAW_RANGE, PLANT_YAW_RANGE)
            z_rot = rng.uniform(-PLANT_TILT_RANGE, PLANT_TILT_RANGE)
            flower_plant.local_rotation = euler_to_quaternion(vector3(x_rot, y_rot, z_rot))

        for flower in self.flowers:
            flower.reset()

        logger.debug(f"Reset {len(self.flowers)} flowers.")

    def flowers_with_nectar(self) -> int:
        """Count the flowers that still have nectar."""
        return sum(1 for flower in self.flowers if flower.has_nectar)

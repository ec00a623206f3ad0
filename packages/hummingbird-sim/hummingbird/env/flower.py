"""Flowers and flower plants: the depletable nectar sources of the flower area."""

from __future__ import annotations

import threading
from collections.abc import Hashable
from typing import Protocol

import numpy as np

from hummingbird.dtypes import Color, Quaternion, Vector3  # noqa: TC001 - used at runtime
from hummingbird.geometry import IDENTITY_QUATERNION, UP, normalize, rotate_vector
from hummingbird.logging_config import logger

# Defaults
DEFAULT_FULL_FLOWER_COLOR: Color = (1.0, 0.0, 0.3)
DEFAULT_EMPTY_FLOWER_COLOR: Color = (0.5, 0.0, 1.0)
DEFAULT_NECTAR_RADIUS = 0.02
DEFAULT_FLOWER_RADIUS = 0.04
FULL_NECTAR_AMOUNT = 1.0


class FlowerMaterial(Protocol):
    """Visual material of a flower mesh. Color changes are fire-and-forget."""

    def set_base_color(self, color: Color) -> None:
        """Set the base color of the material."""
        ...


class FlowerPlant:
    """
    A plant holding one or more flowers.

    Plants are the unit that gets randomly re-oriented between episodes; the
    flowers they carry move with them.

    Attributes
    ----------
    name : str
        Scene name of the plant.
    position : Vector3
        World position of the plant's base.
    local_rotation : Quaternion
        Orientation of the plant relative to the flower area.
    """

    def __init__(
        self,
        name: str,
        position: Vector3,
        local_rotation: Quaternion | None = None,
    ) -> None:
        self.name = name
        self.position = np.asarray(position, dtype=np.float64)
        self.local_rotation = (
            IDENTITY_QUATERNION.copy()
            if local_rotation is None
            else np.asarray(local_rotation, dtype=np.float64)
        )

    def __repr__(self) -> str:
        return f"FlowerPlant(name={self.name!r}, position={self.position.tolist()})"


class Flower:
    """
    A single flower with a depletable amount of nectar.

    The flower is full (``nectar_amount == 1.0``) after a reset and becomes
    empty when feeding drives the amount to zero. An empty flower deactivates
    both its nectar collider and its mesh collider and switches to the empty
    color, so no further feeding contacts can happen until the next reset.

    Parameters
    ----------
    nectar_collider : Hashable
        Handle of the collider the beak must touch to feed. Unique per flower.
    local_position : Vector3
        Position of the flower base, relative to its plant (or the world when
        the flower has no plant).
    local_up : Vector3, optional
        Direction the flower faces, relative to its plant, by default world up.
    plant : FlowerPlant | None, optional
        The plant carrying this flower.
    material : FlowerMaterial | None, optional
        Material that receives color changes.
    nectar_offset : float, optional
        Distance of the nectar collider centre from the flower base along the
        flower's up vector, by default 0.0.
    nectar_radius : float, optional
        Radius of the spherical nectar collider.
    flower_radius : float, optional
        Radius of the spherical flower mesh collider.
    full_color : Color, optional
        Color shown while the flower has nectar.
    empty_color : Color, optional
        Color shown once the flower is empty.
    """

    def __init__(  # noqa: PLR0913
        self,
        nectar_collider: Hashable,
        local_position: Vector3,
        local_up: Vector3 = UP,
        plant: FlowerPlant | None = None,
        material: FlowerMaterial | None = None,
        nectar_offset: float = 0.0,
        nectar_radius: float = DEFAULT_NECTAR_RADIUS,
        flower_radius: float = DEFAULT_FLOWER_RADIUS,
        full_color: Color = DEFAULT_FULL_FLOWER_COLOR,
        empty_color: Color = DEFAULT_EMPTY_FLOWER_COLOR,
    ) -> None:
        self.nectar_collider = nectar_collider
        self.local_position = np.asarray(local_position, dtype=np.float64)
        self.local_up = normalize(local_up)
        self.plant = plant
        self.material = material
        self.nectar_offset = nectar_offset
        self.nectar_radius = nectar_radius
        self.flower_radius = flower_radius
        self.full_color = full_color
        self.empty_color = empty_color

        self.nectar_collider_active = True
        self.flower_collider_active = True
        self._nectar_amount = FULL_NECTAR_AMOUNT
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return (
            f"Flower(nectar_collider={self.nectar_collider!r}, "
            f"nectar_amount={self._nectar_amount:.3f})"
        )

    @property
    def nectar_amount(self) -> float:
        """Get the remaining nectar, in ``[0, 1]``."""
        return self._nectar_amount

    @property
    def has_nectar(self) -> bool:
        """Whether the flower has any nectar remaining."""
        return self._nectar_amount > 0.0

    @property
    def position(self) -> Vector3:
        """World position of the flower base."""
        if self.plant is None:
            return self.local_position.copy()
        return self.plant.position + rotate_vector(self.plant.local_rotation, self.local_position)

    @property
    def up_vector(self) -> Vector3:
        """World direction the flower faces (unit length)."""
        if self.plant is None:
            return self.local_up.copy()
        return normalize(rotate_vector(self.plant.local_rotation, self.local_up))

    @property
    def center_position(self) -> Vector3:
        """World position of the nectar collider centre."""
        return self.position + self.up_vector * self.nectar_offset

    def feed(self, amount: float) -> float:
        """
        Attempt to remove nectar from the flower.

        The full requested ``amount`` is subtracted, but only what was actually
        available is reported back. Reaching zero empties the flower. Negative
        or non-finite requests remove nothing.

        Parameters
        ----------
        amount : float
            The amount of nectar to remove.

        Returns
        -------
        float
            The amount successfully removed, in ``[0, nectar_amount]``.
        """
        with self._lock:
            requested = max(amount, 0.0) if np.isfinite(amount) else 0.0
            nectar_taken = min(requested, self._nectar_amount)

            self._nectar_amount -= requested

            if self._nectar_amount <= 0.0:
                self._nectar_amount = 0.0
                if self.nectar_collider_active or self.flower_collider_active:
                    self.flower_collider_active = False
                    self.nectar_collider_active = False
                    self._apply_color(self.empty_color)
                    logger.debug(f"Flower {self.nectar_collider!r} is empty.")

            return nectar_taken

    def reset(self) -> None:
        """Refill the flower and reactivate its colliders."""
        with self._lock:
            self._nectar_amount = FULL_NECTAR_AMOUNT
            self.flower_collider_active = True
            self.nectar_collider_active = True
            self._apply_color(self.full_color)

    def _apply_color(self, color: Color) -> None:
        if self.material is not None:
            self.material.set_base_color(color)

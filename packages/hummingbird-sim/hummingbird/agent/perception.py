"""
Agent perception: nearest-flower selection and observation vectors.

Both functions are pure; the agent owns the state they are applied to.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from hummingbird.dtypes import OBSERVATION_SIZE
from hummingbird.geometry import normalize, normalize_quaternion

if TYPE_CHECKING:
    from hummingbird.dtypes import Quaternion, Vector3
    from hummingbird.env.flower import Flower


def select_nearest_flower(
    flowers: Sequence[Flower],
    beak_position: Vector3,
    current_index: int | None = None,
    *,
    force_reset: bool = False,
) -> int | None:
    """
    Select the nearest flower that still has nectar.

    Every flower with nectar is a candidate and is compared against the
    current choice, so the current choice only wins an exact distance tie.
    An empty flower is never returned: when no flower has nectar the result
    is None, whatever the current choice was.

    Parameters
    ----------
    flowers : Sequence[Flower]
        Flowers to scan, usually ``FlowerArea.flowers``.
    beak_position : Vector3
        World position of the beak tip.
    current_index : int | None, optional
        Index of the current nearest flower.
    force_reset : bool, optional
        Ignore the current choice entirely, by default False.

    Returns
    -------
    int | None
        Index into ``flowers`` of the nearest flower with nectar, or None.
    """
    beak_position = np.asarray(beak_position, dtype=np.float64)

    def distance_to(index: int) -> float:
        return float(np.linalg.norm(flowers[index].position - beak_position))

    nearest_index: int | None = None
    nearest_distance = np.inf
    if (
        not force_reset
        and current_index is not None
        and 0 <= current_index < len(flowers)
        and flowers[current_index].has_nectar
    ):
        nearest_index = current_index
        nearest_distance = distance_to(current_index)

    for index, flower in enumerate(flowers):
        if not flower.has_nectar:
            continue
        distance = distance_to(index)
        if distance < nearest_distance:
            nearest_index = index
            nearest_distance = distance

    return nearest_index


def build_observation(
    local_rotation: Quaternion,
    beak_position: Vector3,
    beak_forward: Vector3,
    flower: Flower | None,
    area_diameter: float,
) -> np.ndarray:
    """
    Build the 10-value observation vector.

    Layout:

    - ``[0:4]`` agent local rotation, normalized quaternion ``x, y, z, w``
    - ``[4:7]`` unit vector from the beak tip to the flower's nectar
    - ``[7]`` dot of that vector with the flower's inward normal
      (+1 when the beak tip is directly in front of the flower, -1 behind it)
    - ``[8]`` dot of the beak direction with the flower's inward normal
      (+1 when the beak points straight at the flower)
    - ``[9]`` beak-to-nectar distance divided by the area diameter (unclamped)

    Parameters
    ----------
    local_rotation : Quaternion
        Agent rotation relative to the flower area.
    beak_position : Vector3
        World position of the beak tip.
    beak_forward : Vector3
        World direction of the beak.
    flower : Flower | None
        The nearest flower, or None when nothing is perceived.
    area_diameter : float
        Diameter of the flower area.

    Returns
    -------
    np.ndarray
        float32 array of length 10; all zeros when ``flower`` is None.
    """
    if flower is None:
        return np.zeros(OBSERVATION_SIZE, dtype=np.float32)

    to_flower = flower.center_position - np.asarray(beak_position, dtype=np.float64)
    to_flower_direction = normalize(to_flower)
    flower_inward = -normalize(flower.up_vector)

    observation = np.concatenate(
        [
            normalize_quaternion(local_rotation),
            to_flower_direction,
            [
                float(np.dot(to_flower_direction, flower_inward)),
                float(np.dot(normalize(beak_forward), flower_inward)),
                float(np.linalg.norm(to_flower)) / area_diameter,
            ],
        ],
    )
    return observation.astype(np.float32)

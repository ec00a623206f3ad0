"""
Scene description for a flower area.

A scene is a tree of ``SceneNode`` objects. Nodes tagged ``flower_plant`` carry
a ``FlowerPlant``; nodes that carry a ``Flower`` are leaves as far as discovery
is concerned. ``build_scene`` generates a tree from a layout configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from pydantic import BaseModel, field_validator

from hummingbird.env.flower import DEFAULT_FLOWER_RADIUS, DEFAULT_NECTAR_RADIUS, Flower, FlowerPlant
from hummingbird.geometry import normalize, vector3
from hummingbird.logging_config import logger

FLOWER_PLANT_TAG = "flower_plant"

# Defaults
DEFAULT_NUM_PLANTS = 6
DEFAULT_FLOWERS_PER_PLANT = 3
DEFAULT_PLANT_RING_RADIUS = 4.5
DEFAULT_FLOWER_STEM_OFFSET = 0.3
DEFAULT_FLOWER_MIN_HEIGHT = 1.2
DEFAULT_FLOWER_MAX_HEIGHT = 2.0
DEFAULT_FLOWER_TILT_DEGREES = 30.0
DEFAULT_NECTAR_OFFSET = 0.01


class FlowerLayoutConfig(BaseModel):
    """Configuration for procedurally laid out flower plants."""

    num_plants: int = DEFAULT_NUM_PLANTS
    flowers_per_plant: int = DEFAULT_FLOWERS_PER_PLANT
    plant_ring_radius: float = DEFAULT_PLANT_RING_RADIUS
    flower_stem_offset: float = DEFAULT_FLOWER_STEM_OFFSET
    flower_min_height: float = DEFAULT_FLOWER_MIN_HEIGHT
    flower_max_height: float = DEFAULT_FLOWER_MAX_HEIGHT
    flower_tilt_degrees: float = DEFAULT_FLOWER_TILT_DEGREES  # Upward tilt of the flower face
    nectar_offset: float = DEFAULT_NECTAR_OFFSET
    nectar_radius: float = DEFAULT_NECTAR_RADIUS
    flower_radius: float = DEFAULT_FLOWER_RADIUS

    @field_validator("num_plants", "flowers_per_plant")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        """Validate counts are not negative."""
        if v < 0:
            msg = f"Flower layout counts must be non-negative, got {v}."
            raise ValueError(msg)
        return v


@dataclass
class SceneNode:
    """
    A node in the scene graph.

    Attributes
    ----------
    name : str
        Node name.
    tag : str | None
        Optional tag; ``flower_plant`` marks plant nodes.
    children : list[SceneNode]
        Child nodes.
    plant : FlowerPlant | None
        Plant payload for nodes tagged ``flower_plant``.
    flower : Flower | None
        Flower payload.
    """

    name: str
    tag: str | None = None
    children: list[SceneNode] = field(default_factory=list)
    plant: FlowerPlant | None = None
    flower: Flower | None = None

    def add_child(self, child: SceneNode) -> SceneNode:
        """Append a child node and return it."""
        self.children.append(child)
        return child


def build_scene(
    layout: FlowerLayoutConfig,
    rng: np.random.Generator,
    area_position: np.ndarray | None = None,
) -> SceneNode:
    """
    Build a flower area scene with plants arranged in a ring.

    Plants are spaced evenly around the area origin with a small random angular
    jitter. Each plant carries flowers around its stem at random heights, each
    facing outward and tilted upward.

    Parameters
    ----------
    layout : FlowerLayoutConfig
        Layout parameters.
    rng : np.random.Generator
        Random source for the jitter and flower heights.
    area_position : np.ndarray | None, optional
        World position of the area origin, by default the world origin.

    Returns
    -------
    SceneNode
        Root node of the generated scene.
    """
    origin = np.zeros(3) if area_position is None else np.asarray(area_position, dtype=np.float64)
    root = SceneNode(name="FlowerArea")
    root.add_child(SceneNode(name="Ground", tag="ground"))
    plants_node = root.add_child(SceneNode(name="FlowerPlants"))

    tilt = np.radians(layout.flower_tilt_degrees)
    for plant_index in range(layout.num_plants):
        angle = 2 * np.pi * plant_index / max(layout.num_plants, 1)
        angle += rng.uniform(-0.2, 0.2)
        plant_position = origin + vector3(
            layout.plant_ring_radius * np.sin(angle),
            0.0,
            layout.plant_ring_radius * np.cos(angle),
        )
        plant = FlowerPlant(name=f"FlowerPlant_{plant_index}", position=plant_position)
        plant_node = plants_node.add_child(
            SceneNode(name=plant.name, tag=FLOWER_PLANT_TAG, plant=plant),
        )
        plant_node.add_child(SceneNode(name="Stem"))

        for flower_index in range(layout.flowers_per_plant):
            azimuth = 2 * np.pi * flower_index / max(layout.flowers_per_plant, 1)
            outward = vector3(np.sin(azimuth), 0.0, np.cos(azimuth))
            height = rng.uniform(layout.flower_min_height, layout.flower_max_height)
            local_position = outward * layout.flower_stem_offset + vector3(0.0, height, 0.0)
            local_up = normalize(outward * np.cos(tilt) + vector3(0.0, np.sin(tilt), 0.0))

            flower = Flower(
                nectar_collider=f"{plant.name}/Flower_{flower_index}/FlowerNectarCollider",
                local_position=local_position,
                local_up=local_up,
                plant=plant,
                nectar_offset=layout.nectar_offset,
                nectar_radius=layout.nectar_radius,
                flower_radius=layout.flower_radius,
            )
            plant_node.add_child(SceneNode(name=f"Flower_{flower_index}", flower=flower))

    logger.debug(
        f"Built scene with {layout.num_plants} plants and "
        f"{layout.num_plants * layout.flowers_per_plant} flowers.",
    )
    return root

"""Module for the flower area environment."""

__all__ = [
    "AREA_DIAMETER",
    "FLOWER_PLANT_TAG",
    "Flower",
    "FlowerArea",
    "FlowerLayoutConfig",
    "FlowerMaterial",
    "FlowerPlant",
    "KinematicBody",
    "PhysicsConfig",
    "PhysicsWorld",
    "RigidBody",
    "SceneNode",
    "StepContacts",
    "build_scene",
]

from hummingbird.env.flower import Flower, FlowerMaterial, FlowerPlant
from hummingbird.env.flower_area import AREA_DIAMETER, FlowerArea
from hummingbird.env.physics import (
    KinematicBody,
    PhysicsConfig,
    PhysicsWorld,
    RigidBody,
    StepContacts,
)
from hummingbird.env.scene import FLOWER_PLANT_TAG, FlowerLayoutConfig, SceneNode, build_scene

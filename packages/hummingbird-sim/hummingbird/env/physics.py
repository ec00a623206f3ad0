"""
Rigid-body interface and a kinematic stand-in for it.

The agent only talks to its body through the ``RigidBody`` protocol. A game
engine or physics library can provide the real implementation; ``KinematicBody``
and ``PhysicsWorld`` are a small point-mass integrator used by the episode
runner and the tests. Flower colliders are treated as spheres, the area
boundary as a vertical cylinder with a floor and a ceiling.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

import numpy as np
from pydantic import BaseModel

from hummingbird.geometry import (
    IDENTITY_QUATERNION,
    euler_to_quaternion,
    normalize,
    normalize_quaternion,
    quaternion_to_euler,
    rotate_vector,
)
from hummingbird.logging_config import logger

if TYPE_CHECKING:
    from hummingbird.dtypes import EulerAngles, Quaternion, Vector3
    from hummingbird.env.flower_area import FlowerArea

# Defaults
DEFAULT_FIXED_DELTA_TIME = 0.02
DEFAULT_BODY_MASS = 1.0
DEFAULT_BODY_DRAG = 2.0
DEFAULT_BODY_RADIUS = 0.05
DEFAULT_TRIGGER_RADIUS = 0.15
DEFAULT_CEILING_HEIGHT = 6.0


class PhysicsConfig(BaseModel):
    """Configuration for the kinematic physics stand-in."""

    fixed_delta_time: float = DEFAULT_FIXED_DELTA_TIME
    mass: float = DEFAULT_BODY_MASS
    drag: float = DEFAULT_BODY_DRAG  # Linear velocity damping per second
    body_radius: float = DEFAULT_BODY_RADIUS
    trigger_radius: float = DEFAULT_TRIGGER_RADIUS  # Reach of the body's nectar trigger
    ceiling_height: float = DEFAULT_CEILING_HEIGHT


class RigidBody(Protocol):
    """Narrow view of a physics body used by the agent."""

    @property
    def position(self) -> Vector3:
        """World position of the body."""
        ...

    @property
    def rotation(self) -> Quaternion:
        """World rotation of the body as ``[x, y, z, w]``."""
        ...

    def apply_force(self, force: Vector3) -> None:
        """Add a force to be integrated on the next physics step."""
        ...

    def current_euler_rotation(self) -> EulerAngles:
        """Current rotation as ``[pitch, yaw, roll]`` degrees in ``[0, 360)``."""
        ...

    def set_rotation_euler(self, euler: EulerAngles) -> None:
        """Set the rotation from ``[pitch, yaw, roll]`` degrees."""
        ...

    def set_pose(self, position: Vector3, rotation: Quaternion) -> None:
        """Teleport the body."""
        ...

    def reset_velocity(self) -> None:
        """Zero linear and angular velocity."""
        ...

    def overlap_sphere(self, center: Vector3, radius: float) -> int:
        """Count colliders intersecting a sphere."""
        ...

    def set_body_sleeping(self, sleeping: bool) -> None:  # noqa: FBT001
        """Put the body to sleep or wake it up."""
        ...


@dataclass
class StepContacts:
    """
    Contacts found during one physics step.

    Attributes
    ----------
    boundary_collision : bool
        Whether the body hit a wall or the ceiling of the area.
    nectar_contacts : list[tuple[Hashable, np.ndarray]]
        Nectar collider handles touched by the body trigger, each with the
        point on the collider closest to the beak tip.
    """

    boundary_collision: bool = False
    nectar_contacts: list[tuple[Hashable, np.ndarray]] = field(default_factory=list)


def closest_point_on_sphere(center: Vector3, radius: float, point: Vector3) -> Vector3:
    """Closest point of a solid sphere to ``point``."""
    offset = np.asarray(point, dtype=np.float64) - center
    distance = np.linalg.norm(offset)
    if distance <= radius:
        return np.asarray(point, dtype=np.float64)
    return center + normalize(offset) * radius


class KinematicBody:
    """
    Point-mass body integrated with semi-implicit Euler steps.

    Parameters
    ----------
    world : PhysicsWorld
        World used for overlap queries.
    config : PhysicsConfig
        Mass, drag and size of the body.
    """

    def __init__(self, world: PhysicsWorld, config: PhysicsConfig) -> None:
        self.world = world
        self.config = config
        self._position = np.zeros(3)
        self._rotation = IDENTITY_QUATERNION.copy()
        self.velocity = np.zeros(3)
        self.angular_velocity = np.zeros(3)
        self.sleeping = False
        self._accumulated_force = np.zeros(3)

    @property
    def position(self) -> Vector3:
        """World position of the body."""
        return self._position.copy()

    @property
    def rotation(self) -> Quaternion:
        """World rotation of the body."""
        return self._rotation.copy()

    def apply_force(self, force: Vector3) -> None:
        """Add a world-space force for the next step."""
        if self.sleeping:
            return
        self._accumulated_force += np.asarray(force, dtype=np.float64)

    def current_euler_rotation(self) -> EulerAngles:
        """Current rotation as Euler degrees."""
        return quaternion_to_euler(self._rotation)

    def set_rotation_euler(self, euler: EulerAngles) -> None:
        """Set the rotation from Euler degrees."""
        self._rotation = euler_to_quaternion(euler)

    def set_pose(self, position: Vector3, rotation: Quaternion) -> None:
        """Teleport the body."""
        self._position = np.asarray(position, dtype=np.float64).copy()
        self._rotation = normalize_quaternion(rotation)

    def reset_velocity(self) -> None:
        """Zero velocity and pending forces."""
        self.velocity = np.zeros(3)
        self.angular_velocity = np.zeros(3)
        self._accumulated_force = np.zeros(3)

    def overlap_sphere(self, center: Vector3, radius: float) -> int:
        """Count colliders intersecting a sphere."""
        return self.world.overlap_sphere(center, radius)

    def set_body_sleeping(self, sleeping: bool) -> None:  # noqa: FBT001
        """Sleep (stop integrating) or wake the body."""
        self.sleeping = sleeping
        if sleeping:
            self.reset_velocity()

    def integrate(self, dt: float) -> None:
        """Advance the body by ``dt`` seconds."""
        if self.sleeping:
            self._accumulated_force = np.zeros(3)
            return
        acceleration = self._accumulated_force / self.config.mass
        self.velocity = (self.velocity + acceleration * dt) * max(0.0, 1.0 - self.config.drag * dt)
        self._position = self._position + self.velocity * dt
        self._accumulated_force = np.zeros(3)


class PhysicsWorld:
    """
    Minimal world holding one kinematic body inside a flower area.

    Parameters
    ----------
    flower_area : FlowerArea
        The area whose flowers provide colliders.
    config : PhysicsConfig | None, optional
        Physics configuration.
    """

    def __init__(self, flower_area: FlowerArea, config: PhysicsConfig | None = None) -> None:
        self.flower_area = flower_area
        self.config = config or PhysicsConfig()
        self.boundary_radius = flower_area.diameter / 2.0
        self.body = KinematicBody(self, self.config)

    def overlap_sphere(self, center: Vector3, radius: float) -> int:
        """
        Count active colliders intersecting a sphere.

        Flower mesh colliders, nectar colliders, the floor, the ceiling and
        the boundary wall are all counted.
        """
        center = np.asarray(center, dtype=np.float64)
        hits = 0
        for flower in self.flower_area.flowers:
            if flower.flower_collider_active and (
                np.linalg.norm(center - flower.position) < radius + flower.flower_radius
            ):
                hits += 1
            if flower.nectar_collider_active and (
                np.linalg.norm(center - flower.center_position) < radius + flower.nectar_radius
            ):
                hits += 1

        relative = center - self.flower_area.position
        horizontal = np.hypot(relative[0], relative[2])
        if horizontal + radius > self.boundary_radius:
            hits += 1
        if relative[1] - radius < 0.0:
            hits += 1
        if relative[1] + radius > self.config.ceiling_height:
            hits += 1
        return hits

    def step(self, beak_tip_offset: Vector3) -> StepContacts:
        """
        Integrate the body for one fixed step and collect contacts.

        Parameters
        ----------
        beak_tip_offset : Vector3
            Beak tip position in the body's local frame.

        Returns
        -------
        StepContacts
            Boundary collision flag and nectar contacts for this step.
        """
        dt = self.config.fixed_delta_time
        self.body.integrate(dt)
        contacts = StepContacts(boundary_collision=self._resolve_boundary())

        position = self.body.position
        beak_tip = position + rotate_vector(self.body.rotation, beak_tip_offset)
        for flower in self.flower_area.flowers:
            if not flower.nectar_collider_active:
                continue
            center = flower.center_position
            if np.linalg.norm(position - center) < self.config.trigger_radius + flower.nectar_radius:
                closest = closest_point_on_sphere(center, flower.nectar_radius, beak_tip)
                contacts.nectar_contacts.append((flower.nectar_collider, closest))

        return contacts

    def _resolve_boundary(self) -> bool:
        """Push the body back inside the area; report wall or ceiling hits."""
        body = self.body
        radius = self.config.body_radius
        relative = body.position - self.flower_area.position
        position = body.position
        hit_boundary = False

        horizontal = np.array([relative[0], 0.0, relative[2]])
        horizontal_distance = np.linalg.norm(horizontal)
        if horizontal_distance + radius > self.boundary_radius:
            outward = normalize(horizontal)
            position = position - outward * (horizontal_distance + radius - self.boundary_radius)
            body.velocity = body.velocity - outward * max(0.0, float(body.velocity @ outward))
            hit_boundary = True

        if relative[1] + radius > self.config.ceiling_height:
            position[1] = self.flower_area.position[1] + self.config.ceiling_height - radius
            body.velocity[1] = min(0.0, body.velocity[1])
            hit_boundary = True
        elif relative[1] - radius < 0.0:
            # The ground stops the body but is not part of the boundary
            position[1] = self.flower_area.position[1] + radius
            body.velocity[1] = max(0.0, body.velocity[1])

        if hit_boundary:
            logger.debug(f"Boundary collision at {position.tolist()}")
        body.set_pose(position, body.rotation)
        return hit_boundary

"""The hummingbird agent that flies around a flower area feeding on nectar."""

from __future__ import annotations

from collections.abc import Hashable
from typing import TYPE_CHECKING

import numpy as np
from pydantic import BaseModel, field_validator

from hummingbird.agent.motion import (
    DEFAULT_MAX_PITCH_ANGLE,
    DEFAULT_MOVE_FORCE,
    DEFAULT_PITCH_SPEED,
    DEFAULT_YAW_SPEED,
    MotionModel,
)
from hummingbird.agent.perception import build_observation, select_nearest_flower
from hummingbird.agent.reward_calculator import RewardCalculator
from hummingbird.agent.spawn import (
    DEFAULT_FREE_ROAM_HEIGHT,
    DEFAULT_FREE_ROAM_RADIUS,
    DEFAULT_MAX_SPAWN_ATTEMPTS,
    DEFAULT_NEAR_FLOWER_DISTANCE,
    DEFAULT_NEAR_FLOWER_PROBABILITY,
    DEFAULT_SPAWN_CLEARANCE_RADIUS,
    SpawnMode,
    SpawnPlanner,
)
from hummingbird.agent.tracker import EpisodeTracker
from hummingbird.env.physics import DEFAULT_FIXED_DELTA_TIME
from hummingbird.errors import ERROR_FREEZE_IN_TRAINING, InvariantViolationError
from hummingbird.geometry import FORWARD, normalize, rotate_vector
from hummingbird.logging_config import logger

if TYPE_CHECKING:
    from hummingbird.dtypes import DebugLine, Quaternion, Vector3
    from hummingbird.env.flower import Flower
    from hummingbird.env.flower_area import FlowerArea
    from hummingbird.env.physics import RigidBody

# Defaults
DEFAULT_MAX_STEPS = 5000
DEFAULT_NECTAR_PER_FEED = 0.01
DEFAULT_BEAK_TIP_OFFSET = (0.0, 0.0, 0.08)
# Maximum distance from the beak tip to accept a nectar collision
DEFAULT_BEAK_TIP_RADIUS = 0.008
DEFAULT_REWARD_NECTAR = 0.01
DEFAULT_REWARD_ALIGNMENT_BONUS = 0.02
DEFAULT_PENALTY_BOUNDARY_COLLISION = 0.5


class AgentConfig(BaseModel):
    """Configuration for the hummingbird agent."""

    training_mode: bool = True
    max_steps: int = DEFAULT_MAX_STEPS  # Ignored (unlimited) outside training mode
    move_force: float = DEFAULT_MOVE_FORCE
    pitch_speed: float = DEFAULT_PITCH_SPEED
    yaw_speed: float = DEFAULT_YAW_SPEED
    max_pitch_angle: float = DEFAULT_MAX_PITCH_ANGLE
    nectar_per_feed: float = DEFAULT_NECTAR_PER_FEED
    beak_tip_offset: tuple[float, float, float] = DEFAULT_BEAK_TIP_OFFSET
    beak_tip_radius: float = DEFAULT_BEAK_TIP_RADIUS

    @field_validator("max_steps")
    @classmethod
    def validate_max_steps(cls, v: int) -> int:
        """Validate the step limit is not negative."""
        if v < 0:
            msg = f"max_steps must be non-negative (0 means unlimited), got {v}."
            raise ValueError(msg)
        return v


class RewardConfig(BaseModel):
    """Configuration for the reward function."""

    reward_nectar: float = DEFAULT_REWARD_NECTAR  # Flat reward per feeding contact
    reward_alignment_bonus: float = (
        DEFAULT_REWARD_ALIGNMENT_BONUS  # Scaled by how squarely the flower is approached
    )
    penalty_boundary_collision: float = DEFAULT_PENALTY_BOUNDARY_COLLISION


class SpawnConfig(BaseModel):
    """Configuration for episode start placement."""

    max_attempts: int = DEFAULT_MAX_SPAWN_ATTEMPTS
    clearance_radius: float = DEFAULT_SPAWN_CLEARANCE_RADIUS
    near_flower_distance: tuple[float, float] = DEFAULT_NEAR_FLOWER_DISTANCE
    free_roam_height: tuple[float, float] = DEFAULT_FREE_ROAM_HEIGHT
    free_roam_radius: tuple[float, float] = DEFAULT_FREE_ROAM_RADIUS
    near_flower_probability: float = DEFAULT_NEAR_FLOWER_PROBABILITY  # Training mode only


class HummingbirdAgent:
    """
    Hummingbird agent that feeds on the flowers of a flower area.

    The agent owns no physics: it reads and drives its body through the
    ``RigidBody`` interface. A driver calls the lifecycle methods in order:
    ``on_episode_begin`` once per episode, then per fixed step
    ``collect_observations``, ``on_action_received``, any contact callbacks
    (``on_nectar_contact``, ``on_boundary_collision``) and ``fixed_update``.

    Attributes
    ----------
    body : RigidBody
        The physics body of the bird.
    flower_area : FlowerArea
        The area the bird lives in.
    config : AgentConfig
        Agent configuration.
    frozen : bool
        Whether actions are currently ignored.
    nearest_flower_index : int | None
        Index into ``flower_area.flowers`` of the nearest flower with nectar.
    """

    def __init__(  # noqa: PLR0913
        self,
        body: RigidBody,
        flower_area: FlowerArea,
        rng: np.random.Generator,
        config: AgentConfig | None = None,
        reward_config: RewardConfig | None = None,
        spawn_config: SpawnConfig | None = None,
        fixed_delta_time: float = DEFAULT_FIXED_DELTA_TIME,
    ) -> None:
        """
        Initialize the hummingbird agent.

        Parameters
        ----------
        body : RigidBody
            The physics body of the bird.
        flower_area : FlowerArea
            The discovered flower area.
        rng : np.random.Generator
            Random source for flower resets and spawn placement.
        config : AgentConfig | None, optional
            Agent configuration.
        reward_config : RewardConfig | None, optional
            Reward configuration.
        spawn_config : SpawnConfig | None, optional
            Spawn configuration.
        fixed_delta_time : float, optional
            Duration of one fixed step in seconds.
        """
        self.body = body
        self.flower_area = flower_area
        self.rng = rng
        self.config = config or AgentConfig()
        self.reward_config = reward_config or RewardConfig()
        self.spawn_config = spawn_config or SpawnConfig()
        self.fixed_delta_time = fixed_delta_time

        # If not training, there is no step limit
        self.max_steps = self.config.max_steps if self.config.training_mode else 0

        self.beak_tip_offset = np.asarray(self.config.beak_tip_offset, dtype=np.float64)
        self.smoothed_pitch_change = 0.0
        self.smoothed_yaw_change = 0.0
        self.frozen = False
        self.nearest_flower_index: int | None = None
        self.last_spawn_mode: SpawnMode | None = None

        self._motion_model = MotionModel(
            move_force=self.config.move_force,
            pitch_speed=self.config.pitch_speed,
            yaw_speed=self.config.yaw_speed,
            max_pitch_angle=self.config.max_pitch_angle,
        )
        self._reward_calculator = RewardCalculator(self.reward_config)
        self._spawn_planner = SpawnPlanner(
            rng=rng,
            clearance_radius=self.spawn_config.clearance_radius,
            near_flower_distance=self.spawn_config.near_flower_distance,
            free_roam_height=self.spawn_config.free_roam_height,
            free_roam_radius=self.spawn_config.free_roam_radius,
            near_flower_probability=self.spawn_config.near_flower_probability,
        )
        self._episode_tracker = EpisodeTracker()

    @property
    def training_mode(self) -> bool:
        """Whether the agent is training (rewards, resets and step limits)."""
        return self.config.training_mode

    @property
    def nectar_obtained(self) -> float:
        """Nectar obtained this episode."""
        return self._episode_tracker.nectar_obtained

    @property
    def cumulative_reward(self) -> float:
        """Total reward received this episode."""
        return self._episode_tracker.rewards

    @property
    def step_count(self) -> int:
        """Fixed steps simulated this episode."""
        return self._episode_tracker.steps

    @property
    def episode_tracker(self) -> EpisodeTracker:
        """Episode statistics."""
        return self._episode_tracker

    @property
    def is_done(self) -> bool:
        """Whether the step limit has been reached."""
        return self.max_steps > 0 and self.step_count >= self.max_steps

    @property
    def nearest_flower(self) -> Flower | None:
        """The nearest flower with nectar, or None."""
        if self.nearest_flower_index is None:
            return None
        return self.flower_area.flowers[self.nearest_flower_index]

    @property
    def forward(self) -> Vector3:
        """World forward direction of the bird."""
        return rotate_vector(self.body.rotation, FORWARD)

    @property
    def local_rotation(self) -> Quaternion:
        """Rotation of the bird relative to the flower area."""
        return self.body.rotation

    @property
    def beak_tip_position(self) -> Vector3:
        """World position of the beak tip."""
        return self.body.position + rotate_vector(self.body.rotation, self.beak_tip_offset)

    def on_episode_begin(self) -> None:
        """
        Reset the agent and, in training, the flower area for a new episode.

        Raises
        ------
        SpawnError
            If no collision-free spawn pose is found.
        """
        if self.training_mode:
            # Only reset flowers in training, where each area has one agent
            self.flower_area.reset_flowers(self.rng)

        self._episode_tracker.reset()
        self.body.reset_velocity()
        self.smoothed_pitch_change = 0.0
        self.smoothed_yaw_change = 0.0

        # Spawn in front of a flower half of the time during training
        self.last_spawn_mode = self._spawn_planner.choose_mode(training_mode=self.training_mode)
        pose = self._spawn_planner.find_safe_pose(
            self.last_spawn_mode,
            self.flower_area,
            self.body.overlap_sphere,
            max_attempts=self.spawn_config.max_attempts,
        )
        self.body.set_pose(pose.position, pose.rotation)

        self.update_nearest_flower(force_reset=True)
        logger.info(
            f"Episode started ({self.last_spawn_mode.value}) at {pose.position.round(3).tolist()}",
        )

    def on_action_received(self, action: np.ndarray) -> None:
        """
        Apply an action from a brain or a manual controller.

        Parameters
        ----------
        action : np.ndarray
            Move x/y/z, pitch rate and yaw rate.
        """
        # Don't take actions if frozen
        if self.frozen:
            return

        result = self._motion_model.apply_action(
            action,
            self.body.current_euler_rotation(),
            self.smoothed_pitch_change,
            self.smoothed_yaw_change,
            self.fixed_delta_time,
        )
        self.body.apply_force(result.force)
        self.body.set_rotation_euler(result.rotation)
        self.smoothed_pitch_change = result.smoothed_pitch_change
        self.smoothed_yaw_change = result.smoothed_yaw_change

    def collect_observations(self) -> np.ndarray:
        """Observe the nearest flower; zeros when there is none."""
        return build_observation(
            local_rotation=self.local_rotation,
            beak_position=self.beak_tip_position,
            beak_forward=self.forward,
            flower=self.nearest_flower,
            area_diameter=self.flower_area.diameter,
        )

    def freeze(self) -> None:
        """
        Prevent the agent from moving and taking actions.

        Raises
        ------
        InvariantViolationError
            In training mode.
        """
        self._check_not_training()
        self.frozen = True
        self.body.set_body_sleeping(True)

    def unfreeze(self) -> None:
        """
        Resume agent movement and actions.

        Raises
        ------
        InvariantViolationError
            In training mode.
        """
        self._check_not_training()
        self.frozen = False
        self.body.set_body_sleeping(False)

    def _check_not_training(self) -> None:
        if self.training_mode:
            logger.error(ERROR_FREEZE_IN_TRAINING)
            raise InvariantViolationError(ERROR_FREEZE_IN_TRAINING)

    def on_nectar_contact(self, nectar_collider: Hashable, closest_point: Vector3) -> float:
        """
        Handle the body touching a nectar collider.

        Only a contact within the beak tip radius feeds the bird.

        Parameters
        ----------
        nectar_collider : Hashable
            Handle of the touched nectar collider.
        closest_point : Vector3
            Point on the collider closest to the beak tip.

        Returns
        -------
        float
            Reward given for this contact.

        Raises
        ------
        UnknownNectarColliderError
            If the handle does not belong to this flower area.
        """
        flower = self.flower_area.get_flower_from_nectar(nectar_collider)
        if not flower.nectar_collider_active:
            return 0.0

        beak_tip = self.beak_tip_position
        if np.linalg.norm(beak_tip - np.asarray(closest_point)) >= self.config.beak_tip_radius:
            # A collision with anything but the beak tip does not count
            return 0.0

        nectar_received = flower.feed(self.config.nectar_per_feed)
        self._episode_tracker.track_feed(
            nectar_received,
            flower_emptied=not flower.has_nectar,
        )

        alignment = float(np.dot(normalize(self.forward), -normalize(flower.up_vector)))
        reward = self._reward_calculator.on_feed(
            nectar_received,
            alignment,
            training_mode=self.training_mode,
        )
        self.add_reward(reward)

        if not flower.has_nectar:
            logger.info(f"Flower {flower.nectar_collider!r} emptied.")
            self.update_nearest_flower()

        return reward

    def on_boundary_collision(self) -> float:
        """Handle the body hitting the area boundary."""
        self._episode_tracker.track_boundary_collision()
        reward = self._reward_calculator.on_boundary_collision(training_mode=self.training_mode)
        self.add_reward(reward)
        return reward

    def add_reward(self, reward: float) -> None:
        """Add to the episode's cumulative reward."""
        if reward != 0.0:
            self._episode_tracker.track_reward(reward)

    def update_nearest_flower(self, *, force_reset: bool = False) -> None:
        """Re-select the nearest flower with nectar."""
        self.nearest_flower_index = select_nearest_flower(
            self.flower_area.flowers,
            self.beak_tip_position,
            self.nearest_flower_index,
            force_reset=force_reset,
        )

    def fixed_update(self) -> None:
        """
        Finish a fixed simulation step.

        Counts the step and re-selects the nearest flower if it has been
        emptied, which can happen when another agent shares the area.
        """
        self._episode_tracker.track_step()
        nearest = self.nearest_flower
        if nearest is not None and not nearest.has_nectar:
            self.update_nearest_flower()

    def render_update(self) -> DebugLine | None:
        """Line from the beak tip to the nearest flower, for debug drawing."""
        nearest = self.nearest_flower
        if nearest is None:
            return None
        return (self.beak_tip_position, nearest.center_position)
